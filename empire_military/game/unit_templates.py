"""Unit type catalog.

This module defines the static unit type definitions the rest of the engine
builds on. Types are loaded from YAML and converted to immutable UnitType
records; the catalog is never mutated after load.
"""

import os
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional

import yaml

from ..core.data_structures import CostMap
from ..core.game_enums import Era, SpecialAbility, UnitKind

DATA_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "assets", "data")
DEFAULT_UNIT_TYPES_PATH = os.path.join(DATA_DIR, "units", "unit_types.yaml")


class NotFoundError(KeyError):
    """Raised when a catalog lookup fails.

    Ids are only ever produced by the catalogs themselves, so a miss means the
    caller holds inconsistent data.
    """

    def __init__(self, catalog: str, item_id: str):
        super().__init__(f"{catalog}: no entry with id {item_id!r}")
        self.catalog = catalog
        self.item_id = item_id


@dataclass(frozen=True)
class UnitType:
    """Immutable definition of a unit type."""
    id: str
    name: str
    kind: UnitKind
    strength: int
    cost: CostMap = field(default_factory=dict)
    required_workers: int = 1
    required_resources: CostMap = field(default_factory=dict)
    maintenance_cost: CostMap = field(default_factory=dict)
    movement_range: int = 1
    era: Era = Era.PRIMITIVE
    special_ability: Optional[SpecialAbility] = None
    terrain_effectiveness: dict[str, int] = field(default_factory=dict)
    upgrade_to: Optional[str] = None
    vulnerable_to: tuple[str, ...] = ()
    advantage_against: tuple[str, ...] = ()
    terrain_synergy: dict[str, int] = field(default_factory=dict)
    resource_synergy: dict[str, int] = field(default_factory=dict)
    description: str = ""

    @property
    def production_cost(self) -> int:
        return self.cost.get("production", 0)

    @property
    def is_cavalry(self) -> bool:
        return self.kind is UnitKind.CAVALRY

    def terrain_bonus(self, terrain_type: str) -> int:
        """Flat strength bonus (or penalty) this type gets on a terrain."""
        return self.terrain_effectiveness.get(terrain_type, 0)

    @classmethod
    def from_dict(cls, type_id: str, data: dict) -> "UnitType":
        ability = data.get("special_ability")
        return cls(
            id=type_id,
            name=data.get("name", type_id),
            kind=UnitKind(data["kind"]),
            strength=data["strength"],
            cost=dict(data.get("cost", {})),
            required_workers=data.get("required_workers", 1),
            required_resources=dict(data.get("required_resources", {})),
            maintenance_cost=dict(data.get("maintenance_cost", {})),
            movement_range=data.get("movement_range", 1),
            era=Era.from_name(data.get("era", "Primitive")),
            special_ability=SpecialAbility(ability) if ability else None,
            terrain_effectiveness=dict(data.get("terrain_effectiveness", {})),
            upgrade_to=data.get("upgrade_to"),
            vulnerable_to=tuple(data.get("vulnerable_to", ())),
            advantage_against=tuple(data.get("advantage_against", ())),
            terrain_synergy=dict(data.get("terrain_synergy", {})),
            resource_synergy=dict(data.get("resource_synergy", {})),
            description=data.get("description", ""),
        )


class UnitCatalog:
    """Read-only registry of unit types keyed by id."""

    def __init__(self, unit_types: Iterable[UnitType]):
        self._types: dict[str, UnitType] = {t.id: t for t in unit_types}
        self._validate()

    def _validate(self) -> None:
        for unit_type in self._types.values():
            if unit_type.upgrade_to and unit_type.upgrade_to not in self._types:
                raise ValueError(
                    f"Unit type {unit_type.id!r} upgrades to unknown type {unit_type.upgrade_to!r}"
                )

    @classmethod
    def from_yaml(cls, path: str = DEFAULT_UNIT_TYPES_PATH) -> "UnitCatalog":
        """Load the catalog from a YAML file.

        Args:
            path: YAML file with a top-level ``unit_types`` mapping

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If an entry is malformed
        """
        try:
            with open(path, 'r') as f:
                data = yaml.safe_load(f)
        except FileNotFoundError:
            raise FileNotFoundError(f"Unit types file not found: {path}")

        try:
            return cls(UnitType.from_dict(type_id, entry) for type_id, entry in data["unit_types"].items())
        except KeyError as e:
            raise ValueError(f"Invalid unit type structure in {path}: missing {e}")

    def get(self, type_id: str) -> UnitType:
        """Get a unit type by id.

        Raises:
            NotFoundError: If the id is not in the catalog
        """
        try:
            return self._types[type_id]
        except KeyError:
            raise NotFoundError("unit catalog", type_id) from None

    def has(self, type_id: str) -> bool:
        return type_id in self._types

    def filter_by_era(self, era: Era, include_earlier: bool = True) -> list[UnitType]:
        """Unit types available in an era (optionally including earlier eras)."""
        if include_earlier:
            return [t for t in self._types.values() if t.era.value <= era.value]
        return [t for t in self._types.values() if t.era is era]

    def filter_by_kind(self, kind: UnitKind) -> list[UnitType]:
        return [t for t in self._types.values() if t.kind is kind]

    def ids(self) -> list[str]:
        return list(self._types)

    def __iter__(self) -> Iterator[UnitType]:
        return iter(self._types.values())

    def __len__(self) -> int:
        return len(self._types)

    def __contains__(self, type_id: object) -> bool:
        return type_id in self._types
