"""Military doctrine registry.

A doctrine is a long-lived set of modifiers. Every modifier field is always
present and defaults to neutral, so code that applies modifiers never has to
check whether a doctrine defines a given effect.
"""

import os
from dataclasses import dataclass, fields
from typing import Iterable, Iterator, Optional

import yaml

from .unit_templates import DATA_DIR, NotFoundError

DEFAULT_DOCTRINES_PATH = os.path.join(DATA_DIR, "doctrines", "military_doctrines.yaml")


@dataclass(frozen=True)
class DoctrineModifiers:
    """Modifier set of a doctrine.

    Fractions are relative (0.2 means +20%); movement is in whole moves.
    """
    attack: float = 0.0
    defense: float = 0.0
    strength: float = 0.0
    movement: int = 0
    maintenance: float = 0.0
    fortification: float = 0.0
    terrain: float = 0.0
    experience_gain: float = 0.0
    production_discount: float = 0.0

    @classmethod
    def combine(cls, *modifier_sets: "DoctrineModifiers") -> "DoctrineModifiers":
        """Fold any number of modifier sets into one by summing each field."""
        totals = {f.name: 0 for f in fields(cls)}
        for modifiers in modifier_sets:
            for name in totals:
                totals[name] += getattr(modifiers, name)
        return cls(**totals)

    @property
    def is_neutral(self) -> bool:
        return self == NEUTRAL_MODIFIERS

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "DoctrineModifiers":
        data = data or {}
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown doctrine modifiers: {sorted(unknown)}")
        return cls(**data)


NEUTRAL_MODIFIERS = DoctrineModifiers()


@dataclass(frozen=True)
class MilitaryDoctrine:
    """A named doctrine with its modifiers and unlocks."""
    id: str
    name: str
    description: str = ""
    modifiers: DoctrineModifiers = NEUTRAL_MODIFIERS
    unlocked_cards: tuple[str, ...] = ()
    unlocked_units: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, doctrine_id: str, data: dict) -> "MilitaryDoctrine":
        return cls(
            id=doctrine_id,
            name=data.get("name", doctrine_id),
            description=data.get("description", ""),
            modifiers=DoctrineModifiers.from_dict(data.get("modifiers")),
            unlocked_cards=tuple(data.get("unlocked_cards", ())),
            unlocked_units=tuple(data.get("unlocked_units", ())),
        )


class DoctrineRegistry:
    """Registry of doctrines plus the single current doctrine."""

    def __init__(self, doctrines: Iterable[MilitaryDoctrine]):
        self._doctrines: dict[str, MilitaryDoctrine] = {d.id: d for d in doctrines}
        self._current_id: Optional[str] = None

    @classmethod
    def from_yaml(cls, path: str = DEFAULT_DOCTRINES_PATH) -> "DoctrineRegistry":
        try:
            with open(path, 'r') as f:
                data = yaml.safe_load(f)
        except FileNotFoundError:
            raise FileNotFoundError(f"Doctrines file not found: {path}")

        try:
            return cls(MilitaryDoctrine.from_dict(did, entry) for did, entry in data["military_doctrines"].items())
        except KeyError as e:
            raise ValueError(f"Invalid doctrine structure in {path}: missing {e}")

    def get(self, doctrine_id: str) -> MilitaryDoctrine:
        try:
            return self._doctrines[doctrine_id]
        except KeyError:
            raise NotFoundError("doctrine registry", doctrine_id) from None

    def has(self, doctrine_id: str) -> bool:
        return doctrine_id in self._doctrines

    @property
    def current(self) -> Optional[MilitaryDoctrine]:
        if self._current_id is None:
            return None
        return self._doctrines[self._current_id]

    def set_current(self, doctrine_id: str) -> MilitaryDoctrine:
        """Make a doctrine current, replacing any previous one."""
        doctrine = self.get(doctrine_id)
        self._current_id = doctrine_id
        return doctrine

    def clear_current(self) -> None:
        self._current_id = None

    def current_modifiers(self) -> DoctrineModifiers:
        """Modifiers of the current doctrine, neutral when none is set."""
        return DoctrineModifiers.combine(*(d.modifiers for d in (self.current,) if d is not None))

    def __iter__(self) -> Iterator[MilitaryDoctrine]:
        return iter(self._doctrines.values())

    def __len__(self) -> int:
        return len(self._doctrines)
