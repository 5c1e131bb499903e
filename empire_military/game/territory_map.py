"""In-memory hex territory map.

TerritoryMap is the default world collaborator: it answers territory and
adjacency queries for the engine and records territory-control updates
coming back from combat. Territory ids are axial "q,r" strings.
"""

import os
from dataclasses import replace
from typing import Iterable, Iterator, Optional

import yaml

from ..core.data_structures import HexCoord, TerritoryData
from ..core.game_info import COMBAT_MECHANICS
from .unit_templates import DATA_DIR

DEFAULT_MAP_PATH = os.path.join(DATA_DIR, "maps", "border_skirmish.yaml")


class TerritoryMap:
    """Axial hex map of territories keyed by id."""

    def __init__(self, territories: Iterable[TerritoryData] = ()):
        self._territories: dict[str, TerritoryData] = {}
        # defender id -> {attacker owner: accumulated partial control}
        self._control: dict[str, dict[str, int]] = {}
        for territory in territories:
            self.add_territory(territory)

    @classmethod
    def from_yaml(cls, path: str = DEFAULT_MAP_PATH) -> "TerritoryMap":
        """Load a map from a YAML file with a top-level ``territories`` list."""
        try:
            with open(path, 'r') as f:
                data = yaml.safe_load(f)
        except FileNotFoundError:
            raise FileNotFoundError(f"Map file not found: {path}")

        try:
            return cls(TerritoryData.from_dict(entry) for entry in data["territories"])
        except KeyError as e:
            raise ValueError(f"Invalid map structure in {path}: missing {e}")

    def add_territory(self, territory: TerritoryData) -> None:
        """Add or replace a territory."""
        self._territories[territory.id] = territory

    # ============== WorldView ==============

    def get_territory(self, territory_id: str) -> Optional[TerritoryData]:
        return self._territories.get(territory_id)

    def get_neighbors(self, territory_id: str) -> list[str]:
        """Ids of the existing territories adjacent to a territory."""
        territory = self._territories.get(territory_id)
        if territory is None:
            return []
        return [c.to_id() for c in territory.coord.neighbors() if c.to_id() in self._territories]

    def hex_distance(self, a: str, b: str) -> int:
        ta = self._territories.get(a)
        tb = self._territories.get(b)
        coord_a = ta.coord if ta else HexCoord.from_id(a)
        coord_b = tb.coord if tb else HexCoord.from_id(b)
        return coord_a.distance_to(coord_b)

    # ============== Queries ==============

    def owned_by(self, owner: str) -> list[TerritoryData]:
        return [t for t in self._territories.values() if t.owner == owner]

    def capital_of(self, owner: str) -> Optional[TerritoryData]:
        for territory in self._territories.values():
            if territory.owner == owner and territory.is_capital:
                return territory
        return None

    def control_of(self, territory_id: str) -> dict[str, int]:
        """Accumulated partial control per claimant."""
        return dict(self._control.get(territory_id, {}))

    def set_owner(self, territory_id: str, owner: Optional[str]) -> None:
        territory = self._territories[territory_id]
        self._territories[territory_id] = replace(territory, owner=owner, is_capital=territory.is_capital and owner == territory.owner)
        self._control.pop(territory_id, None)

    # ============== Territory control ==============

    def update_territory_control(
        self,
        defender_id: str,
        attacker_id: str,
        full_conquest: bool,
        control_percent: Optional[int] = None
    ) -> None:
        """Apply a combat outcome to territory ownership.

        A full conquest hands the defending territory to the attacking
        territory's owner. Partial control accumulates per claimant and
        transfers ownership once it reaches the full-conquest threshold.
        """
        attacker = self._territories.get(attacker_id)
        defender = self._territories.get(defender_id)
        if attacker is None or defender is None or attacker.owner is None:
            return

        if full_conquest:
            self.set_owner(defender_id, attacker.owner)
            return

        claims = self._control.setdefault(defender_id, {})
        claims[attacker.owner] = claims.get(attacker.owner, 0) + (control_percent or 0)
        if claims[attacker.owner] >= COMBAT_MECHANICS["FULL_CONQUEST_THRESHOLD"]:
            self.set_owner(defender_id, attacker.owner)

    def __iter__(self) -> Iterator[TerritoryData]:
        return iter(self._territories.values())

    def __len__(self) -> int:
        return len(self._territories)

    def __contains__(self, territory_id: object) -> bool:
        return territory_id in self._territories
