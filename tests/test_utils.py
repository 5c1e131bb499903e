"""
Test utilities and helper functions for the empire-military test suite.

This module provides builders for maps and units, recording stand-ins for
the engine's external collaborators and small event helpers.
"""
from typing import List, Optional, Sequence, Tuple

from empire_military.core.data_structures import Building, HexCoord, TerritoryData
from empire_military.core.events import EventType
from empire_military.game.territory_map import TerritoryMap
from empire_military.game.unit import MilitaryUnit, UnitSnapshot
from empire_military.core.game_enums import SpecialAbility, UnitKind


class TerritoryMapBuilder:
    """Builder for creating test maps with specific layouts."""

    def __init__(self):
        self.territories: List[TerritoryData] = []

    def with_territory(
        self,
        q: int,
        r: int,
        terrain: str = "plains",
        owner: Optional[str] = None,
        buildings: Sequence[Tuple[str, int]] = (),
        resource: Optional[str] = None,
        capital: bool = False
    ) -> "TerritoryMapBuilder":
        """Add a territory at an axial coordinate."""
        self.territories.append(TerritoryData(
            id=HexCoord(q, r).to_id(),
            type=terrain,
            buildings=tuple(Building(kind, level) for kind, level in buildings),
            owner=owner,
            is_capital=capital,
            resource=resource,
            q=q,
            r=r,
        ))
        return self

    def build(self) -> TerritoryMap:
        return TerritoryMap(self.territories)


def make_territory(
    territory_id: str = "0,0",
    terrain: str = "plains",
    owner: Optional[str] = None,
    buildings: Sequence[Tuple[str, int]] = (),
    resource: Optional[str] = None,
    capital: bool = False
) -> TerritoryData:
    """Create a standalone territory record."""
    coord = HexCoord.from_id(territory_id)
    return TerritoryData(
        id=territory_id,
        type=terrain,
        buildings=tuple(Building(kind, level) for kind, level in buildings),
        owner=owner,
        is_capital=capital,
        resource=resource,
        q=coord.q,
        r=coord.r,
    )


class UnitFactory:
    """Creates live units and snapshots straight from the catalog."""

    def __init__(self, unit_catalog):
        self.unit_catalog = unit_catalog
        self._counter = 0

    def unit(self, type_id: str, position: str = "0,0", health: int = 100, level: int = 1) -> MilitaryUnit:
        self._counter += 1
        unit = MilitaryUnit.from_type(f"{type_id}_t{self._counter}", self.unit_catalog.get(type_id), position)
        unit.health = health
        unit.level = level
        return unit

    def units(self, type_id: str, count: int, position: str = "0,0") -> List[MilitaryUnit]:
        return [self.unit(type_id, position) for _ in range(count)]


def make_snapshot(
    strength: int,
    health: int = 100,
    level: int = 1,
    terrain_bonus: float = 0.0,
    ability_bonus: float = 0.0,
    kind: UnitKind = UnitKind.INFANTRY,
    ability: Optional[SpecialAbility] = None
) -> UnitSnapshot:
    """Create a combat snapshot with explicit numbers."""
    return UnitSnapshot(
        unit_id=f"snap_{strength}_{health}_{level}",
        type_id="warrior",
        kind=kind,
        strength=strength,
        health=health,
        level=level,
        special_ability=ability,
        terrain_bonus=terrain_bonus,
        ability_bonus=ability_bonus,
    )


class WorkerPool:
    """In-memory worker stock implementing the worker callbacks."""

    def __init__(self, workers: int = 5, fail_after: Optional[int] = None):
        self.workers = workers
        self.fail_after = fail_after
        self.converted = 0
        self.restored = 0

    def has_worker(self, territory_id: str) -> bool:
        return self.workers > 0

    def convert_worker(self, territory_id: str) -> bool:
        if self.workers <= 0:
            return False
        if self.fail_after is not None and self.converted >= self.fail_after:
            return False
        self.workers -= 1
        self.converted += 1
        return True

    def restore_worker(self, territory_id: str) -> None:
        self.workers += 1
        self.restored += 1


class RecordingActions:
    """AIActions stand-in that records every command it receives."""

    def __init__(self, train_result: bool = True, attack_result: bool = True, card_result: bool = True):
        self.train_result = train_result
        self.attack_result = attack_result
        self.card_result = card_result
        self.trained: List[Tuple[str, str]] = []
        self.attacks: List[Tuple[str, str]] = []
        self.cards: List[str] = []

    def train_unit(self, territory_id: str, unit_type_id: str) -> bool:
        self.trained.append((territory_id, unit_type_id))
        return self.train_result

    def execute_attack(self, source_id: str, target_id: str) -> bool:
        self.attacks.append((source_id, target_id))
        return self.attack_result

    def play_tactical_card(self, card_id: str) -> bool:
        self.cards.append(card_id)
        return self.card_result


class EventRecorder:
    """Universal subscriber that keeps every delivered event."""

    def __init__(self, event_manager):
        self.events = []
        event_manager.subscribe_all(self.events.append, subscriber_name="EventRecorder")

    def of_type(self, event_type: EventType) -> list:
        return [e for e in self.events if e.event_type is event_type]


def assert_close(actual: float, expected: float, tolerance: float = 1e-9) -> None:
    """Assert two floats are equal within a tolerance."""
    assert abs(actual - expected) <= tolerance, f"Expected {expected}, got {actual}"
