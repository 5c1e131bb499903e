"""Unified data structures for territories, coordinates and costs.

This module provides the value types shared between the engine and its
external collaborators (the territory map and the resource economy).

Data Flow:
1. TerritoryData (world collaborator) -> combat snapshot (session) -> round scoring
2. CostMap (catalogs) -> pay_resources callback (economy)

Territory records are frozen: the engine never mutates a territory, it only
asks the collaborator for a fresh copy.
"""

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from .game_enums import DEFENSIVE_BUILDINGS


CostMap = dict[str, int]


@dataclass(frozen=True)
class HexCoord:
    """Axial hex coordinate.

    Territory ids are the "q,r" string form of this coordinate, which is the
    format the territory map uses for its keys.
    """
    q: int
    r: int

    # Neighbour offsets in axial space, clockwise from east
    DIRECTIONS = ((1, 0), (1, -1), (0, -1), (-1, 0), (-1, 1), (0, 1))

    def __add__(self, other: "HexCoord") -> "HexCoord":
        return HexCoord(self.q + other.q, self.r + other.r)

    def __iter__(self):
        yield self.q
        yield self.r

    def neighbors(self) -> list["HexCoord"]:
        """Return the six adjacent coordinates."""
        return [HexCoord(self.q + dq, self.r + dr) for dq, dr in self.DIRECTIONS]

    def distance_to(self, other: "HexCoord") -> int:
        """Hex distance in steps (cube-coordinate Chebyshev distance)."""
        dq = self.q - other.q
        dr = self.r - other.r
        ds = -dq - dr
        return max(abs(dq), abs(dr), abs(ds))

    def to_id(self) -> str:
        """Format as a territory id."""
        return f"{self.q},{self.r}"

    @classmethod
    def from_id(cls, territory_id: str) -> "HexCoord":
        """Parse a "q,r" territory id."""
        try:
            q_str, r_str = territory_id.split(",")
            return cls(int(q_str), int(r_str))
        except ValueError:
            raise ValueError(f"Invalid territory id: {territory_id!r}")


@dataclass(frozen=True)
class Building:
    """A building standing in a territory."""
    type: str
    level: int = 1

    @property
    def is_defensive(self) -> bool:
        return self.type in DEFENSIVE_BUILDINGS


@dataclass(frozen=True)
class TerritoryData:
    """Read-only view of a territory as supplied by the world collaborator."""
    id: str
    type: str
    buildings: tuple[Building, ...] = ()
    owner: Optional[str] = None
    is_capital: bool = False
    resource: Optional[str] = None
    q: int = 0
    r: int = 0

    @property
    def coord(self) -> HexCoord:
        return HexCoord(self.q, self.r)

    @property
    def defensive_buildings(self) -> list[Building]:
        return [b for b in self.buildings if b.is_defensive]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TerritoryData":
        """Build a territory from a plain mapping (YAML/JSON style)."""
        buildings = tuple(
            Building(b["type"], b.get("level", 1)) for b in data.get("buildings", ())
        )
        q = data.get("q", 0)
        r = data.get("r", 0)
        return cls(
            id=data.get("id", HexCoord(q, r).to_id()),
            type=data.get("type", "plains"),
            buildings=buildings,
            owner=data.get("owner"),
            is_capital=data.get("is_capital", False),
            resource=data.get("resource"),
            q=q,
            r=r,
        )


def merge_costs(*costs: Mapping[str, int]) -> CostMap:
    """Sum several cost maps into one."""
    merged: CostMap = {}
    for cost in costs:
        for resource, amount in cost.items():
            merged[resource] = merged.get(resource, 0) + amount
    return merged


@dataclass
class ResourcePool:
    """Simple resource stock for tests and standalone play.

    The real economy is an external collaborator; this pool implements the
    same pay/can-afford contract in memory.
    """
    amounts: dict[str, int] = field(default_factory=dict)

    def can_afford(self, cost: Mapping[str, int]) -> bool:
        return all(self.amounts.get(res, 0) >= amount for res, amount in cost.items())

    def pay(self, cost: Mapping[str, int]) -> bool:
        """Deduct the cost atomically. Returns False without deducting if unaffordable."""
        if not self.can_afford(cost):
            return False
        for res, amount in cost.items():
            self.amounts[res] = self.amounts.get(res, 0) - amount
        return True
