"""Core data structures, enums and the event bus.

This package contains the leaf types every other module builds on:
- game_enums.py: Closed tag sets (sides, results, card tiers, unit kinds, terrain)
- data_structures.py: Hex coordinates, territories, buildings, cost maps
- game_info.py: Terrain table and combat mechanics constants
- interfaces.py: Contracts of the external collaborators
- events.py / event_manager.py: Engine events and the publisher-subscriber bus
"""

from .data_structures import Building, CostMap, HexCoord, ResourcePool, TerritoryData, merge_costs
from .event_manager import EventManager, EventPriority, QueuedEvent
from .game_enums import (
    CardEffect,
    CardTier,
    CombatPhase,
    CombatResult,
    CombatSide,
    Difficulty,
    Era,
    RoundWinner,
    SpecialAbility,
    TerrainType,
    UnitKind,
)
from .game_info import COMBAT_MECHANICS, TERRAIN_DATA, TerrainInfo, get_terrain_info

__all__ = [
    "Building",
    "CostMap",
    "HexCoord",
    "ResourcePool",
    "TerritoryData",
    "merge_costs",
    "EventManager",
    "EventPriority",
    "QueuedEvent",
    "CardEffect",
    "CardTier",
    "CombatPhase",
    "CombatResult",
    "CombatSide",
    "Difficulty",
    "Era",
    "RoundWinner",
    "SpecialAbility",
    "TerrainType",
    "UnitKind",
    "COMBAT_MECHANICS",
    "TERRAIN_DATA",
    "TerrainInfo",
    "get_terrain_info",
]
