"""Game logic for military units, tactical combat and the AI strategist.

Modules:
- unit_templates.py: Unit type catalog loaded from YAML
- tactical_cards.py: Tactical card catalog and the player's card inventory
- doctrines.py: Military doctrines and the current-doctrine registry
- unit.py: Unit instances and immutable combat snapshots
- territory_map.py: In-memory hex territory map (default world collaborator)
- log_manager.py: Buffered, filterable engine log
- combat_engine.py: Facade owning all military state

Subpackages:
- managers: Unit lifecycle and combat session management
- combat: Strength calculation, round and combat resolution, session records
- ai: Military AI strategist and difficulty behaviors
"""

from .combat_engine import CombatEngine
from .doctrines import DoctrineModifiers, DoctrineRegistry, MilitaryDoctrine
from .log_manager import LogCategory, LogLevel, LogManager
from .tactical_cards import CardCatalog, CardInventory, TacticalCardType
from .territory_map import TerritoryMap
from .unit import MilitaryUnit, UnitSnapshot
from .unit_templates import NotFoundError, UnitCatalog, UnitType

__all__ = [
    "CombatEngine",
    "DoctrineModifiers",
    "DoctrineRegistry",
    "MilitaryDoctrine",
    "LogCategory",
    "LogLevel",
    "LogManager",
    "CardCatalog",
    "CardInventory",
    "TacticalCardType",
    "TerritoryMap",
    "MilitaryUnit",
    "UnitSnapshot",
    "NotFoundError",
    "UnitCatalog",
    "UnitType",
]
