"""Manager classes for units and combat.

This package contains the stateful managers of the engine:
- unit_manager.py: Training, movement, upgrades, upkeep and combat damage of units
- combat_manager.py: The combat session state machine
"""

from .combat_manager import CombatManager, CombatOutcome
from .unit_manager import UnitChange, UnitLifecycleManager

__all__ = [
    "CombatManager",
    "CombatOutcome",
    "UnitChange",
    "UnitLifecycleManager",
]
