"""Military combat resolution engine for a turn-based 4X strategy game.

Packages:
- core: Enums, value types, static tables, collaborator interfaces and the event bus
- game: Catalogs, units, combat resolution, the combat state machine and the AI
"""

from .game.combat_engine import CombatEngine

__version__ = "0.1.0"

__all__ = ["CombatEngine"]
