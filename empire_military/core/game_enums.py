"""Centralized military enums and constants.

This module contains all core enums shared by the catalogs, the combat
resolvers and the AI strategist, providing a single source of truth for the
closed sets of tags the engine understands.
"""

from enum import Enum, auto


class CombatSide(Enum):
    """The two sides of a combat session."""
    ATTACKER = "attacker"
    DEFENDER = "defender"

    @property
    def opponent(self) -> "CombatSide":
        return CombatSide.DEFENDER if self is CombatSide.ATTACKER else CombatSide.ATTACKER


class RoundWinner(Enum):
    """Winner of a single combat round."""
    ATTACKER = "attacker"
    DEFENDER = "defender"
    DRAW = "draw"


class CombatResult(Enum):
    """Overall combat result, always from the attacker's point of view."""
    VICTORY = "victory"
    DEFEAT = "defeat"
    DRAW = "draw"


class CombatPhase(Enum):
    """States of the combat session state machine."""
    IDLE = auto()
    ACTIVE = auto()
    RESOLVED = auto()


class CardTier(Enum):
    """Tactical card tiers."""
    BASIC = "basic"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class CardEffect(Enum):
    """Special effects a tactical card may carry."""
    INITIATIVE = "initiative"
    SURPRISE = "surprise"
    RANDOM = "random"
    HERO_UNIT = "heroUnit"


class UnitKind(Enum):
    """Broad unit families used for ability and advantage checks."""
    INFANTRY = "infantry"
    RANGED = "ranged"
    CAVALRY = "cavalry"
    SIEGE = "siege"
    RECON = "recon"


class SpecialAbility(Enum):
    """Type-specific unit abilities."""
    ANTI_CAVALRY = "antiCavalry"
    FORMATION_FIGHTING = "formationFighting"
    CHARGE = "charge"
    VOLLEY_FIRE = "volleyFire"
    FORTIFICATION_DAMAGE = "fortificationDamage"
    TERRAIN_BONUS = "terrainBonus"
    ENHANCED_VISIBILITY = "enhancedVisibility"


class TerrainType(Enum):
    """Territory terrain types."""
    PLAINS = "plains"
    HILLS = "hills"
    MOUNTAINS = "mountains"
    FOREST = "forest"
    DESERT = "desert"
    SWAMP = "swamp"
    WATER = "water"


class Era(Enum):
    """Technological eras, in chronological order."""
    PRIMITIVE = 0
    ANCIENT = 1
    CLASSICAL = 2
    MEDIEVAL = 3
    RENAISSANCE = 4

    @classmethod
    def from_name(cls, name: str) -> "Era":
        return cls[name.upper()]


class Difficulty(Enum):
    """AI difficulty levels."""
    EASY = "easy"
    NORMAL = "normal"
    HARD = "hard"


class ResourceCategory(Enum):
    """Rarity classes of territory resources, used for strategic value."""
    STRATEGIC = auto()
    LUXURY = auto()
    COMMON = auto()


# Convenience mappings
STRATEGIC_RESOURCES = frozenset({"iron", "horses", "saltpeter"})
LUXURY_RESOURCES = frozenset({"gems", "silk", "spices", "wine"})
DEFENSIVE_BUILDINGS = frozenset({"walls", "fort"})


def classify_resource(resource: str) -> ResourceCategory:
    """Classify a territory resource by rarity."""
    if resource in STRATEGIC_RESOURCES:
        return ResourceCategory.STRATEGIC
    if resource in LUXURY_RESOURCES:
        return ResourceCategory.LUXURY
    return ResourceCategory.COMMON
