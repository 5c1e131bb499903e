"""Static game information tables.

This module provides lookup tables for terrain properties and the tunable
constants of the combat mechanics, in one place so the resolvers and the AI
read the same numbers.
"""

from dataclasses import dataclass
from typing import Dict

from .game_enums import Difficulty, TerrainType


@dataclass(frozen=True)
class TerrainInfo:
    """Static information about a terrain type."""
    name: str
    natural_defense: int = 0     # Flat defender bonus in round scoring
    attack_modifier: int = 0     # Attacker modifier in attack assessment
    defense_modifier: int = 0    # Defender modifier in attack assessment
    strategic_value: int = 0     # AI target value


TERRAIN_DATA: Dict[str, TerrainInfo] = {
    TerrainType.PLAINS.value: TerrainInfo(
        "Plains", attack_modifier=1, strategic_value=5,
    ),
    TerrainType.HILLS.value: TerrainInfo(
        "Hills", natural_defense=2, defense_modifier=1, strategic_value=8,
    ),
    TerrainType.MOUNTAINS.value: TerrainInfo(
        "Mountains", natural_defense=3, defense_modifier=2, strategic_value=10,
    ),
    TerrainType.FOREST.value: TerrainInfo(
        "Forest", natural_defense=1, defense_modifier=1, strategic_value=7,
    ),
    TerrainType.DESERT.value: TerrainInfo("Desert"),
    TerrainType.SWAMP.value: TerrainInfo(
        "Swamp", defense_modifier=1,
    ),
    TerrainType.WATER.value: TerrainInfo("Water"),
}

_UNKNOWN_TERRAIN = TerrainInfo("Unknown")


def get_terrain_info(terrain_type: str) -> TerrainInfo:
    """Look up terrain info, falling back to a neutral entry for unknown types."""
    return TERRAIN_DATA.get(terrain_type, _UNKNOWN_TERRAIN)


COMBAT_MECHANICS = {
    "ROUNDS_PER_COMBAT": 3,
    "COUNTER_BONUS": 2,
    "TERRAIN_CARD_BONUS": 1,
    "DEFENSIVE_CARD_BONUS": 1,
    "UNIT_STRENGTH_DIVISOR": 5,
    "LEVEL_STRENGTH_BONUS": 0.1,       # Per level above 1, in round scoring
    "ASSESSMENT_LEVEL_BONUS": 0.05,    # Per level above 1, in AI assessment
    "UNIT_ADVANTAGE_BONUS": 0.5,
    "HOME_TERRITORY_DEFENSE_BONUS": 1,
    "DRAW_CASUALTIES": 10,
    "LOSER_CASUALTY_BASE": 10,
    "LOSER_CASUALTY_PER_POINT": 5,
    "LOSER_CASUALTY_CAP": 30,
    "WINNER_CASUALTY_BASE": 15,
    "WINNER_CASUALTY_PER_POINT": 2,
    "WINNER_CASUALTY_FLOOR": 5,
    "VICTORY_BASE_CONTROL": 30,
    "CONTROL_PER_EXTRA_WIN": 20,
    "CONTROL_CASUALTY_DIVISOR": 5,
    "DRAW_CONTROL": 10,
    "FULL_CONQUEST_THRESHOLD": 100,
    "DAMAGE_PER_FULL_CASUALTIES": 20,
    "WINNER_EXPERIENCE": 15,
    "LOSER_EXPERIENCE": 8,
    "EXPERIENCE_PER_LEVEL": 100,
    "UPGRADE_COST_FRACTION": 0.5,
    "MIN_ATTACK_WIN_PROBABILITY": 0.4,
    "MAX_ADVANCED_CARD_TYPES": 5,
}

# Card special effect bonuses
CARD_EFFECT_BONUS = {
    "initiative": 3,
    "surprise": 4,
    "heroUnit": 3,
}
RANDOM_EFFECT_RANGE = (1, 5)

# Ability bonuses applied to a unit's effective strength
ABILITY_BONUS = {
    "antiCavalry": 3,
    "formationFighting": 1,   # Per other unit of the same type
    "charge": 2,
    "volleyFire": 3,
    "fortificationDamage": 2,
}

# Strength ratio -> win probability, checked top to bottom
WIN_PROBABILITY_TABLE = (
    (3.0, 0.90),
    (2.0, 0.75),
    (1.5, 0.65),
    (1.0, 0.55),
    (0.75, 0.40),
    (0.5, 0.25),
)
MIN_WIN_PROBABILITY = 0.10

# Strategic value of a target territory
TERRITORY_VALUE = {
    "BASE": 10,
    "STRATEGIC_RESOURCE": 30,
    "LUXURY_RESOURCE": 25,
    "COMMON_RESOURCE": 15,
    "PER_BUILDING": 10,
    "PER_BUILDING_LEVEL": 15,
    "ADJACENT_TO_PLAYER": 40,
    "CAPITAL": 100,
}


@dataclass(frozen=True)
class DifficultySettings:
    """Tunables for one AI difficulty level."""
    noise_min: float = 1.0
    noise_max: float = 1.0
    second_choice_chance: float = 0.0
    counter_bonus: int = 0
    terrain_bonus: int = 0
    strength_factor: float = 0.0
    resource_bonus: int = 0
    attack_score_factor: float = 1.0
    high_value_threshold: int = 50
    high_value_bonus: int = 0


DIFFICULTY_DATA: Dict[Difficulty, DifficultySettings] = {
    Difficulty.EASY: DifficultySettings(
        noise_min=0.7, noise_max=1.3, second_choice_chance=0.3,
        attack_score_factor=0.7,
    ),
    Difficulty.NORMAL: DifficultySettings(),
    Difficulty.HARD: DifficultySettings(
        counter_bonus=10, terrain_bonus=10, strength_factor=1.5,
        resource_bonus=15, attack_score_factor=1.2, high_value_bonus=20,
    ),
}
