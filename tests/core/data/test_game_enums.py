"""
Unit tests for game enums and static game information.
"""
import pytest

from empire_military.core.game_enums import (
    CombatSide, Difficulty, Era, ResourceCategory, classify_resource
)
from empire_military.core.game_info import DIFFICULTY_DATA, TERRAIN_DATA, get_terrain_info


class TestEnums:
    """Test enum helpers."""

    def test_combat_side_opponent(self):
        assert CombatSide.ATTACKER.opponent is CombatSide.DEFENDER
        assert CombatSide.DEFENDER.opponent is CombatSide.ATTACKER

    def test_era_order(self):
        """Test that eras are chronologically ordered."""
        eras = [Era.PRIMITIVE, Era.ANCIENT, Era.CLASSICAL, Era.MEDIEVAL, Era.RENAISSANCE]
        assert [e.value for e in eras] == sorted(e.value for e in eras)

    def test_era_from_name(self):
        """Test that era names in data files are case-insensitive."""
        assert Era.from_name("Classical") is Era.CLASSICAL
        assert Era.from_name("renaissance") is Era.RENAISSANCE
        with pytest.raises(KeyError):
            Era.from_name("Atomic")

    def test_resource_classification(self):
        """Test rarity classes used for territory value."""
        assert classify_resource("iron") is ResourceCategory.STRATEGIC
        assert classify_resource("silk") is ResourceCategory.LUXURY
        assert classify_resource("wheat") is ResourceCategory.COMMON


class TestGameInfo:
    """Test terrain and difficulty tables."""

    def test_defensive_terrain(self):
        """Test natural defense of rough terrain."""
        assert get_terrain_info("plains").natural_defense == 0
        assert get_terrain_info("hills").natural_defense == 2
        assert get_terrain_info("mountains").natural_defense == 3
        assert get_terrain_info("forest").natural_defense == 1

    def test_unknown_terrain_is_neutral(self):
        """Test that unknown terrain falls back to a neutral entry."""
        info = get_terrain_info("lava")
        assert info.natural_defense == 0
        assert info.attack_modifier == 0
        assert info.strategic_value == 0

    def test_every_terrain_listed(self):
        assert set(TERRAIN_DATA) == {"plains", "hills", "mountains", "forest", "desert", "swamp", "water"}

    def test_every_difficulty_has_settings(self):
        assert set(DIFFICULTY_DATA) == set(Difficulty)

    def test_normal_difficulty_is_neutral(self):
        """Test that normal difficulty leaves scores alone."""
        settings = DIFFICULTY_DATA[Difficulty.NORMAL]
        assert settings.noise_min == settings.noise_max == 1.0
        assert settings.second_choice_chance == 0.0
        assert settings.attack_score_factor == 1.0
