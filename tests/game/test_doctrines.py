"""
Unit tests for military doctrines.
"""
from unittest.mock import patch

import pytest

from empire_military.game.doctrines import NEUTRAL_MODIFIERS, DoctrineModifiers, DoctrineRegistry
from empire_military.game.unit_templates import NotFoundError


class TestDoctrineModifiers:
    """Test modifier sets."""

    def test_defaults_are_neutral(self):
        modifiers = DoctrineModifiers()
        assert modifiers.is_neutral
        assert modifiers.attack == 0.0
        assert modifiers.movement == 0

    def test_from_dict_fills_missing_fields(self):
        modifiers = DoctrineModifiers.from_dict({"attack": 0.2})
        assert modifiers.attack == 0.2
        assert modifiers.defense == 0.0
        assert not modifiers.is_neutral

    def test_from_dict_none(self):
        assert DoctrineModifiers.from_dict(None) == NEUTRAL_MODIFIERS

    def test_unknown_modifier_rejected(self):
        with pytest.raises(ValueError):
            DoctrineModifiers.from_dict({"luck": 1.0})

    def test_combine(self):
        """Test folding modifier sets field by field."""
        combined = DoctrineModifiers.combine(
            DoctrineModifiers(attack=0.2, movement=1),
            DoctrineModifiers(attack=-0.1, defense=0.25, movement=-1),
        )
        assert combined.attack == pytest.approx(0.1)
        assert combined.defense == pytest.approx(0.25)
        assert combined.movement == 0

    def test_combine_nothing_is_neutral(self):
        assert DoctrineModifiers.combine().is_neutral


class TestDoctrineRegistry:
    """Test the doctrine registry and the current doctrine."""

    def test_bundled_doctrines(self, doctrines):
        assert len(doctrines) == 4
        for doctrine_id in ("aggressive", "defensive", "balanced", "guerrilla"):
            assert doctrines.has(doctrine_id)

    def test_aggressive_modifiers(self, doctrines):
        aggressive = doctrines.get("aggressive")
        assert aggressive.modifiers.attack == pytest.approx(0.2)
        assert aggressive.modifiers.movement == 1
        assert "double-envelopment" in aggressive.unlocked_cards
        assert aggressive.unlocked_units == ("berserker",)

    def test_no_current_doctrine(self, doctrines):
        assert doctrines.current is None
        assert doctrines.current_modifiers() == NEUTRAL_MODIFIERS

    def test_set_and_clear_current(self, doctrines):
        doctrine = doctrines.set_current("defensive")

        assert doctrines.current is doctrine
        assert doctrines.current_modifiers().defense == pytest.approx(0.25)

        doctrines.set_current("balanced")
        assert doctrines.current.id == "balanced"

        doctrines.clear_current()
        assert doctrines.current is None

    def test_unknown_doctrine(self, doctrines):
        with pytest.raises(NotFoundError):
            doctrines.set_current("pacifist")
        assert doctrines.current is None

    def test_current_modifiers_folded_with_combine(self, doctrines):
        doctrines.set_current("aggressive")

        with patch.object(DoctrineModifiers, "combine", wraps=DoctrineModifiers.combine) as combine:
            modifiers = doctrines.current_modifiers()

        combine.assert_called_once()
        assert modifiers == doctrines.get("aggressive").modifiers
