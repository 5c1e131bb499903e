"""
Unit tests for engine event records.
"""
import pytest

from empire_military.core.events import (
    CardSelected, CombatEnded, CombatResolved, DoctrineChanged, EventType, LogMessage,
    RoundResolved, UnitDamaged, UnitLeveledUp, UnitTrained, UnitUpgraded
)


class TestEvents:
    """Test that events carry their type and are immutable."""

    @pytest.mark.parametrize("event, expected_type", [
        (CardSelected("frontal-assault", "attacker", 1), EventType.CARD_SELECTED),
        (RoundResolved(1, "draw", 2, 2, 10, 10), EventType.ROUND_RESOLVED),
        (CombatResolved("victory", 30, 20, 40), EventType.COMBAT_RESOLVED),
        (CombatEnded("0,0", "1,0", "defeat", False), EventType.COMBAT_ENDED),
        (UnitTrained("warrior_1", "warrior", "0,0"), EventType.UNIT_TRAINED),
        (UnitUpgraded("warrior_1", "warrior", "swordsman"), EventType.UNIT_UPGRADED),
        (UnitDamaged("warrior_1", "0,0", 100, 96, 15), EventType.UNIT_DAMAGED),
        (UnitLeveledUp("warrior_1", 2), EventType.UNIT_LEVELED_UP),
        (DoctrineChanged("aggressive"), EventType.DOCTRINE_CHANGED),
        (LogMessage("text", "BATTLE", "INFO", "test"), EventType.LOG_MESSAGE),
    ])
    def test_event_type_is_set(self, event, expected_type):
        assert event.event_type is expected_type

    def test_events_are_frozen(self):
        event = UnitTrained("warrior_1", "warrior", "0,0")
        with pytest.raises(AttributeError):
            event.unit_id = "other"  # type: ignore[misc]

    def test_optional_payloads_default(self):
        """Test defaults of optional event fields."""
        assert UnitLeveledUp("u", 2).specialization is None
        assert DoctrineChanged(None).granted_cards == ()
