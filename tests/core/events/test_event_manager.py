"""
Unit tests for the Event Manager system.

Tests the event bus the engine publishes on: subscription, queueing,
priority ordering and statistics.
"""

from unittest.mock import Mock

from empire_military.core.event_manager import EventPriority, QueuedEvent
from empire_military.core.events import CombatInitiated, EventType, LogMessage, UnitMoved


def _combat_event(attacker: str = "0,0") -> CombatInitiated:
    return CombatInitiated(
        attacker_territory_id=attacker,
        defender_territory_id="1,0",
        attacker_unit_count=1,
        defender_unit_count=0
    )


class TestQueuedEvent:
    """Test QueuedEvent functionality."""

    def test_queued_event_creation(self):
        """Test basic queued event creation."""
        event = _combat_event()
        queued = QueuedEvent(event=event, priority=EventPriority.HIGH, source="test")

        assert queued.event == event
        assert queued.priority == EventPriority.HIGH
        assert queued.source == "test"

    def test_queued_event_ordering_by_priority(self):
        """Test that lower priority values sort first."""
        critical = QueuedEvent(_combat_event(), EventPriority.CRITICAL)
        high = QueuedEvent(_combat_event(), EventPriority.HIGH)
        normal = QueuedEvent(_combat_event(), EventPriority.NORMAL)
        low = QueuedEvent(_combat_event(), EventPriority.LOW)

        assert critical < high < normal < low

    def test_queued_event_ordering_by_sequence(self):
        """Test that events with the same priority keep publication order."""
        first = QueuedEvent(_combat_event(), EventPriority.NORMAL, sequence=1)
        second = QueuedEvent(_combat_event(), EventPriority.NORMAL, sequence=2)

        assert first < second
        assert not second < first


class TestEventManager:
    """Test EventManager functionality."""

    def test_event_manager_creation(self, event_manager):
        """Test event manager initialization."""
        stats = event_manager.get_statistics()
        assert not event_manager.enable_debug_logging
        assert stats['events_published'] == 0
        assert stats['events_processed'] == 0

    def test_subscribe_to_event_type(self, event_manager):
        """Test subscribing to specific event types."""
        event_manager.subscribe(EventType.COMBAT_INITIATED, Mock())
        assert event_manager.get_statistics()['subscribers_count'] == 1

    def test_subscribe_to_all_events(self, event_manager):
        """Test subscribing to all events (universal subscriber)."""
        event_manager.subscribe_all(Mock())
        assert event_manager.get_statistics()['universal_subscribers_count'] == 1

    def test_publish_queues_event(self, event_manager):
        """Test publishing events to the queue."""
        subscriber = Mock()
        event_manager.subscribe(EventType.COMBAT_INITIATED, subscriber)

        event_manager.publish(_combat_event(), source="test")

        stats = event_manager.get_statistics()
        assert stats['events_published'] == 1
        assert stats['events_queued'] == 1
        assert event_manager.has_queued_events()
        subscriber.assert_not_called()

    def test_publish_immediate(self, event_manager):
        """Test immediate event publishing and processing."""
        subscriber = Mock()
        event_manager.subscribe(EventType.COMBAT_INITIATED, subscriber)

        event = _combat_event()
        event_manager.publish_immediate(event, source="test")

        subscriber.assert_called_once_with(event)
        assert not event_manager.has_queued_events()

    def test_process_events_by_type(self, event_manager):
        """Test that subscribers only see their event type."""
        combat_subscriber = Mock()
        move_subscriber = Mock()
        event_manager.subscribe(EventType.COMBAT_INITIATED, combat_subscriber)
        event_manager.subscribe(EventType.UNIT_MOVED, move_subscriber)

        event_manager.publish(_combat_event())
        processed = event_manager.process_events()

        assert processed == 1
        combat_subscriber.assert_called_once()
        move_subscriber.assert_not_called()

    def test_process_events_priority_order(self, event_manager):
        """Test that higher priority events are delivered first."""
        received = []
        event_manager.subscribe_all(lambda e: received.append(e))

        low = _combat_event("low")
        high = _combat_event("high")
        event_manager.publish(low, priority=EventPriority.LOW)
        event_manager.publish(high, priority=EventPriority.HIGH)
        event_manager.process_events()

        assert received == [high, low]

    def test_process_events_with_limit(self, event_manager):
        """Test that unprocessed events stay queued."""
        for i in range(3):
            event_manager.publish(_combat_event(str(i)))

        assert event_manager.process_events(max_events=2) == 2
        assert event_manager.get_statistics()['events_queued'] == 1
        assert event_manager.process_events() == 1

    def test_unsubscribe(self, event_manager):
        """Test removing subscribers."""
        subscriber = Mock()
        event_manager.subscribe(EventType.UNIT_MOVED, subscriber)

        assert event_manager.unsubscribe(EventType.UNIT_MOVED, subscriber)
        assert not event_manager.unsubscribe(EventType.UNIT_MOVED, subscriber)

        event_manager.publish_immediate(UnitMoved("u", "0,0", "1,0", 0))
        subscriber.assert_not_called()

    def test_clear_queue(self, event_manager):
        event_manager.publish(_combat_event())
        event_manager.publish(_combat_event())
        assert event_manager.clear_queue() == 2
        assert not event_manager.has_queued_events()

    def test_recent_events(self, event_manager):
        """Test the processed-event history used for debugging."""
        event_manager.publish(LogMessage("hello", "SYSTEM", "INFO", "test"), source="test")
        event_manager.process_events()

        recent = event_manager.get_recent_events()
        assert recent[-1]['event_type'] == "LogMessage"
        assert recent[-1]['source'] == "test"

    def test_debug_callback(self):
        """Test debug logging through the callback."""
        from empire_military.core.event_manager import EventManager

        lines = []
        manager = EventManager(enable_debug_logging=True)
        manager.set_debug_callback(lines.append)
        manager.subscribe(EventType.UNIT_MOVED, Mock(), subscriber_name="mover")

        assert any("mover" in line for line in lines)

    def test_subscriber_deliveries(self, event_manager):
        """Test per-subscriber delivery counts."""
        event_manager.subscribe(EventType.COMBAT_INITIATED, Mock(), subscriber_name="combat")
        event_manager.subscribe_all(Mock(), subscriber_name="everything")

        event_manager.publish(_combat_event())
        event_manager.publish(UnitMoved("u", "0,0", "1,0", 0))
        event_manager.process_events()

        assert event_manager.get_subscriber_deliveries() == {"combat": 1, "everything": 2}

    def test_events_published_during_delivery_wait(self, event_manager):
        """Test that a subscriber's own publications wait for the next flush."""
        def republish(event):
            event_manager.publish(UnitMoved("u", "0,0", "1,0", 0))

        event_manager.subscribe(EventType.COMBAT_INITIATED, republish)
        event_manager.publish(_combat_event())

        assert event_manager.process_events() == 1
        assert event_manager.has_queued_events()

    def test_unsubscribe_universal_and_shutdown(self, event_manager):
        listener = Mock()
        event_manager.subscribe_all(listener)

        assert event_manager.unsubscribe_all(listener)
        assert not event_manager.unsubscribe_all(listener)

        event_manager.subscribe(EventType.UNIT_MOVED, listener)
        event_manager.publish(_combat_event())
        event_manager.shutdown()

        stats = event_manager.get_statistics()
        assert stats['subscribers_count'] == 0
        assert stats['events_queued'] == 0

    def test_failing_subscriber_does_not_lose_events(self, event_manager):
        """Test that one raising subscriber leaves the rest of the flush intact."""
        seen = []

        def fragile(event):
            if event.message == "first":
                raise RuntimeError("boom")
            seen.append(event.message)

        others = Mock()
        event_manager.subscribe(EventType.LOG_MESSAGE, fragile, subscriber_name="fragile")
        event_manager.subscribe_all(others)
        for text in ("first", "second", "third"):
            event_manager.publish(LogMessage(text, "SYSTEM", "INFO", "test"))

        assert event_manager.process_events() == 3

        assert seen == ["second", "third"]
        assert others.call_count == 3
        assert not event_manager.has_queued_events()
        assert event_manager.get_statistics()['subscriber_errors'] == 1
        assert event_manager.get_subscriber_deliveries()["fragile"] == 2

    def test_subscriber_error_traced(self):
        from empire_military.core.event_manager import EventManager

        lines = []
        manager = EventManager(enable_debug_logging=True)
        manager.set_debug_callback(lines.append)
        manager.subscribe(EventType.UNIT_MOVED, Mock(side_effect=ValueError("bad move")), subscriber_name="mover")

        manager.publish(UnitMoved("u", "0,0", "1,0", 0))
        manager.process_events()

        assert "[EVENT] Error in subscriber mover: bad move" in lines
