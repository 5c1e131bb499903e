"""
Event bus for the military engine.

The engine's managers publish frozen event dataclasses here while a command
runs; the engine facade flushes the queue when the command returns. Anyone
interested (the log manager, the turn orchestrator, a UI) subscribes per
event type or to every event.

Delivery is single-threaded: events published by a subscriber during a flush
wait for the next flush.
"""

import heapq
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .events import EventType, GameEvent


class EventPriority(Enum):
    """Delivery priority; lower values are delivered first."""
    CRITICAL = 1
    HIGH = 2
    NORMAL = 3
    LOW = 4


@dataclass
class QueuedEvent:
    """A published event waiting for delivery."""
    event: "GameEvent"
    priority: EventPriority = EventPriority.NORMAL
    sequence: int = 0
    timestamp: datetime = field(default_factory=datetime.now)
    source: Optional[str] = None

    def __lt__(self, other: "QueuedEvent") -> bool:
        return (self.priority.value, self.sequence) < (other.priority.value, other.sequence)


EventSubscriber = Callable[["GameEvent"], None]


@dataclass
class Subscription:
    """A registered callback and the name it is reported under."""
    callback: EventSubscriber
    name: str
    delivered: int = 0
    errors: int = 0


def _display_name(subscriber: EventSubscriber, name: Optional[str]) -> str:
    return name or getattr(subscriber, '__name__', 'anonymous')


class EventManager:
    """Publisher/subscriber bus with a priority queue and a delivery history."""

    def __init__(self, enable_debug_logging: bool = False, history_size: int = 1000):
        """Create an empty bus.

        Args:
            enable_debug_logging: Report bus activity to the debug callback
            history_size: Number of delivered events kept for inspection
        """
        self.enable_debug_logging = enable_debug_logging

        self._by_type: dict["EventType", list[Subscription]] = {}
        self._universal: list[Subscription] = []
        self._queue: list[QueuedEvent] = []
        self._history: deque[QueuedEvent] = deque(maxlen=history_size)

        self._published = 0
        self._delivered = 0
        self._subscriber_errors = 0
        self._debug_callback: Optional[Callable[[str], None]] = None

    def set_debug_callback(self, callback: Optional[Callable[[str], None]]) -> None:
        self._debug_callback = callback

    def _trace(self, message: str) -> None:
        if self.enable_debug_logging and self._debug_callback is not None:
            self._debug_callback(f"[EVENT] {message}")

    # ============== Subscriptions ==============

    def subscribe(
        self,
        event_type: "EventType",
        subscriber: EventSubscriber,
        subscriber_name: Optional[str] = None
    ) -> None:
        """Deliver events of one type to a callback."""
        name = _display_name(subscriber, subscriber_name)
        self._by_type.setdefault(event_type, []).append(Subscription(subscriber, name))
        self._trace(f"{name} subscribed to {event_type.name}")

    def subscribe_all(self, subscriber: EventSubscriber, subscriber_name: Optional[str] = None) -> None:
        """Deliver every event to a callback."""
        name = _display_name(subscriber, subscriber_name)
        self._universal.append(Subscription(subscriber, name))
        self._trace(f"{name} subscribed to all events")

    @staticmethod
    def _remove(subscriptions: list[Subscription], subscriber: EventSubscriber) -> bool:
        for index, subscription in enumerate(subscriptions):
            if subscription.callback == subscriber:
                del subscriptions[index]
                return True
        return False

    def unsubscribe(self, event_type: "EventType", subscriber: EventSubscriber) -> bool:
        """Stop delivering one event type to a callback.

        Returns:
            True if the callback was subscribed
        """
        removed = self._remove(self._by_type.get(event_type, []), subscriber)
        if removed:
            self._trace(f"Unsubscribed from {event_type.name}")
        return removed

    def unsubscribe_all(self, subscriber: EventSubscriber) -> bool:
        """Remove a callback registered with subscribe_all."""
        return self._remove(self._universal, subscriber)

    # ============== Publishing ==============

    def _wrap(self, event: "GameEvent", priority: EventPriority, source: str) -> QueuedEvent:
        self._published += 1
        return QueuedEvent(event=event, priority=priority, sequence=self._published, source=source)

    def publish(
        self,
        event: "GameEvent",
        priority: EventPriority = EventPriority.NORMAL,
        source: Optional[str] = None
    ) -> None:
        """Queue an event until the next process_events call."""
        queued = self._wrap(event, priority, source or "unknown")
        heapq.heappush(self._queue, queued)
        self._trace(f"Queued {type(event).__name__} from {queued.source} ({priority.name})")

    def publish_immediate(self, event: "GameEvent", source: Optional[str] = None) -> None:
        """Deliver an event now, bypassing the queue."""
        self._deliver(self._wrap(event, EventPriority.CRITICAL, source or "immediate"))

    def process_events(self, max_events: Optional[int] = None) -> int:
        """Deliver queued events in priority order.

        Only events queued before the call are delivered; anything a
        subscriber publishes meanwhile stays queued.

        Args:
            max_events: Stop after this many deliveries (None for all)

        Returns:
            Number of events delivered
        """
        pending, self._queue = self._queue, []
        delivered = 0
        try:
            while pending:
                if max_events is not None and delivered >= max_events:
                    break
                self._deliver(heapq.heappop(pending))
                delivered += 1
        finally:
            for leftover in pending:
                heapq.heappush(self._queue, leftover)
        return delivered

    def _deliver(self, queued: QueuedEvent) -> None:
        event = queued.event
        self._history.append(queued)
        self._delivered += 1
        self._trace(f"Delivering {type(event).__name__} from {queued.source}")

        # Copies so a callback may unsubscribe itself
        for subscription in list(self._by_type.get(event.event_type, ())) + list(self._universal):
            try:
                subscription.callback(event)
            except Exception as e:
                subscription.errors += 1
                self._subscriber_errors += 1
                self._trace(f"Error in subscriber {subscription.name}: {e}")
                continue
            subscription.delivered += 1

    def clear_queue(self) -> int:
        """Drop every queued event.

        Returns:
            Number of events dropped
        """
        dropped = len(self._queue)
        self._queue = []
        self._trace(f"Dropped {dropped} queued events")
        return dropped

    def has_queued_events(self) -> bool:
        return bool(self._queue)

    # ============== Inspection ==============

    def get_statistics(self) -> dict[str, Any]:
        return {
            'events_published': self._published,
            'events_processed': self._delivered,
            'events_queued': len(self._queue),
            'subscribers_count': sum(len(subs) for subs in self._by_type.values()),
            'universal_subscribers_count': len(self._universal),
            'event_history_size': len(self._history),
            'subscriber_errors': self._subscriber_errors,
        }

    def get_subscriber_deliveries(self) -> dict[str, int]:
        """Deliveries per subscriber name, for spotting idle listeners."""
        counts: dict[str, int] = {}
        for subscription in [s for subs in self._by_type.values() for s in subs] + self._universal:
            counts[subscription.name] = counts.get(subscription.name, 0) + subscription.delivered
        return counts

    def get_recent_events(self, count: int = 10) -> list[dict[str, Any]]:
        """Most recently delivered events, oldest first."""
        return [
            {
                'event_type': type(queued.event).__name__,
                'priority': queued.priority.name,
                'source': queued.source,
                'timestamp': queued.timestamp.isoformat(),
            }
            for queued in list(self._history)[-count:]
        ]

    def shutdown(self) -> None:
        """Drop all subscriptions, queued events and history."""
        self._by_type.clear()
        self._universal.clear()
        self._queue = []
        self._history.clear()
