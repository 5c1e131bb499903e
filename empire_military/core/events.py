"""Military engine events.

This module defines every event the engine publishes on its event bus.

Event Design Principles:
- Events are immutable dataclasses with minimal payloads
- Events represent "what happened" with stable identifiers (ids, not objects)
- Log output travels on the same bus as LogMessage events
"""

from abc import ABC
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Optional


class EventType(Enum):
    """Types of engine events that subscribers can listen to."""
    # Combat Events
    COMBAT_INITIATED = auto()
    CARD_SELECTED = auto()
    ROUND_RESOLVED = auto()
    COMBAT_RESOLVED = auto()
    COMBAT_ENDED = auto()

    # Unit Events
    UNIT_TRAINED = auto()
    UNIT_MOVED = auto()
    UNIT_UPGRADED = auto()
    UNIT_DAMAGED = auto()
    UNIT_LEVELED_UP = auto()

    # Strategy Events
    DOCTRINE_CHANGED = auto()

    # Logging Events
    LOG_MESSAGE = auto()


@dataclass(frozen=True)
class GameEvent(ABC):
    """Base class for all engine events."""
    event_type: EventType = field(init=False)


@dataclass(frozen=True)
class CombatInitiated(GameEvent):
    """Event emitted when a combat session starts."""
    attacker_territory_id: str
    defender_territory_id: str
    attacker_unit_count: int
    defender_unit_count: int

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.COMBAT_INITIATED)


@dataclass(frozen=True)
class CardSelected(GameEvent):
    """Event emitted when a side commits a card for a round."""
    card_id: str
    side: str
    combat_round: int

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.CARD_SELECTED)


@dataclass(frozen=True)
class RoundResolved(GameEvent):
    """Event emitted when one combat round has been scored."""
    combat_round: int
    winner: str
    attacker_score: float
    defender_score: float
    attacker_casualties: float
    defender_casualties: float

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.ROUND_RESOLVED)


@dataclass(frozen=True)
class CombatResolved(GameEvent):
    """Event emitted when all rounds are done and the outcome is known."""
    result: str
    territory_control: int
    attacker_casualties: float
    defender_casualties: float

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.COMBAT_RESOLVED)


@dataclass(frozen=True)
class CombatEnded(GameEvent):
    """Event emitted when a resolved combat has been applied and cleared."""
    attacker_territory_id: str
    defender_territory_id: str
    result: str
    full_conquest: bool

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.COMBAT_ENDED)


@dataclass(frozen=True)
class UnitTrained(GameEvent):
    """Event emitted when a new unit is created."""
    unit_id: str
    unit_type_id: str
    territory_id: str

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.UNIT_TRAINED)


@dataclass(frozen=True)
class UnitMoved(GameEvent):
    """Event emitted when a unit changes territory."""
    unit_id: str
    from_territory_id: str
    to_territory_id: str
    moves_left: int

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.UNIT_MOVED)


@dataclass(frozen=True)
class UnitUpgraded(GameEvent):
    """Event emitted when a unit is upgraded to a new type."""
    unit_id: str
    from_type_id: str
    to_type_id: str

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.UNIT_UPGRADED)


@dataclass(frozen=True)
class UnitDamaged(GameEvent):
    """Event emitted when combat results change a unit's health or experience."""
    unit_id: str
    territory_id: str
    health_before: int
    health_after: int
    experience_gained: int

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.UNIT_DAMAGED)


@dataclass(frozen=True)
class UnitLeveledUp(GameEvent):
    """Event emitted when a unit gains a level."""
    unit_id: str
    new_level: int
    specialization: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.UNIT_LEVELED_UP)


@dataclass(frozen=True)
class DoctrineChanged(GameEvent):
    """Event emitted when the current military doctrine changes."""
    doctrine_id: Optional[str]
    granted_cards: tuple[str, ...] = ()
    unlocked_units: tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.DOCTRINE_CHANGED)


@dataclass(frozen=True)
class LogMessage(GameEvent):
    """Event emitted when a log message is created."""
    message: str
    category: str
    level: str  # "DEBUG", "INFO", "WARNING", "ERROR"
    source: str

    def __post_init__(self):
        object.__setattr__(self, 'event_type', EventType.LOG_MESSAGE)
