"""
Engine log buffer.

Every manager reports what it does as LogMessage events on the engine's
event bus. LogManager turns those into entries in a bounded buffer that a
front end can page through, filter by category and severity, or dump to a
file after a session.
"""
import os
from collections import Counter, deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from typing import Iterable, Optional, TYPE_CHECKING

from ..core.events import EventType, LogMessage

if TYPE_CHECKING:
    from ..core.event_manager import EventManager


class LogCategory(Enum):
    """What part of the engine a message comes from."""
    SYSTEM = auto()     # Data loading, engine setup
    BATTLE = auto()     # Combat sessions and rounds
    MOVEMENT = auto()
    TRAINING = auto()   # Training, upgrades, upkeep
    DOCTRINE = auto()
    AI = auto()
    DEBUG = auto()
    WARNING = auto()
    ERROR = auto()


class LogLevel(Enum):
    DEBUG = 0
    INFO = 1
    WARNING = 2
    ERROR = 3


CATEGORY_TAGS = {
    LogCategory.SYSTEM: "SYS",
    LogCategory.BATTLE: "BTL",
    LogCategory.MOVEMENT: "MOV",
    LogCategory.TRAINING: "TRN",
    LogCategory.DOCTRINE: "DOC",
    LogCategory.AI: "AI",
    LogCategory.DEBUG: "DBG",
    LogCategory.WARNING: "WRN",
    LogCategory.ERROR: "ERR",
}


def _parse_enum(enum_type, name: str, default):
    try:
        return enum_type[name.upper()]
    except KeyError:
        return default


@dataclass
class LogEntry:
    """One buffered message."""
    text: str
    category: LogCategory
    level: LogLevel = LogLevel.INFO
    source: str = ""
    timestamp: datetime = field(default_factory=datetime.now)

    def format(self, include_timestamp: bool = False, include_category: bool = True) -> str:
        prefix = []
        if include_timestamp:
            prefix.append(self.timestamp.strftime('[%H:%M:%S]'))
        if include_category:
            prefix.append(f"[{CATEGORY_TAGS[self.category]}]")
        return " ".join(prefix + [self.text])

    def report_line(self) -> str:
        """Unfiltered line for saved reports."""
        stamp = self.timestamp.strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]
        source = f" ({self.source})" if self.source else ""
        return f"[{stamp}] [{self.category.name}] [{self.level.name}] {self.text}{source}"


@dataclass
class LogFilter:
    """Which entries get_messages returns."""
    min_level: LogLevel = LogLevel.INFO
    categories: set[LogCategory] = field(default_factory=lambda: set(LogCategory))

    def accepts(self, entry: LogEntry) -> bool:
        return entry.category in self.categories and entry.level.value >= self.min_level.value


class LogManager:
    """Bounded buffer of engine messages fed by LogMessage events."""

    def __init__(
        self,
        event_manager: "EventManager",
        max_messages: int = 1000,
        default_level: LogLevel = LogLevel.INFO
    ):
        """Create the buffer and subscribe it to the bus.

        Args:
            event_manager: Bus the engine publishes LogMessage events on
            max_messages: Oldest entries are dropped beyond this size
            default_level: Minimum level returned by get_messages
        """
        self.messages: deque[LogEntry] = deque(maxlen=max_messages)
        self.filter = LogFilter(min_level=default_level)
        self.event_manager = event_manager

        event_manager.subscribe(EventType.LOG_MESSAGE, self._on_log_message, subscriber_name="LogManager")

    def _on_log_message(self, event) -> None:
        if not isinstance(event, LogMessage):
            return
        self.messages.append(LogEntry(
            text=event.message,
            category=_parse_enum(LogCategory, event.category, LogCategory.SYSTEM),
            level=_parse_enum(LogLevel, event.level, LogLevel.INFO),
            source=event.source,
        ))

    # ============== Writing ==============

    def log(self, text: str, category: LogCategory = LogCategory.SYSTEM, level: LogLevel = LogLevel.INFO) -> None:
        """Add an entry without going through the bus."""
        self.messages.append(LogEntry(text=text, category=category, level=level, source="LogManager"))

    def system(self, text: str) -> None:
        self.log(text, LogCategory.SYSTEM)

    def battle(self, text: str) -> None:
        self.log(text, LogCategory.BATTLE)

    def debug(self, text: str) -> None:
        self.log(text, LogCategory.DEBUG, LogLevel.DEBUG)

    def warning(self, text: str) -> None:
        self.log(text, LogCategory.WARNING, LogLevel.WARNING)

    def error(self, text: str) -> None:
        self.log(text, LogCategory.ERROR, LogLevel.ERROR)

    def clear(self) -> None:
        self.messages.clear()

    # ============== Reading ==============

    def get_messages(
        self,
        count: Optional[int] = None,
        categories: Optional[Iterable[LogCategory]] = None
    ) -> list[LogEntry]:
        """Entries passing the filter, oldest first.

        Args:
            count: Only the most recent entries (None for all)
            categories: Narrow the filter to these categories
        """
        wanted = self.filter.categories if categories is None else self.filter.categories & set(categories)
        entries = [e for e in self.messages if e.category in wanted and self.filter.accepts(e)]
        return entries if count is None else entries[-count:] if count > 0 else []

    def summary(self) -> dict[LogCategory, int]:
        """Number of buffered entries per category, ignoring the filter."""
        return dict(Counter(entry.category for entry in self.messages))

    # ============== Filtering ==============

    def enable_category(self, category: LogCategory) -> None:
        self.filter.categories.add(category)

    def disable_category(self, category: LogCategory) -> None:
        self.filter.categories.discard(category)

    def set_log_level(self, level: LogLevel) -> None:
        self.filter.min_level = level

    def is_debug_enabled(self) -> bool:
        return LogCategory.DEBUG in self.filter.categories and self.filter.min_level is LogLevel.DEBUG

    def toggle_debug(self) -> None:
        """Switch between showing and hiding debug entries."""
        if self.is_debug_enabled():
            self.set_log_level(LogLevel.INFO)
        else:
            self.enable_category(LogCategory.DEBUG)
            self.set_log_level(LogLevel.DEBUG)

    # ============== Reports ==============

    def save_log_to_file(self, log_dir: str = "logs") -> Optional[str]:
        """Write every buffered entry, ignoring the filter, to a timestamped report.

        Returns:
            The report path, or None if it could not be written
        """
        now = datetime.now()
        filepath = os.path.join(log_dir, f"military_{now.strftime('%Y%m%d_%H%M%S')}.log")
        counts = ", ".join(f"{category.name.lower()} {n}" for category, n in self.summary().items())

        try:
            os.makedirs(log_dir, exist_ok=True)
            with open(filepath, 'w', encoding='utf-8') as f:
                f.write(f"Empire Military engine log, {now.strftime('%Y-%m-%d %H:%M:%S')}\n")
                f.write(f"Entries: {len(self.messages)} ({counts or 'none'})\n\n")
                f.writelines(entry.report_line() + "\n" for entry in self.messages)
        except OSError as e:
            self.error(f"Failed to save log file: {e}")
            return None

        self.system(f"Engine log saved to {filepath}")
        return filepath
