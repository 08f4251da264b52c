"""
Pipeline events

The pipeline announces run, entry, chunk and progress milestones on an
``EventBus``. Listeners are plain callables; one that raises is logged and
skipped so observers can never break a translation.
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from epub_scribe.utils.unified_logger import error

Listener = Callable[["Event"], None]


class EventType(Enum):
    TRANSLATION_STARTED = "translation_started"
    TRANSLATION_COMPLETED = "translation_completed"

    ENTRY_STARTED = "entry_started"
    ENTRY_COMPLETED = "entry_completed"
    ENTRY_FAILED = "entry_failed"
    ENTRY_SKIPPED = "entry_skipped"

    CHUNK_TRANSLATED = "chunk_translated"
    CHUNK_FAILED = "chunk_failed"

    # Validator rejection or lossy reassembly
    FALLBACK_USED = "fallback_used"

    PROGRESS = "progress"


@dataclass
class Event:
    """
    Attributes:
        type: What happened
        data: Payload, keyed by field name (``entry``, ``reason``, ``percent``...)
        timestamp: ``time.time()`` at creation
        source: Component that produced the event
    """
    type: EventType
    data: Dict[str, Any] = field(default_factory=dict)
    timestamp: float = field(default_factory=time.time)
    source: str = "pipeline"


class EventBus:
    """Synchronous publish/subscribe hub, optionally keeping a history."""

    def __init__(self, record_history: bool = False):
        self.record_history = record_history
        self._listeners: Dict[EventType, List[Listener]] = {}
        self._history: List[Event] = []

    def subscribe(self, event_type: EventType, callback: Listener) -> None:
        self._listeners.setdefault(event_type, []).append(callback)

    def subscribe_multiple(self, event_types: List[EventType], callback: Listener) -> None:
        for event_type in event_types:
            self.subscribe(event_type, callback)

    def unsubscribe(self, event_type: EventType, callback: Listener) -> None:
        """Remove a listener; unknown listeners are ignored."""
        listeners = self._listeners.get(event_type, [])
        if callback in listeners:
            listeners.remove(callback)

    def publish(self, event: Event) -> None:
        if self.record_history:
            self._history.append(event)

        for listener in list(self._listeners.get(event.type, [])):
            try:
                listener(event)
            except Exception as e:
                error(f"❌ Event listener failed on {event.type.value}: {e}")

    def get_history(self) -> List[Event]:
        """Recorded events, oldest first."""
        return list(self._history)

    def get_events_by_type(self, event_type: EventType) -> List[Event]:
        return [event for event in self._history if event.type == event_type]

    def clear_history(self) -> None:
        self._history.clear()


def create_translation_started_event(total_entries: int, total_chunks: int,
                                     source_language: str, target_language: str) -> Event:
    return Event(EventType.TRANSLATION_STARTED, {
        "total_entries": total_entries,
        "total_chunks": total_chunks,
        "source_language": source_language,
        "target_language": target_language,
    })


def create_translation_completed_event(stats: Dict[str, int]) -> Event:
    return Event(EventType.TRANSLATION_COMPLETED, dict(stats))


def create_entry_event(event_type: EventType, entry_name: str, **data: Any) -> Event:
    """
    Build an ENTRY_* event

    Args:
        event_type: One of the ENTRY_* types
        entry_name: Archive entry concerned
        **data: Extra fields such as ``chunk_count`` or ``reason``
    """
    return Event(event_type, {"entry": entry_name, **data})


def create_chunk_event(entry_name: str, chunk_index: int, total_chunks: int, success: bool,
                       attempts: int = 1, error: Optional[str] = None) -> Event:
    """CHUNK_TRANSLATED or CHUNK_FAILED depending on ``success``."""
    return Event(
        EventType.CHUNK_TRANSLATED if success else EventType.CHUNK_FAILED,
        {
            "entry": entry_name,
            "chunk_index": chunk_index,
            "total_chunks": total_chunks,
            "success": success,
            "attempts": attempts,
            "error": error,
        },
        source="scheduler",
    )


def create_fallback_event(entry_name: str, reason: str) -> Event:
    return Event(EventType.FALLBACK_USED, {"entry": entry_name, "reason": reason})


def create_progress_event(percent: float, completed_chunks: int, total_chunks: int) -> Event:
    return Event(EventType.PROGRESS, {
        "percent": percent,
        "completed_chunks": completed_chunks,
        "total_chunks": total_chunks,
    })
