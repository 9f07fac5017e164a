"""
Interaction event store.

The event log is a single process-wide, append-only list with no user or
session key. Callers inject a store into the recommendation service so that
assumption is explicit.

Backends:
1. InMemoryEventStore: for development/testing
2. JsonFileEventStore: the events.json file layout
"""

import json
from pathlib import Path
from threading import Lock
from typing import Any, List, Protocol, runtime_checkable

from core.logging import get_logger
from core.utils import atomic_write_json, utc_now_iso
from recs.models import InteractionEvent


logger = get_logger(__name__)


@runtime_checkable
class EventStore(Protocol):
    """Append/list/clear interface over the interaction log."""

    def append(self, event: InteractionEvent) -> InteractionEvent: ...

    def list_events(self) -> List[InteractionEvent]: ...

    def clear(self) -> None: ...


def _stamped(event: InteractionEvent) -> InteractionEvent:
    if event.timestamp:
        return event
    return event.model_copy(update={"timestamp": utc_now_iso()})


class InMemoryEventStore:
    """Thread-safe in-memory event log."""

    def __init__(self) -> None:
        self._events: List[InteractionEvent] = []
        self._lock = Lock()

    def append(self, event: InteractionEvent) -> InteractionEvent:
        stamped = _stamped(event)
        with self._lock:
            self._events.append(stamped)
        return stamped

    def list_events(self) -> List[InteractionEvent]:
        with self._lock:
            return list(self._events)

    def clear(self) -> None:
        with self._lock:
            self._events.clear()


class EventLogError(RuntimeError):
    """The event log file exists but cannot be appended to safely."""


class JsonFileEventStore:
    """
    Event log persisted as a JSON list of {productId, action, timestamp}.

    Reads are lenient: a corrupt file lists as empty and malformed entries
    are skipped. Appends keep every existing entry as-is and refuse to
    overwrite a file that is not a readable JSON list. Writes from this
    process are serialized by a lock; multi-process writers are not
    coordinated.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._lock = Lock()

    def _load_raw(self) -> List[Any]:
        if not self.path.exists():
            return []
        try:
            with self.path.open("r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise EventLogError(f"Could not read event log {self.path}: {e}") from e

        if not isinstance(raw, list):
            raise EventLogError(f"Event log {self.path} is not a JSON list")
        return raw

    def append(self, event: InteractionEvent) -> InteractionEvent:
        stamped = _stamped(event)
        with self._lock:
            raw = self._load_raw()
            raw.append(stamped.model_dump(by_alias=True))
            atomic_write_json(self.path, raw)
        return stamped

    def list_events(self) -> List[InteractionEvent]:
        with self._lock:
            try:
                raw = self._load_raw()
            except EventLogError as e:
                logger.warning("Event log unreadable, treating as empty", path=str(self.path), error=str(e))
                return []

        events: List[InteractionEvent] = []
        for entry in raw:
            try:
                events.append(InteractionEvent.model_validate(entry))
            except ValueError as e:
                logger.debug("Skipping malformed event", entry=entry, error=str(e))
        return events

    def clear(self) -> None:
        with self._lock:
            atomic_write_json(self.path, [])
