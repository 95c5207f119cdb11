"""In-memory idempotent event store."""

import logging
import threading

from signalrouter.config import get_settings
from signalrouter.domain.models import InsertResult, NormalizedEvent, StoredEvent
from signalrouter.utils.timestamps import utc_now

log = logging.getLogger(__name__)


class EventStore:
    """Holds normalized events keyed by ``event_id`` for the process lifetime.

    All reads and writes go through the lock; records handed out are copies,
    so delivery metadata only changes through ``mark_delivered``.
    """

    def __init__(self, default_limit: int | None = None) -> None:
        self.default_limit = default_limit if default_limit is not None else get_settings().default_query_limit
        self._lock = threading.Lock()
        # dicts keep insertion order, which is the recency order for query()
        self._events: dict[str, StoredEvent] = {}

    def insert_if_absent(self, event: NormalizedEvent) -> InsertResult:
        with self._lock:
            existing = self._events.get(event.event_id)
            if existing is not None:
                return InsertResult(inserted=False, stored=existing.model_copy(deep=True))
            stored = StoredEvent(event=event, first_seen_at=utc_now())
            self._events[event.event_id] = stored
            return InsertResult(inserted=True, stored=stored.model_copy(deep=True))

    def mark_delivered(self, event_id: str, destination: str) -> None:
        with self._lock:
            stored = self._events.get(event_id)
            if stored is None:
                log.warning("mark_delivered for unknown event_id=%s destination=%s", event_id, destination)
                return
            stored.delivery.routed = True
            stored.delivery.delivered_to.append(destination)

    def get(self, event_id: str) -> StoredEvent | None:
        with self._lock:
            stored = self._events.get(event_id)
            return stored.model_copy(deep=True) if stored is not None else None

    def query(self, limit: int | None = None) -> list[StoredEvent]:
        if limit is None:
            limit = self.default_limit
        if limit <= 0:
            return []
        with self._lock:
            recent = list(self._events.values())[-limit:]
            return [stored.model_copy(deep=True) for stored in reversed(recent)]

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)
