"""
Storage contract shared by the handlers and the storage backends.

The HTTP layer only ever talks to `AnalyticsStorage`. Two backends
implement it: `repo_events.EventRepo` (PostgreSQL) and `MemoryStorage`
below (single process, used for local runs and tests).

Contract notes:
- Both operations may raise anything; callers treat every exception as
  a storage failure.
- Implementations own their concurrency. Callers never lock around
  them and may call them from many threads at once.
- `get_metrics` counts events whose timestamp falls on a UTC calendar
  day in `[start, end]`, grouped by `(event_type, day)`. An empty
  `event_type` means all types.
"""

import threading
from collections import Counter
from datetime import date, timezone
from typing import List, Protocol

from models import Event, Metric


class StorageError(RuntimeError):
    """Raised by the service layer when a storage call fails.

    The original exception is kept as `__cause__` for logging; it must
    never reach a client.
    """


class AnalyticsStorage(Protocol):
    def save_event(self, event: Event) -> None:
        ...

    def get_metrics(self, start: date, end: date, event_type: str) -> List[Metric]:
        ...


class MemoryStorage:
    """In-process storage. Rows are ordered by day, then event type."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._events: List[Event] = []

    def save_event(self, event: Event) -> None:
        with self._lock:
            self._events.append(event)

    def get_metrics(self, start: date, end: date, event_type: str) -> List[Metric]:
        with self._lock:
            events = list(self._events)

        counts: Counter = Counter()
        for e in events:
            if event_type and e.event_type != event_type:
                continue
            day = e.timestamp.astimezone(timezone.utc).date()
            if start <= day <= end:
                counts[(day, e.event_type)] += 1

        return [
            Metric(event_type=etype, count=n, date=day.isoformat())
            for (day, etype), n in sorted(counts.items())
        ]

    def ping(self) -> None:
        return None
