"""
Service / facade layer.

Business rules that sit between the HTTP handlers and storage. It is
free of SQL and HTTP; it only talks to an `AnalyticsStorage`.

Key responsibilities:
- validate event semantics (non-empty `user_id` and `event_type`)
- stamp the server-side timestamp; client time is never trusted
- parse report date bounds (`YYYY-MM-DD`)
- wrap every storage failure in `StorageError`

Each public method makes at most one storage call and never retries.
"""

import re
from datetime import date, datetime, timezone
from typing import Callable, List

from log import get_logger
from models import Event, EventIn, Metric
from storage import AnalyticsStorage, StorageError

logger = get_logger(__name__)

DATE_FORMAT = "%Y-%m-%d"
_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class InvalidEventError(ValueError):
    pass


class InvalidDateError(ValueError):
    pass


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_day(value: str) -> date:
    """Parse a strict `YYYY-MM-DD` calendar date. Raises ValueError."""

    if not _DATE_RE.match(value or ""):
        raise ValueError(f"not a YYYY-MM-DD date: {value!r}")
    return datetime.strptime(value, DATE_FORMAT).date()


class EventService:
    """Business rules + validation + normalization.

    Example usage:
        svc = EventService(MemoryStorage())
        svc.track_event(EventIn(user_id="u1", event_type="login"))
    """

    def __init__(self, storage: AnalyticsStorage, clock: Callable[[], datetime] = _utcnow):
        self.storage = storage
        self.clock = clock

    def track_event(self, event_in: EventIn) -> Event:
        """Validate, stamp and persist one event.

        Raises:
        - `InvalidEventError` if `user_id` or `event_type` is empty
        - `StorageError` if the storage call fails
        """

        if event_in.user_id == "" or event_in.event_type == "":
            raise InvalidEventError("Missing required fields")

        # Any client-supplied timestamp is dropped here.
        event = Event(
            user_id=event_in.user_id,
            event_type=event_in.event_type,
            data=event_in.data or "",
            timestamp=self.clock(),
        )

        try:
            self.storage.save_event(event)
        except Exception as exc:
            raise StorageError("Failed to save event") from exc
        return event

    def metrics_report(self, start_str: str, end_str: str, event_type: str = "") -> List[Metric]:
        """Parse the date bounds and fetch aggregated metrics.

        `start` is parsed before `end`, so a bad `start` is reported even
        when `end` is also bad.
        """

        try:
            start = parse_day(start_str)
        except ValueError:
            raise InvalidDateError("Invalid start date") from None
        try:
            end = parse_day(end_str)
        except ValueError:
            raise InvalidDateError("Invalid end date") from None

        try:
            rows = self.storage.get_metrics(start, end, event_type) or []
            # Order is whatever storage returned; never re-sort here.
            return [Metric.model_validate(r) for r in rows]
        except Exception as exc:
            raise StorageError("Failed to fetch metrics") from exc
