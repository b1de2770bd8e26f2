"""
Repository: SQL operations for `events`.

This file contains only DB interaction code and implements the
`storage.AnalyticsStorage` contract on PostgreSQL. Keep business rules
out of this module.

Important notes:
- SQL uses positional parameters for psycopg.
- Days are UTC calendar days: `[start 00:00, end+1 00:00)` in UTC.
- `save_event` commits before returning; callers expect the write to
  be durable after the method returns.
- Each call opens its own connection, so concurrent requests never
  share a cursor.
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import List

from db import get_conn
from models import Event, Metric

_METRICS_SQL = (
    "SELECT event_type, COUNT(*), (ts AT TIME ZONE 'UTC')::date AS day "
    "FROM events WHERE {where} "
    "GROUP BY event_type, day ORDER BY day, event_type"
)


def _utc_midnight(d: date) -> datetime:
    return datetime.combine(d, time.min, tzinfo=timezone.utc)


class EventRepo:
    """DB access only. No business logic here.

    Responsibilities:
    - Map `Event` -> SQL parameters
    - Aggregate rows into `Metric` objects
    - Keep transaction/commit boundaries local and explicit
    """

    def save_event(self, event: Event) -> None:
        with get_conn() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "INSERT INTO events (user_id, event_type, ts, data) VALUES (%s, %s, %s, %s)",
                    (event.user_id, event.event_type, event.timestamp, event.data),
                )
            conn.commit()

    def get_metrics(self, start: date, end: date, event_type: str) -> List[Metric]:
        """Count events per (event_type, UTC day) between `start` and `end`.

        Both bounds are inclusive calendar days. An empty `event_type`
        counts every type.
        """

        clauses = ["ts >= %s"]
        params: list = [_utc_midnight(start)]
        # date.max has no next day; leave the range open-ended instead.
        if end < date.max:
            clauses.append("ts < %s")
            params.append(_utc_midnight(end + timedelta(days=1)))
        if event_type:
            clauses.append("event_type = %s")
            params.append(event_type)

        with get_conn() as conn:
            with conn.cursor() as cur:
                cur.execute(_METRICS_SQL.format(where=" AND ".join(clauses)), params)
                return [
                    Metric(event_type=r[0], count=r[1], date=r[2].isoformat())
                    for r in cur.fetchall()
                ]

    def ping(self) -> None:
        """Lightweight DB health check. Raises on error."""

        with get_conn() as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1;")
