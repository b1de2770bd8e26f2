"""
Database connection helper.

Centralizes how connections are created. Right now every call opens a
new connection with `psycopg.connect(settings.db_url)`.

Usage:
    from db import get_conn
    with get_conn() as conn:
        with conn.cursor() as cur:
            cur.execute("SELECT 1;")

`ensure_schema()` creates the `events` table used by `EventRepo`. It is
idempotent and safe to run on every deploy.
"""

import psycopg
from settings import settings

DDL = """
CREATE TABLE IF NOT EXISTS events (
    id BIGSERIAL PRIMARY KEY,
    user_id TEXT NOT NULL,
    event_type TEXT NOT NULL,
    ts TIMESTAMP WITH TIME ZONE NOT NULL,
    data TEXT NOT NULL DEFAULT ''
);

CREATE INDEX IF NOT EXISTS idx_events_ts_type ON events (ts, event_type);
"""


def get_conn():
    """Return a new psycopg connection using `settings.db_url`.

    `connect_timeout` keeps HTTP requests from hanging when the
    database is unreachable.
    """

    return psycopg.connect(settings.db_url, connect_timeout=settings.db_connect_timeout)


def ensure_schema() -> None:
    with get_conn() as conn:
        with conn.cursor() as cur:
            cur.execute(DDL)
        conn.commit()
