"""
Pydantic models used across the backend.

`EventIn` is the request shape, `Event` is what storage receives once
the server has stamped it, and `Metric` is one aggregation row coming
back from storage.

Guidelines:
- `EventIn` fields default to empty values so a body missing
  `user_id`/`event_type` still parses; the service decides validity.
- Unknown request fields are ignored.
"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class EventIn(BaseModel):
    """Input shape for an event sent by clients.

    Fields:
    - `user_id`: identifier of the user who generated the event.
    - `event_type`: short event type, e.g. `login`.
    - `data`: opaque payload string, never inspected. `null` means empty.
    - `timestamp`: accepted for compatibility but always discarded.
    """

    user_id: str = ""
    event_type: str = ""
    data: Optional[str] = None
    timestamp: Optional[datetime] = None


class Event(BaseModel):
    """An accepted event. `timestamp` is server receive time (UTC)."""

    user_id: str
    event_type: str
    timestamp: datetime
    data: str = ""


class Metric(BaseModel):
    event_type: str
    count: int = Field(ge=0)
    date: str
