from datetime import date, datetime, timezone

import pytest

from models import EventIn, Metric
from service_events import (
    EventService,
    InvalidDateError,
    InvalidEventError,
    parse_day,
)
from storage import StorageError

FIXED_NOW = datetime(2024, 5, 17, 12, 30, tzinfo=timezone.utc)


class ScriptedStorage:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.calls = []

    def save_event(self, event):
        self.calls.append(("save", event))
        if self.error:
            raise self.error

    def get_metrics(self, start, end, event_type):
        self.calls.append(("metrics", start, end, event_type))
        if self.error:
            raise self.error
        return self.result


def test_track_event_stamps_server_time():
    storage = ScriptedStorage()
    svc = EventService(storage, clock=lambda: FIXED_NOW)
    ev = svc.track_event(
        EventIn(user_id="u1", event_type="login", data="x", timestamp=datetime(1999, 1, 1))
    )

    assert ev.timestamp == FIXED_NOW
    assert storage.calls == [("save", ev)]


def test_track_event_rejects_empty_fields_without_storage_call():
    storage = ScriptedStorage()
    svc = EventService(storage)
    with pytest.raises(InvalidEventError):
        svc.track_event(EventIn(user_id="", event_type="login"))
    with pytest.raises(InvalidEventError):
        svc.track_event(EventIn(user_id="u1", event_type=""))
    assert storage.calls == []


def test_storage_failure_is_wrapped():
    cause = ConnectionError("db down")
    svc = EventService(ScriptedStorage(error=cause))
    with pytest.raises(StorageError) as info:
        svc.track_event(EventIn(user_id="u1", event_type="login"))

    assert str(info.value) == "Failed to save event"
    assert info.value.__cause__ is cause


def test_storage_value_error_is_still_a_storage_failure():
    svc = EventService(ScriptedStorage(error=ValueError("constraint violated")))
    with pytest.raises(StorageError):
        svc.metrics_report("2023-01-01", "2023-01-02")


def test_metrics_report_start_checked_before_end():
    storage = ScriptedStorage(result=[])
    svc = EventService(storage)
    with pytest.raises(InvalidDateError, match="start"):
        svc.metrics_report("nope", "also-nope")
    assert storage.calls == []


def test_metrics_report_none_becomes_empty_list():
    svc = EventService(ScriptedStorage(result=None))
    assert svc.metrics_report("2023-01-01", "2023-01-02") == []


def test_metrics_report_accepts_dict_rows():
    svc = EventService(ScriptedStorage(result=[{"event_type": "a", "count": 2, "date": "2023-01-01"}]))
    assert svc.metrics_report("2023-01-01", "2023-01-02") == [
        Metric(event_type="a", count=2, date="2023-01-01")
    ]


def test_start_after_end_is_passed_through():
    storage = ScriptedStorage(result=[])
    EventService(storage).metrics_report("2023-12-31", "2023-01-01", "login")
    assert storage.calls == [("metrics", date(2023, 12, 31), date(2023, 1, 1), "login")]


@pytest.mark.parametrize("value", ["", "2023-13-01", "2023-1-01", "20230101", "2023-01-01T00:00", " 2023-01-01"])
def test_parse_day_rejects(value):
    with pytest.raises(ValueError):
        parse_day(value)


def test_parse_day():
    assert parse_day("2024-02-29") == date(2024, 2, 29)
