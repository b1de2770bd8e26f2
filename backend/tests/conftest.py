import threading
from typing import List, Optional

import httpx
import pytest
import pytest_asyncio

from main import create_app
from models import Metric


class RecordingStorage:
    """Fake storage: records calls and returns scripted results."""

    def __init__(self, metrics: Optional[List[Metric]] = None, error: Optional[Exception] = None):
        self.metrics = metrics if metrics is not None else []
        self.error = error
        self.saved = []
        self.queries = []
        self._lock = threading.Lock()

    def save_event(self, event):
        with self._lock:
            self.saved.append(event)
        if self.error is not None:
            raise self.error

    def get_metrics(self, start, end, event_type):
        with self._lock:
            self.queries.append((start, end, event_type))
        if self.error is not None:
            raise self.error
        return self.metrics


@pytest.fixture
def storage():
    return RecordingStorage()


@pytest_asyncio.fixture
async def client(storage):
    app = create_app(storage=storage)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
