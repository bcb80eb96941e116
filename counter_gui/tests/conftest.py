import os
import sys
from dataclasses import replace

import pytest

# Ensure repo root is on sys.path for tests so `backend` and `counter_gui` imports resolve
repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', '..'))
if repo_root not in sys.path:
    sys.path.insert(0, repo_root)

# Widgets are created without a display
os.environ.setdefault('QT_QPA_PLATFORM', 'offscreen')

from counter_gui.exceptions import BackendUnavailableError, CounterNotFoundError
from counter_gui.models.counter import Counter, utc_now


class FakeCounterApi:
    """In-memory stand-in for CounterApiClient.

    Operations listed in ``failing`` raise BackendUnavailableError; ``offline``
    makes every call fail. ``calls`` records operation names in order.
    """

    def __init__(self, counters=None):
        self.counters = {c.id: c for c in (counters or [])}
        self.next_id = max(self.counters, default=0) + 1
        self.failing = set()
        self.offline = False
        self.calls = []

    def _enter(self, operation):
        self.calls.append(operation)
        if self.offline or operation in self.failing:
            raise BackendUnavailableError('connection refused', operation=operation)

    def _update(self, counter_id, value):
        if counter_id not in self.counters:
            raise CounterNotFoundError(f"Counter with id {counter_id} not found", counter_id=counter_id)
        c = replace(self.counters[counter_id], value=value, updated_at=utc_now())
        self.counters[counter_id] = c
        return c

    def get_counters(self):
        self._enter('get_counters')
        return list(self.counters.values())

    def create_counter(self, value=None):
        self._enter('create_counter')
        now = utc_now()
        c = Counter(id=self.next_id, value=value or 0, created_at=now, updated_at=now)
        self.counters[c.id] = c
        self.next_id += 1
        return c

    def increment_counter(self, counter_id):
        self._enter('increment_counter')
        current = self.counters.get(counter_id)
        return self._update(counter_id, current.value + 1 if current else 0)

    def decrement_counter(self, counter_id):
        self._enter('decrement_counter')
        current = self.counters.get(counter_id)
        return self._update(counter_id, current.value - 1 if current else 0)

    def reset_counter(self, counter_id, value=None):
        self._enter('reset_counter')
        return self._update(counter_id, value or 0)


def make_counter(counter_id=7, value=0):
    now = utc_now()
    return Counter(id=counter_id, value=value, created_at=now, updated_at=now)


@pytest.fixture
def fake_api():
    return FakeCounterApi()


@pytest.fixture
def counter_factory():
    return make_counter


@pytest.fixture
def fake_api_factory():
    return FakeCounterApi


@pytest.fixture
def backend_client(tmp_path, monkeypatch):
    """TestClient running the real backend app against a temporary database."""
    from fastapi.testclient import TestClient
    from backend.api.main import app

    monkeypatch.setenv('COUNTERS_DB_PATH', str(tmp_path / 'counters.db'))
    with TestClient(app) as client:
        yield client


@pytest.fixture
def qapp():
    from PySide6 import QtWidgets

    return QtWidgets.QApplication.instance() or QtWidgets.QApplication([])
