"""Pytest config to ensure project root is on sys.path during test collection.

Some environments run pytest with a different working directory which can
lead to "No module named 'backend'" import errors. This file ensures the
repository root is available to the test process, and points the counter
store at a per-test database file.
"""
import os
import sys

import pytest

_HERE = os.path.dirname(__file__)
_ROOT = os.path.abspath(os.path.join(_HERE, ".."))  # backend/
PROJECT_ROOT = os.path.abspath(os.path.join(_ROOT, ".."))  # repo root

# Insert project root at front of sys.path if not already present
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)


@pytest.fixture
def db_path(tmp_path, monkeypatch):
    path = tmp_path / "counters.db"
    monkeypatch.setenv("COUNTERS_DB_PATH", str(path))
    return str(path)


@pytest.fixture
def store(db_path):
    from backend.api.counter_store import CounterStore

    s = CounterStore(db_path)
    s.initialize()
    return s


@pytest.fixture
def client(db_path):
    from fastapi.testclient import TestClient
    from backend.api.main import app

    # Use context manager so the FastAPI lifespan runs and app.state.store is opened
    with TestClient(app) as c:
        yield c
