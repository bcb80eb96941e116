"""SQLite-backed counter store.

Functions here centralize where the counters database lives. The location is
controlled by the environment variable COUNTERS_DB_PATH. If not set, it
defaults to <repo_root>/backend/data/counters.db.

Every operation opens its own connection, so the store can be shared between
threads (FastAPI runs sync routes in a threadpool). Increment and decrement
are single UPDATE statements evaluated by SQLite against the stored value,
which keeps concurrent callers from losing updates. Values stay inside the
signed 64-bit range of SQLite INTEGER; a mutation that would leave it is
refused with CounterOverflowError and the row is not changed.
"""
from __future__ import annotations

import os
import pathlib
import sqlite3
import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator, List, Optional, Tuple

from backend import metrics
from backend.api.schemas import INT64_MAX, INT64_MIN, Counter

logger = logging.getLogger(__name__)

DB_TIMEOUT_DEFAULT = 5.0

_SCHEMA = """
CREATE TABLE IF NOT EXISTS counters (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    value INTEGER NOT NULL DEFAULT 0 CHECK (typeof(value) = 'integer'),
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
)
"""

_COLUMNS = "id, value, created_at, updated_at"


class CounterNotFoundError(LookupError):
    """Raised when an operation targets a counter id that is not stored."""

    def __init__(self, counter_id: int):
        super().__init__(f"Counter with id {counter_id} not found")
        self.counter_id = counter_id


class CounterOverflowError(ValueError):
    """Raised when a value, or the result of a mutation, falls outside the 64-bit range."""

    def __init__(self, message: str, counter_id: Optional[int] = None):
        super().__init__(message)
        self.counter_id = counter_id


class StorageError(RuntimeError):
    """Raised when the underlying database fails."""

    def __init__(self, message: str, operation: str = None, original_error: Exception = None):
        super().__init__(message)
        self.operation = operation
        self.original_error = original_error


def get_repo_root() -> str:
    return os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))


def get_db_path() -> str:
    env = os.environ.get("COUNTERS_DB_PATH")
    if env:
        return os.path.abspath(env)
    return os.path.join(get_repo_root(), "backend", "data", "counters.db")


def get_db_timeout() -> float:
    env = os.environ.get("COUNTERS_DB_TIMEOUT")
    if env:
        try:
            return float(env)
        except ValueError:
            logger.warning(f"Invalid COUNTERS_DB_TIMEOUT: {env}, using {DB_TIMEOUT_DEFAULT}")
    return DB_TIMEOUT_DEFAULT


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


def _check_value(value: int) -> int:
    # bool is an int subclass; a True/False counter value is a caller bug
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"counter value must be an integer, got {type(value).__name__}")
    if not INT64_MIN <= value <= INT64_MAX:
        raise CounterOverflowError(f"counter value {value} is outside the range [{INT64_MIN}, {INT64_MAX}]")
    return value


def _row_to_counter(row: sqlite3.Row) -> Counter:
    return Counter(
        id=row["id"],
        value=row["value"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class CounterStore:
    """Durable home for counter records.

    Usage:
      store = CounterStore("/tmp/counters.db")
      store.initialize()
      c = store.create(5)
      store.increment(c.id)
    """

    def __init__(self, path: Optional[str] = None, timeout: Optional[float] = None) -> None:
        self.path = path or get_db_path()
        self.timeout = timeout if timeout is not None else get_db_timeout()

    @contextmanager
    def _connect(self, operation: str) -> Iterator[sqlite3.Connection]:
        """Yield a connection inside a transaction; commit on success, roll back on error."""
        try:
            conn = sqlite3.connect(self.path, timeout=self.timeout)
        except sqlite3.Error as e:
            raise StorageError(f"Failed to open counter database {self.path}: {e}",
                               operation=operation, original_error=e) from e
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            logger.error(f"Counter store {operation} failed: {e}", exc_info=True)
            raise StorageError(f"Counter store {operation} failed: {e}",
                               operation=operation, original_error=e) from e
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def initialize(self) -> None:
        """Create the database directory and schema if they do not exist yet."""
        pathlib.Path(self.path).parent.mkdir(parents=True, exist_ok=True)
        with self._connect("initialize") as conn:
            conn.execute(_SCHEMA)
        logger.info(f"Counter store ready at {self.path}")

    def create(self, initial_value: int = 0) -> Counter:
        value = _check_value(initial_value)
        now = _now()
        with self._connect("create") as conn:
            cur = conn.execute(
                "INSERT INTO counters (value, created_at, updated_at) VALUES (?, ?, ?)",
                (value, now, now),
            )
            row = conn.execute(
                f"SELECT {_COLUMNS} FROM counters WHERE id = ?", (cur.lastrowid,)
            ).fetchone()
        metrics.inc("counter_create")
        logger.debug(f"Created counter id={row['id']} value={value}")
        return _row_to_counter(row)

    def get(self, counter_id: int) -> Optional[Counter]:
        """Return the counter with this id, or None when it does not exist."""
        if not INT64_MIN <= counter_id <= INT64_MAX:
            return None
        with self._connect("get") as conn:
            row = conn.execute(
                f"SELECT {_COLUMNS} FROM counters WHERE id = ?", (counter_id,)
            ).fetchone()
        if row is None:
            return None
        return _row_to_counter(row)

    def list(self) -> List[Counter]:
        with self._connect("list") as conn:
            rows = conn.execute(f"SELECT {_COLUMNS} FROM counters ORDER BY id").fetchall()
        return [_row_to_counter(r) for r in rows]

    def count(self) -> int:
        with self._connect("count") as conn:
            (n,) = conn.execute("SELECT COUNT(*) FROM counters").fetchone()
        return n

    def increment(self, counter_id: int) -> Counter:
        return self._update(
            "increment", counter_id, "value = value + 1", (), guard=("value < ?", INT64_MAX)
        )

    def decrement(self, counter_id: int) -> Counter:
        return self._update(
            "decrement", counter_id, "value = value - 1", (), guard=("value > ?", INT64_MIN)
        )

    def reset(self, counter_id: int, value: int = 0) -> Counter:
        """Set the counter to ``value``. created_at is left untouched."""
        return self._update(
            "reset", counter_id, "value = ?", (_check_value(value),)
        )

    def _update(self, operation: str, counter_id: int, assignment: str, params: tuple,
                guard: Optional[Tuple[str, int]] = None) -> Counter:
        """Apply ``assignment`` to one row in a single UPDATE and read the row back.

        The read happens in the same transaction, while SQLite still holds the
        write lock, so the returned record is exactly the one this update produced.
        updated_at never moves backwards even if the wall clock does.

        ``guard`` is an extra WHERE condition that keeps the stored value inside
        the 64-bit range; when it blocks the update the row is left unchanged and
        CounterOverflowError is raised.
        """
        if not INT64_MIN <= counter_id <= INT64_MAX:
            metrics.inc("counter_not_found")
            raise CounterNotFoundError(counter_id)
        where, where_params = "id = ?", (counter_id,)
        if guard is not None:
            where, where_params = f"id = ? AND {guard[0]}", (counter_id, guard[1])
        with self._connect(operation) as conn:
            cur = conn.execute(
                f"UPDATE counters SET {assignment}, updated_at = MAX(updated_at, ?) WHERE {where}",
                params + (_now(),) + where_params,
            )
            row = conn.execute(
                f"SELECT {_COLUMNS} FROM counters WHERE id = ?", (counter_id,)
            ).fetchone()
            if row is None:
                metrics.inc("counter_not_found")
                raise CounterNotFoundError(counter_id)
            if cur.rowcount == 0:
                metrics.inc("counter_overflow")
                raise CounterOverflowError(
                    f"Counter with id {counter_id} cannot {operation} past {row['value']}",
                    counter_id=counter_id,
                )
        metrics.inc(f"counter_{operation}")
        logger.debug(f"Counter {operation}: id={counter_id} value={row['value']}")
        return _row_to_counter(row)
