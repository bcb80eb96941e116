from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Request
import logging

from backend.api.counter_store import CounterNotFoundError, CounterOverflowError, CounterStore, StorageError
from backend.api.schemas import INT64_MAX, INT64_MIN, Counter, CreateCounterInput, ResetCounterInput

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/counters", tags=["counters"])

# ids outside the SQLite INTEGER range are rejected with 422 before reaching the store
CounterId = Annotated[int, Path(ge=INT64_MIN, le=INT64_MAX)]


def get_store(request: Request) -> CounterStore:
    """Return the store opened by the app lifespan, opening one lazily if absent."""
    store = getattr(request.app.state, "store", None)
    if store is None:
        store = CounterStore()
        store.initialize()
        request.app.state.store = store
    return store


def _storage_failure(e: StorageError) -> HTTPException:
    return HTTPException(status_code=500, detail=f"Storage error during {e.operation}")


def _overflow(e: CounterOverflowError) -> HTTPException:
    return HTTPException(status_code=409, detail=str(e))


@router.post("", response_model=Counter)
def create_counter(payload: Optional[CreateCounterInput] = None, store: CounterStore = Depends(get_store)):
    """Create a counter. Body: { "value": optional int, default 0 }"""
    value = payload.value if payload is not None else 0
    try:
        return store.create(value)
    except StorageError as e:
        raise _storage_failure(e)


@router.get("", response_model=List[Counter])
def get_counters(store: CounterStore = Depends(get_store)):
    try:
        return store.list()
    except StorageError as e:
        raise _storage_failure(e)


@router.get("/{counter_id}", response_model=Optional[Counter])
def get_counter(counter_id: CounterId, store: CounterStore = Depends(get_store)):
    """Return the counter, or null when it does not exist (absence is not an error)."""
    try:
        return store.get(counter_id)
    except StorageError as e:
        raise _storage_failure(e)


@router.post("/{counter_id}/increment", response_model=Counter)
def increment_counter(counter_id: CounterId, store: CounterStore = Depends(get_store)):
    try:
        return store.increment(counter_id)
    except CounterNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except CounterOverflowError as e:
        raise _overflow(e)
    except StorageError as e:
        raise _storage_failure(e)


@router.post("/{counter_id}/decrement", response_model=Counter)
def decrement_counter(counter_id: CounterId, store: CounterStore = Depends(get_store)):
    try:
        return store.decrement(counter_id)
    except CounterNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except CounterOverflowError as e:
        raise _overflow(e)
    except StorageError as e:
        raise _storage_failure(e)


@router.post("/{counter_id}/reset", response_model=Counter)
def reset_counter(counter_id: CounterId, payload: Optional[ResetCounterInput] = None,
                  store: CounterStore = Depends(get_store)):
    """Reset a counter. Body: { "value": optional int, default 0 }"""
    value = payload.value if payload is not None else 0
    try:
        return store.reset(counter_id, value)
    except CounterNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except CounterOverflowError as e:
        raise _overflow(e)
    except StorageError as e:
        raise _storage_failure(e)
