from dataclasses import FrozenInstanceError
from datetime import timedelta

import pytest

from counter_gui.constants import LOCAL_COUNTER_ID, LOCAL_COUNTER_VALUE
from counter_gui.models.controller_state import (
    ActionDispatched,
    Authority,
    CounterAction,
    InitializationFailed,
    InitializationStarted,
    InitializationSucceeded,
    LocalActionApplied,
    RemoteActionFailed,
    RemoteActionSucceeded,
    apply_locally,
    initial_state,
    reduce,
)


@pytest.fixture
def start():
    return initial_state()


def test_initial_state_is_local_default(start):
    assert start.counter.id == LOCAL_COUNTER_ID
    assert start.counter.value == LOCAL_COUNTER_VALUE
    assert start.counter.created_at == start.counter.updated_at
    assert start.is_initializing
    assert not start.backend_connected
    assert not start.is_loading
    assert start.pending == ()


def test_state_is_immutable(start):
    with pytest.raises(FrozenInstanceError):
        start.backend_connected = True


@pytest.mark.parametrize("action, expected", [
    (CounterAction.increment(), 4),
    (CounterAction.decrement(), 2),
    (CounterAction.reset(), 0),
    (CounterAction.reset(-9), -9),
])
def test_apply_locally(counter_factory, action, expected):
    c = counter_factory(8, 3)
    later = c.updated_at + timedelta(seconds=1)
    out = apply_locally(c, action, later)
    assert out.value == expected
    assert out.id == c.id
    assert out.created_at == c.created_at
    assert out.updated_at == later


def test_decrement_below_zero(counter_factory):
    c = counter_factory(1, 0)
    assert apply_locally(c, CounterAction.decrement(), c.updated_at).value == -1


def test_initialization_success(start, counter_factory):
    remote = counter_factory(9, 12)
    s = reduce(start, InitializationSucceeded(remote))
    assert s.counter == remote
    assert s.backend_connected
    assert not s.is_initializing
    assert s.authority is Authority.AUTHORITATIVE


def test_initialization_failure_keeps_counter(start):
    s = reduce(start, InitializationFailed())
    assert s.counter == start.counter
    assert not s.backend_connected
    assert not s.is_initializing
    assert s.authority is Authority.LOCAL_ONLY


def test_initialization_started_sets_flag(start):
    done = reduce(start, InitializationFailed())
    assert reduce(done, InitializationStarted()).is_initializing


def test_action_dispatched_sets_loading(start):
    assert reduce(start, ActionDispatched(CounterAction.increment())).is_loading


def test_remote_success_replaces_counter(start, counter_factory):
    connected = reduce(start, InitializationSucceeded(counter_factory(9, 1)))
    loading = reduce(connected, ActionDispatched(CounterAction.increment()))
    remote = counter_factory(9, 2)
    s = reduce(loading, RemoteActionSucceeded(remote))
    assert s.counter == remote
    assert not s.is_loading
    assert s.backend_connected


def test_remote_failure_applies_locally_and_disconnects(start, counter_factory):
    connected = reduce(start, InitializationSucceeded(counter_factory(9, 1)))
    now = connected.counter.updated_at + timedelta(seconds=5)
    s = reduce(connected, RemoteActionFailed(CounterAction.increment(), now))
    assert s.counter.value == 2
    assert s.counter.updated_at == now
    assert not s.backend_connected
    assert s.authority is Authority.LOCAL_ONLY
    assert s.pending == (CounterAction.increment(),)


def test_local_actions_accumulate_pending(start):
    s = reduce(start, InitializationFailed())
    now = s.counter.updated_at
    for action in (CounterAction.increment(), CounterAction.increment(), CounterAction.reset(7)):
        s = reduce(s, LocalActionApplied(action, now))
    assert s.counter.value == 7
    assert len(s.pending) == 3


def test_reconnect_clears_pending(start, counter_factory):
    s = reduce(start, InitializationFailed())
    s = reduce(s, LocalActionApplied(CounterAction.increment(), s.counter.updated_at))
    s = reduce(s, InitializationSucceeded(counter_factory(9, 0)))
    assert s.pending == ()
    assert s.counter.value == 0


def test_unknown_event_rejected(start):
    with pytest.raises(TypeError):
        reduce(start, object())
