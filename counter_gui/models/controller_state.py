"""
Controller state model and reducer for the counter client.

The client's view of the counter is one immutable ControllerState value. Every
change goes through reduce(state, event), so the Initializing / Connected /
Disconnected transitions live in one function instead of being spread over
independently mutated flags.
"""
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple, Union

from counter_gui.constants import (
    LOCAL_COUNTER_ID, LOCAL_COUNTER_VALUE, RESET_VALUE_DEFAULT,
    RECONNECT_POLICY_DISCARD_LOCAL, RECONNECT_POLICY_REPLAY_LOCAL,
)
from counter_gui.models.counter import Counter, utc_now


class Authority(Enum):
    """Who the displayed counter value comes from."""
    AUTHORITATIVE = 'authoritative'  # last value returned by the backend
    LOCAL_ONLY = 'local_only'  # includes changes the backend has not seen


class ReconnectPolicy(Enum):
    """What happens to offline edits when the backend becomes reachable again."""
    DISCARD_LOCAL = RECONNECT_POLICY_DISCARD_LOCAL
    REPLAY_LOCAL = RECONNECT_POLICY_REPLAY_LOCAL


class ActionKind(Enum):
    INCREMENT = 'increment'
    DECREMENT = 'decrement'
    RESET = 'reset'


@dataclass(frozen=True)
class CounterAction:
    """A user-triggered mutation. ``value`` is only used by RESET."""
    kind: ActionKind
    value: int = RESET_VALUE_DEFAULT

    @classmethod
    def increment(cls) -> 'CounterAction':
        return cls(ActionKind.INCREMENT)

    @classmethod
    def decrement(cls) -> 'CounterAction':
        return cls(ActionKind.DECREMENT)

    @classmethod
    def reset(cls, value: int = RESET_VALUE_DEFAULT) -> 'CounterAction':
        return cls(ActionKind.RESET, value)


def apply_locally(counter: Counter, action: CounterAction, now: datetime) -> Counter:
    """Apply ``action`` client-side. id and created_at are kept; updated_at becomes ``now``."""
    if action.kind is ActionKind.INCREMENT:
        value = counter.value + 1
    elif action.kind is ActionKind.DECREMENT:
        value = counter.value - 1
    elif action.kind is ActionKind.RESET:
        value = action.value
    else:
        raise ValueError(f"Unknown action kind: {action.kind}")
    return replace(counter, value=value, updated_at=now)


@dataclass(frozen=True)
class ControllerState:
    """Snapshot of everything the UI shows.

    Attributes:
        counter: Counter currently displayed
        is_loading: A user action is in flight (advisory, never gates actions)
        backend_connected: Remote calls are attempted for user actions
        is_initializing: The list-or-create sequence has not finished yet
        authority: Whether ``counter`` is the backend's value or a local one
        pending: Actions applied locally since the backend was last reached
    """
    counter: Counter
    is_loading: bool = False
    backend_connected: bool = False
    is_initializing: bool = True
    authority: Authority = Authority.LOCAL_ONLY
    pending: Tuple[CounterAction, ...] = field(default_factory=tuple)


def default_counter(now: Optional[datetime] = None) -> Counter:
    now = now or utc_now()
    return Counter(id=LOCAL_COUNTER_ID, value=LOCAL_COUNTER_VALUE, created_at=now, updated_at=now)


def initial_state(now: Optional[datetime] = None) -> ControllerState:
    """State at session start: the built-in local counter, still initializing."""
    return ControllerState(counter=default_counter(now))


# --- Events ------------------------------------------------------------------

@dataclass(frozen=True)
class InitializationStarted:
    pass


@dataclass(frozen=True)
class InitializationSucceeded:
    counter: Counter


@dataclass(frozen=True)
class InitializationFailed:
    pass


@dataclass(frozen=True)
class ActionDispatched:
    action: CounterAction


@dataclass(frozen=True)
class RemoteActionSucceeded:
    counter: Counter


@dataclass(frozen=True)
class RemoteActionFailed:
    action: CounterAction
    now: datetime


@dataclass(frozen=True)
class LocalActionApplied:
    action: CounterAction
    now: datetime


Event = Union[
    InitializationStarted, InitializationSucceeded, InitializationFailed,
    ActionDispatched, RemoteActionSucceeded, RemoteActionFailed, LocalActionApplied,
]


def reduce(state: ControllerState, event: Event) -> ControllerState:
    """Return the state that follows ``state`` after ``event``.

    Raises:
        TypeError: If ``event`` is not one of the known event types
    """
    if isinstance(event, InitializationStarted):
        return replace(state, is_initializing=True)

    if isinstance(event, InitializationSucceeded):
        # adopting the backend record drops whatever was pending
        return replace(
            state,
            counter=event.counter,
            backend_connected=True,
            is_initializing=False,
            authority=Authority.AUTHORITATIVE,
            pending=(),
        )

    if isinstance(event, InitializationFailed):
        return replace(
            state,
            backend_connected=False,
            is_initializing=False,
            authority=Authority.LOCAL_ONLY,
        )

    if isinstance(event, ActionDispatched):
        return replace(state, is_loading=True)

    if isinstance(event, RemoteActionSucceeded):
        return replace(
            state,
            counter=event.counter,
            is_loading=False,
            authority=Authority.AUTHORITATIVE,
        )

    if isinstance(event, RemoteActionFailed):
        return replace(
            state,
            counter=apply_locally(state.counter, event.action, event.now),
            is_loading=False,
            backend_connected=False,
            authority=Authority.LOCAL_ONLY,
            pending=state.pending + (event.action,),
        )

    if isinstance(event, LocalActionApplied):
        return replace(
            state,
            counter=apply_locally(state.counter, event.action, event.now),
            is_loading=False,
            authority=Authority.LOCAL_ONLY,
            pending=state.pending + (event.action,),
        )

    raise TypeError(f"Unknown controller event: {event!r}")
