"""
Counter Controller: presents one counter to the UI and keeps it usable offline.

The controller calls the backend through CounterApiClient and records every
outcome as an event on an immutable ControllerState (see
counter_gui.models.controller_state). When a backend call fails, the action is
applied locally and the controller switches to local mode; it stays there
until retry() succeeds.
"""
import logging
from typing import Callable, List, Optional

from counter_gui.constants import RESET_VALUE_DEFAULT
from counter_gui.exceptions import CounterClientError
from counter_gui.models.controller_state import (
    ActionDispatched,
    ActionKind,
    ControllerState,
    CounterAction,
    Event,
    InitializationFailed,
    InitializationStarted,
    InitializationSucceeded,
    LocalActionApplied,
    ReconnectPolicy,
    RemoteActionFailed,
    RemoteActionSucceeded,
    initial_state,
    reduce,
)
from counter_gui.models.counter import Counter, utc_now
from counter_gui.services.counter_api import CounterApiClient, check_counter_int

logger = logging.getLogger(__name__)

StateListener = Callable[[ControllerState], None]


class CounterController:
    """Client-side state machine for a single counter.

    States:
    - Initializing: initialize() lists counters, creating one if none exist
    - Connected: actions go to the backend; the returned record is adopted
    - Disconnected: actions are applied locally without contacting the backend

    Attributes:
        api: Backend client
        reconnect_policy: How offline edits are handled when retry() reconnects
        state: Current ControllerState (read-only; changed only through events)
    """

    def __init__(self, api: CounterApiClient,
                 reconnect_policy: ReconnectPolicy = ReconnectPolicy.DISCARD_LOCAL,
                 clock: Callable = utc_now):
        """Initialize the controller.

        Args:
            api: Backend client used for all remote calls
            reconnect_policy: Policy applied to pending local actions on reconnect
            clock: Returns the current aware datetime; used for local updated_at
        """
        self.api = api
        self.reconnect_policy = reconnect_policy
        self._clock = clock
        self._state = initial_state(clock())
        self._listeners: List[StateListener] = []

    @property
    def state(self) -> ControllerState:
        return self._state

    @property
    def counter(self) -> Counter:
        return self._state.counter

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a callback invoked with every new state. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _dispatch(self, event: Event) -> ControllerState:
        self._state = reduce(self._state, event)
        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception as e:
                logger.error(f"State listener {listener!r} failed: {e}", exc_info=True)
        return self._state

    def initialize(self) -> ControllerState:
        """Adopt the first stored counter, creating one when the backend has none.

        On any backend failure the current (local) counter is kept and the
        controller switches to local mode. There are no retries inside this call.
        Local changes made while disconnected are discarded on success.
        """
        return self._initialize(replaying=False)

    def retry(self) -> ControllerState:
        """Re-run initialization; with REPLAY_LOCAL, replay offline actions afterwards."""
        pending = self._state.pending
        if self.reconnect_policy is ReconnectPolicy.REPLAY_LOCAL and pending:
            state = self._initialize(replaying=True)
            if state.backend_connected:
                return self._replay(pending)
            return state
        return self._initialize(replaying=False)

    def _initialize(self, replaying: bool) -> ControllerState:
        self._dispatch(InitializationStarted())
        try:
            counters = self.api.get_counters()
            if counters:
                counter = counters[0]
            else:
                counter = self.api.create_counter(0)
                logger.info(f"No counters on backend; created {counter}")
        except CounterClientError as e:
            logger.warning(f"Backend not available, using local counter: {e}")
            return self._dispatch(InitializationFailed())

        pending = len(self._state.pending)
        if pending and replaying:
            logger.info(f"Reconnected; replaying {pending} local change(s) onto {counter}")
        elif pending:
            logger.warning(f"Discarding {pending} local change(s) in favour of backend value {counter.value}")
        logger.info(f"Connected to backend; adopted {counter}")
        return self._dispatch(InitializationSucceeded(counter))

    def _replay(self, actions) -> ControllerState:
        for index, action in enumerate(actions):
            self._dispatch(ActionDispatched(action))
            state = self._perform_remote(action)
            if not state.backend_connected:
                # the failed action is already applied locally; keep the rest local too
                for rest in actions[index + 1:]:
                    self._dispatch(LocalActionApplied(rest, self._clock()))
                logger.warning(f"Replay stopped after {index} of {len(actions)} action(s)")
                return self._state
        return self._state

    def increment(self) -> ControllerState:
        return self.perform(CounterAction.increment())

    def decrement(self) -> ControllerState:
        return self.perform(CounterAction.decrement())

    def reset(self, value: int = RESET_VALUE_DEFAULT) -> ControllerState:
        return self.perform(CounterAction.reset(value))

    def perform(self, action: CounterAction) -> ControllerState:
        """Apply a user action remotely when connected, locally otherwise.

        The action always changes the displayed counter: either to the record
        the backend returns, or by local arithmetic when the call fails.

        Raises:
            CounterValidationError: A reset value is not a storable integer; the
                state is left unchanged and the backend is not contacted
        """
        if action.kind is ActionKind.RESET:
            check_counter_int('value', action.value, 'reset')
        self._dispatch(ActionDispatched(action))
        if not self._state.backend_connected:
            return self._dispatch(LocalActionApplied(action, self._clock()))
        return self._perform_remote(action)

    def _perform_remote(self, action: CounterAction) -> ControllerState:
        counter_id = self._state.counter.id
        try:
            if action.kind is ActionKind.INCREMENT:
                updated = self.api.increment_counter(counter_id)
            elif action.kind is ActionKind.DECREMENT:
                updated = self.api.decrement_counter(counter_id)
            else:
                updated = self.api.reset_counter(counter_id, action.value)
        except CounterClientError as e:
            logger.warning(f"Backend {action.kind.value} failed, applying locally: {e}")
            return self._dispatch(RemoteActionFailed(action, self._clock()))
        return self._dispatch(RemoteActionSucceeded(updated))
