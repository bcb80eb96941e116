"""
Data models for the Counter GUI application.

Models:
- Counter: A counter record as returned by the backend
- ControllerState: Immutable snapshot of the controller, changed via reduce()
- CounterAction: A user-triggered increment/decrement/reset
"""

from counter_gui.models.counter import Counter
from counter_gui.models.controller_state import (
    Authority,
    ControllerState,
    CounterAction,
    ReconnectPolicy,
    reduce,
)

__all__ = ['Counter', 'Authority', 'ControllerState', 'CounterAction', 'ReconnectPolicy', 'reduce']
