"""
Constants and configuration values for the Counter GUI application.

This module centralizes defaults and limits used throughout the client so
there is a single source of truth for them.

Constants are organized by category:
- Backend connection defaults
- Built-in local counter used before (or without) a backend
- Window sizing
- Reconnect policy names
"""

# Backend connection defaults
BACKEND_URL_DEFAULT = 'http://127.0.0.1:2022'
BACKEND_TIMEOUT_DEFAULT = 5.0  # seconds
BACKEND_TIMEOUT_MAX = 120.0

# API routes (relative to the backend base URL)
COUNTERS_PATH = '/api/counters'
HEALTH_PATH = '/api/health'

# Built-in counter shown until the backend answers (and kept if it never does)
LOCAL_COUNTER_ID = 1
LOCAL_COUNTER_VALUE = 0

# Counter values and ids are signed 64-bit integers on the backend
COUNTER_INT_MIN = -(2 ** 63)
COUNTER_INT_MAX = 2 ** 63 - 1

# Value used by the Reset button
RESET_VALUE_DEFAULT = 0

# UI constants
WINDOW_WIDTH_DEFAULT = 320
WINDOW_HEIGHT_DEFAULT = 360
WINDOW_WIDTH_MIN = 200
WINDOW_HEIGHT_MIN = 200

# Reconnect policies (see counter_gui.models.controller_state.ReconnectPolicy)
RECONNECT_POLICY_DISCARD_LOCAL = 'discard_local'
RECONNECT_POLICY_REPLAY_LOCAL = 'replay_local'
RECONNECT_POLICY_DEFAULT = RECONNECT_POLICY_DISCARD_LOCAL
