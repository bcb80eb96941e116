"""
Custom exception classes for the Counter GUI application.

This module provides specific exception types for the ways a call to the
counter backend can fail. The controller treats all of them the same way
(fall back to local state), but the distinction is kept for logging and tests.
"""

from typing import Any


class CounterClientError(Exception):
    """Base exception for all Counter client errors.

    All custom exceptions should inherit from this class so callers can catch
    every backend failure with a single except clause.

    Attributes:
        operation: Operation that failed (e.g., 'increment_counter')
        original_error: The underlying exception that caused this error
    """

    def __init__(self, message: str, operation: str = None, original_error: Exception = None):
        super().__init__(message)
        self.operation = operation
        self.original_error = original_error


class BackendUnavailableError(CounterClientError):
    """Raised when the backend cannot be reached (connection refused, timeout, DNS)."""
    pass


class CounterNotFoundError(CounterClientError):
    """Raised when the backend reports that a counter id does not exist.

    Attributes:
        counter_id: The id that was not found
    """

    def __init__(self, message: str, counter_id: int = None, operation: str = None,
                 original_error: Exception = None):
        super().__init__(message, operation=operation, original_error=original_error)
        self.counter_id = counter_id


class CounterValidationError(CounterClientError):
    """Raised when input is rejected, either locally or by the backend (HTTP 422).

    Attributes:
        field: Name of the rejected field (optional)
        value: The rejected value (optional)
    """

    def __init__(self, message: str, field: str = None, value: Any = None, operation: str = None,
                 original_error: Exception = None):
        super().__init__(message, operation=operation, original_error=original_error)
        self.field = field
        self.value = value


class BackendResponseError(CounterClientError):
    """Raised for unexpected HTTP status codes or undecodable response bodies.

    Attributes:
        status_code: HTTP status code returned by the backend (optional)
    """

    def __init__(self, message: str, status_code: int = None, operation: str = None,
                 original_error: Exception = None):
        super().__init__(message, operation=operation, original_error=original_error)
        self.status_code = status_code


class ConfigurationError(Exception):
    """Exception raised for invalid configuration values.

    Attributes:
        setting_name: Name of the setting that is invalid
        setting_value: The invalid value
        expected: Description of expected value
    """

    def __init__(self, message: str, setting_name: str = None, setting_value: Any = None,
                 expected: str = None):
        """Initialize ConfigurationError.

        Args:
            message: Human-readable error message
            setting_name: Name of invalid setting (optional)
            setting_value: Invalid value (optional)
            expected: Expected value description (optional)
        """
        super().__init__(message)
        self.setting_name = setting_name
        self.setting_value = setting_value
        self.expected = expected
