"""
Counter API client for talking to the counter backend over HTTP.

This service wraps the backend's JSON routes in typed methods returning
Counter models, and turns every kind of failure (unreachable backend, unknown
counter id, rejected input, unexpected status) into a CounterClientError
subclass so callers can handle them uniformly.
"""
import logging
from typing import Any, Dict, List, Optional

import requests

from counter_gui.constants import (
    BACKEND_URL_DEFAULT, BACKEND_TIMEOUT_DEFAULT, BACKEND_TIMEOUT_MAX, COUNTERS_PATH, HEALTH_PATH,
    COUNTER_INT_MIN, COUNTER_INT_MAX,
)
from counter_gui.exceptions import (
    BackendResponseError,
    BackendUnavailableError,
    ConfigurationError,
    CounterNotFoundError,
    CounterValidationError,
)
from counter_gui.models.counter import Counter

logger = logging.getLogger(__name__)


def check_counter_int(name: str, value: Any, operation: str) -> int:
    """Return ``value`` if it is an int the backend can store, else raise CounterValidationError."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise CounterValidationError(
            f"{name} must be an integer, got {value!r}",
            field=name, value=value, operation=operation,
        )
    if not COUNTER_INT_MIN <= value <= COUNTER_INT_MAX:
        raise CounterValidationError(
            f"{name} must be between {COUNTER_INT_MIN} and {COUNTER_INT_MAX}, got {value}",
            field=name, value=value, operation=operation,
        )
    return value


class CounterApiClient:
    """Typed client for the counter backend.

    Attributes:
        base_url: Backend base URL without trailing slash
        timeout: Per-request timeout in seconds
        session: HTTP session used for requests (requests.Session by default;
                 anything with a compatible ``request`` method works)
    """

    def __init__(self, base_url: str = BACKEND_URL_DEFAULT, timeout: float = BACKEND_TIMEOUT_DEFAULT,
                 session: Optional[Any] = None):
        """Initialize the API client.

        Args:
            base_url: Backend base URL, e.g. 'http://127.0.0.1:2022'
            timeout: Request timeout in seconds
            session: Optional pre-configured HTTP session

        Raises:
            ConfigurationError: base_url is not an http(s) URL, or timeout is not a
                number in (0, BACKEND_TIMEOUT_MAX]
        """
        if not isinstance(base_url, str) or not base_url.startswith(('http://', 'https://')):
            raise ConfigurationError(
                f"Invalid backend URL: {base_url!r}",
                setting_name='base_url', setting_value=base_url, expected='http:// or https:// URL',
            )
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or not 0 < timeout <= BACKEND_TIMEOUT_MAX:
            raise ConfigurationError(
                f"Invalid backend timeout: {timeout!r}",
                setting_name='timeout', setting_value=timeout, expected=f"seconds in (0, {BACKEND_TIMEOUT_MAX}]",
            )
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session if session is not None else requests.Session()
        self._owns_session = session is None

    def _request(self, operation: str, method: str, path: str, payload: Optional[Dict[str, Any]] = None,
                 counter_id: Optional[int] = None) -> Any:
        """Send one request and return the decoded JSON body.

        Raises:
            BackendUnavailableError: The backend could not be reached
            CounterNotFoundError: The backend answered 404
            CounterValidationError: The backend answered 422
            BackendResponseError: Any other non-2xx status or an invalid body
        """
        url = f"{self.base_url}{path}"
        logger.debug(f"{operation}: {method} {url} payload={payload}")
        try:
            response = self.session.request(method, url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning(f"{operation}: backend unreachable at {self.base_url}: {e}")
            raise BackendUnavailableError(
                f"Backend unreachable: {e}", operation=operation, original_error=e
            ) from e

        status = response.status_code
        if status == 404:
            raise CounterNotFoundError(
                f"Counter with id {counter_id} not found", counter_id=counter_id, operation=operation
            )
        if status == 422:
            raise CounterValidationError(f"Backend rejected input: {response.text}", operation=operation)
        if not 200 <= status < 300:
            raise BackendResponseError(
                f"Unexpected status {status} from {operation}: {response.text}",
                status_code=status, operation=operation,
            )
        try:
            return response.json()
        except ValueError as e:
            raise BackendResponseError(
                f"Invalid JSON from {operation}", status_code=status, operation=operation, original_error=e
            ) from e

    def _to_counter(self, data: Any, operation: str) -> Counter:
        try:
            return Counter.from_dict(data)
        except (TypeError, ValueError) as e:
            raise BackendResponseError(
                f"Malformed counter from {operation}: {data!r}", operation=operation, original_error=e
            ) from e

    def health(self) -> Dict[str, Any]:
        return self._request('health', 'GET', HEALTH_PATH)

    def create_counter(self, value: Optional[int] = None) -> Counter:
        """Create a counter; the backend defaults ``value`` to 0 when omitted."""
        payload = {}
        if value is not None:
            payload['value'] = check_counter_int('value', value, 'create_counter')
        data = self._request('create_counter', 'POST', COUNTERS_PATH, payload=payload)
        return self._to_counter(data, 'create_counter')

    def get_counter(self, counter_id: int) -> Optional[Counter]:
        """Return the counter, or None when the backend does not have it."""
        check_counter_int('id', counter_id, 'get_counter')
        data = self._request('get_counter', 'GET', f"{COUNTERS_PATH}/{counter_id}", counter_id=counter_id)
        if data is None:
            return None
        return self._to_counter(data, 'get_counter')

    def get_counters(self) -> List[Counter]:
        data = self._request('get_counters', 'GET', COUNTERS_PATH)
        if not isinstance(data, list):
            raise BackendResponseError(f"Expected a list of counters, got {type(data).__name__}",
                                       operation='get_counters')
        return [self._to_counter(item, 'get_counters') for item in data]

    def increment_counter(self, counter_id: int) -> Counter:
        return self._mutate('increment_counter', counter_id, 'increment')

    def decrement_counter(self, counter_id: int) -> Counter:
        return self._mutate('decrement_counter', counter_id, 'decrement')

    def reset_counter(self, counter_id: int, value: Optional[int] = None) -> Counter:
        payload = {}
        if value is not None:
            payload['value'] = check_counter_int('value', value, 'reset_counter')
        return self._mutate('reset_counter', counter_id, 'reset', payload)

    def _mutate(self, operation: str, counter_id: int, route: str,
                payload: Optional[Dict[str, Any]] = None) -> Counter:
        check_counter_int('id', counter_id, operation)
        data = self._request(operation, 'POST', f"{COUNTERS_PATH}/{counter_id}/{route}",
                             payload=payload, counter_id=counter_id)
        return self._to_counter(data, operation)

    def cleanup(self) -> None:
        """Close the HTTP session if this client created it."""
        if self._owns_session:
            self.session.close()
