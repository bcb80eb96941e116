"""CounterApiClient against the real backend app (through TestClient) and failing sessions."""
import pytest
import requests

from counter_gui.exceptions import (
    BackendResponseError,
    BackendUnavailableError,
    ConfigurationError,
    CounterClientError,
    CounterNotFoundError,
    CounterValidationError,
)
from counter_gui.models.counter import Counter
from counter_gui.services.counter_api import CounterApiClient
from counter_gui.services.counter_controller import CounterController


@pytest.fixture
def api(backend_client):
    return CounterApiClient(base_url='http://testserver', session=backend_client)


class RefusingSession:
    def __init__(self):
        self.calls = 0

    def request(self, method, url, **kwargs):
        self.calls += 1
        raise requests.ConnectionError(f"connection refused: {url}")


class FakeResponse:
    def __init__(self, status_code, body=None, text=''):
        self.status_code = status_code
        self._body = body
        self.text = text

    def json(self):
        if isinstance(self._body, Exception):
            raise self._body
        return self._body


class CannedSession:
    def __init__(self, response):
        self.response = response

    def request(self, method, url, **kwargs):
        return self.response


def test_health(api):
    assert api.health()['status'] == 'ok'


def test_create_and_get(api):
    c = api.create_counter(5)
    assert isinstance(c, Counter)
    assert c.value == 5
    assert c.created_at == c.updated_at
    assert api.get_counter(c.id) == c


def test_create_default_value(api):
    assert api.create_counter().value == 0


def test_get_missing_counter_returns_none(api):
    assert api.get_counter(999999) is None


def test_get_counters(api):
    for v in (10, 20, 0):
        api.create_counter(v)
    assert sorted(c.value for c in api.get_counters()) == [0, 10, 20]


def test_mutations(api):
    c = api.create_counter(0)
    assert api.increment_counter(c.id).value == 1
    assert api.decrement_counter(c.id).value == 0
    assert api.decrement_counter(c.id).value == -1
    r = api.reset_counter(c.id, 30)
    assert r.value == 30
    assert r.created_at == c.created_at
    assert api.reset_counter(c.id).value == 0


@pytest.mark.parametrize('method', ['increment_counter', 'decrement_counter', 'reset_counter'])
def test_mutating_missing_counter_raises_not_found(api, method):
    with pytest.raises(CounterNotFoundError) as exc:
        getattr(api, method)(999999)
    assert exc.value.counter_id == 999999
    assert isinstance(exc.value, CounterClientError)


@pytest.mark.parametrize('bad', [1.5, '2', True])
def test_non_integer_value_rejected_before_sending(bad):
    session = RefusingSession()
    client = CounterApiClient(base_url='http://testserver', session=session)
    with pytest.raises(CounterValidationError):
        client.create_counter(bad)
    with pytest.raises(CounterValidationError):
        client.reset_counter(1, bad)
    assert session.calls == 0


def test_transport_failure_raises_backend_unavailable():
    client = CounterApiClient(base_url='http://127.0.0.1:1', session=RefusingSession())
    with pytest.raises(BackendUnavailableError) as exc:
        client.get_counters()
    assert exc.value.operation == 'get_counters'
    assert isinstance(exc.value.original_error, requests.ConnectionError)


def test_server_error_raises_response_error():
    client = CounterApiClient(session=CannedSession(FakeResponse(500, text='boom')))
    with pytest.raises(BackendResponseError) as exc:
        client.increment_counter(1)
    assert exc.value.status_code == 500


def test_validation_status_raises_validation_error():
    client = CounterApiClient(session=CannedSession(FakeResponse(422, text='bad value')))
    with pytest.raises(CounterValidationError):
        client.create_counter(1)


def test_invalid_json_raises_response_error():
    client = CounterApiClient(session=CannedSession(FakeResponse(200, body=ValueError('not json'))))
    with pytest.raises(BackendResponseError):
        client.get_counters()


def test_malformed_counter_raises_response_error():
    client = CounterApiClient(session=CannedSession(FakeResponse(200, body={'id': 1})))
    with pytest.raises(BackendResponseError):
        client.create_counter()


def test_controller_end_to_end(api):
    ctl = CounterController(api)
    state = ctl.initialize()
    assert state.backend_connected
    first_id = state.counter.id

    ctl.increment()
    ctl.increment()
    ctl.decrement()
    assert ctl.counter.value == 1
    assert api.get_counter(first_id).value == 1

    # a second session adopts the same stored counter instead of creating another
    other = CounterController(api)
    assert other.initialize().counter.id == first_id
    assert len(api.get_counters()) == 1


def test_controller_with_unreachable_backend_works_locally():
    api = CounterApiClient(base_url='http://127.0.0.1:1', session=RefusingSession())
    ctl = CounterController(api)
    ctl.initialize()
    state = ctl.increment()
    assert not state.backend_connected
    assert state.counter.value == 1


@pytest.mark.parametrize('timeout', [-1, 0, 'soon', True, float('nan'), 10_000])
def test_invalid_timeout_rejected_at_construction(timeout):
    with pytest.raises(ConfigurationError) as exc:
        CounterApiClient(base_url='http://127.0.0.1:1', timeout=timeout, session=RefusingSession())
    assert exc.value.setting_name == 'timeout'


@pytest.mark.parametrize('bad_id', [2**63, -(2**63) - 1])
def test_out_of_range_id_rejected_before_sending(bad_id):
    session = RefusingSession()
    client = CounterApiClient(base_url='http://testserver', session=session)
    with pytest.raises(CounterValidationError):
        client.increment_counter(bad_id)
    assert session.calls == 0
