import asyncio
import time

import pytest
import requests

from vaulthunt.client.api import ApiClient
from vaulthunt.client.errors import ApiError, NetworkError, PayloadError, RateLimitedError, RequestTimeout


class FakeResponse:
    def __init__(self, status_code=200, data=None):
        self.status_code = status_code
        self._data = data
        self.closed = False

    def close(self):
        self.closed = True

    def json(self):
        if self._data is None:
            raise ValueError('no json')
        return self._data


class FakeHttp:
    """Stands in for ``requests.Session``; replies are queued per path."""

    def __init__(self):
        self.calls = []
        self.replies = {}
        self.closed = False

    def reply(self, path, *responses):
        self.replies.setdefault(path, []).extend(responses)

    def request(self, method, url, params=None, json=None, headers=None, timeout=None):
        self.calls.append({'method': method, 'url': url, 'params': params, 'json': json, 'timeout': timeout})
        path = url.split('/api', 1)[1]
        reply = self.replies[path].pop(0)
        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            return reply()
        return reply

    def close(self):
        self.closed = True


def make_client(http, **kwargs):
    return ApiClient('http://backend.test/', secret='s3cret', admin_secret='adm1n', http=http, **kwargs)


def test_create_session_sends_secret_and_name():
    http = FakeHttp()
    http.reply('/createSession', FakeResponse(200, {'sessionCode': 'ABC1234', 'sessionId': 'id'}))
    data = asyncio.run(make_client(http).create_session('Klas 5B'))
    assert data['sessionCode'] == 'ABC1234'
    call = http.calls[0]
    assert call['method'] == 'POST'
    assert call['url'] == 'http://backend.test/api/createSession'
    assert call['params'] == {'secret': 's3cret'}
    assert call['json'] == {'secret': 's3cret', 'sessionName': 'Klas 5B'}
    assert call['timeout'] == 8.0


def test_create_session_without_code_is_an_error():
    http = FakeHttp()
    http.reply('/createSession', FakeResponse(200, {}))
    with pytest.raises(ApiError):
        asyncio.run(make_client(http).create_session('x'))


def test_admin_calls_use_admin_secret():
    http = FakeHttp()
    http.reply('/adminUpdateWords', FakeResponse(200, {'ok': True}))
    asyncio.run(make_client(http).admin_update_words('ABC1234', ['In', 'de']))
    call = http.calls[0]
    assert call['params'] == {'code': 'ABC1234', 'secret': 'adm1n'}
    assert len(call['json']['words']) == 20
    assert 'startTime' not in call['json']


def test_error_status_raises_api_error():
    http = FakeHttp()
    http.reply('/fetchSessionState', FakeResponse(404, {'error': 'Session not found'}))
    with pytest.raises(ApiError) as info:
        asyncio.run(make_client(http).fetch_session_state('ABC1234'))
    assert info.value.status == 404
    assert info.value.message == 'Session not found'
    assert not info.value.retryable


def test_error_without_body():
    http = FakeHttp()
    http.reply('/joinTeam', FakeResponse(502))
    with pytest.raises(ApiError) as info:
        asyncio.run(make_client(http).join_team('ABC1234', 1))
    assert info.value.message == 'Server error: 502'


def test_rate_limited_is_retryable():
    http = FakeHttp()
    http.reply('/updateTeam', FakeResponse(429, {'error': 'Rate limit exceeded. Please try again later.'}))
    with pytest.raises(RateLimitedError) as info:
        asyncio.run(make_client(http).update_team('team', 'token', progress=3))
    assert info.value.retryable
    assert http.calls[0]['json']['progress'] == 3


def test_transport_errors_are_mapped():
    http = FakeHttp()
    http.reply('/joinTeam', requests.Timeout('slow'), requests.ConnectionError('down'))
    client = make_client(http)
    with pytest.raises(RequestTimeout):
        asyncio.run(client.join_team('ABC1234', 1))
    with pytest.raises(NetworkError) as info:
        asyncio.run(client.join_team('ABC1234', 1))
    assert info.value.retryable


def test_slow_request_times_out():
    http = FakeHttp()

    def slow():
        time.sleep(0.3)
        return FakeResponse(200, {'ok': True})

    http.reply('/purgeSession', slow)
    with pytest.raises(RequestTimeout):
        asyncio.run(make_client(http, timeout=0.05).purge_session(session_code='ABC1234'))


def test_invalid_payload_never_hits_the_network():
    http = FakeHttp()
    with pytest.raises(PayloadError):
        asyncio.run(make_client(http).join_team('AB', 1))
    assert http.calls == []


def test_newer_poll_supersedes_older_one():
    http = FakeHttp()

    def slow():
        time.sleep(0.2)
        return FakeResponse(200, {'sessionCode': 'ABC1234', 'teams': ['stale']})

    http.reply('/fetchSessionState', slow, FakeResponse(200, {'sessionCode': 'ABC1234', 'teams': []}))

    async def scenario():
        client = make_client(http)
        first = asyncio.ensure_future(client.fetch_session_state('ABC1234'))
        await asyncio.sleep(0.05)
        second = await client.fetch_session_state('ABC1234')
        return await first, second

    first, second = asyncio.run(scenario())
    assert first is None
    assert second == {'sessionCode': 'ABC1234', 'teams': []}


def test_superseded_poll_releases_its_response():
    http = FakeHttp()
    stale = FakeResponse(200, {'sessionCode': 'ABC1234', 'teams': ['stale']})

    def slow():
        time.sleep(0.2)
        return stale

    http.reply('/fetchSessionState', slow, FakeResponse(200, {'sessionCode': 'ABC1234', 'teams': []}))

    async def scenario():
        client = make_client(http)
        first = asyncio.ensure_future(client.fetch_session_state('ABC1234'))
        await asyncio.sleep(0.05)
        await client.fetch_session_state('ABC1234')
        assert await first is None
        assert not stale.closed
        await asyncio.sleep(0.4)

    asyncio.run(scenario())
    assert stale.closed


def test_timed_out_request_releases_its_response():
    http = FakeHttp()
    late = FakeResponse(200, {'ok': True})

    def slow():
        time.sleep(0.2)
        return late

    http.reply('/purgeSession', slow)

    async def scenario():
        client = make_client(http, timeout=0.05)
        with pytest.raises(RequestTimeout):
            await client.purge_session(session_code='ABC1234')
        await asyncio.sleep(0.4)

    asyncio.run(scenario())
    assert late.closed


def test_client_closes_its_transport():
    http = FakeHttp()

    async def tick():
        pass

    async def scenario():
        async with make_client(http) as client:
            client.polling.start_interval('admin', tick, 60)
        return client

    client = asyncio.run(scenario())
    assert http.closed
    assert not client.polling.is_running('admin')
