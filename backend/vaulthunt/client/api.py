import asyncio
import logging
from typing import Optional

import requests

from vaulthunt.client.errors import ApiError, NetworkError, RateLimitedError, RequestTimeout
from vaulthunt.client.payloads import (
    build_admin_update_words_payload,
    build_create_session_payload,
    build_join_team_payload,
    build_purge_session_payload,
    build_update_team_payload,
)
from vaulthunt.client.polling import PollingService

logger = logging.getLogger(__name__)

API_TIMEOUT_SECONDS = 8.0
FETCH_SESSION_STATE = 'fetchSessionState'


def _release(worker):
    # an abandoned request still finishes in its thread; free its connection then
    if worker.cancelled() or worker.exception() is not None:
        return
    worker.result().close()


class ApiClient:
    """Async client for the session/team wire protocol.

    Blocking ``requests`` calls run in worker threads. Requests on a named
    channel supersede each other: the superseded caller resolves to None and
    its result is abandoned. Every request gives up after ``timeout`` seconds
    with ``RequestTimeout``. A thread cannot be interrupted, so an abandoned
    request keeps running until the transport's own timeout (the same
    ``timeout``) at most, and its response is closed as soon as it arrives.
    """

    def __init__(self, base_url: str, secret: str = '', admin_secret: str = '',
                 polling: Optional[PollingService] = None, http=None,
                 timeout: float = API_TIMEOUT_SECONDS):
        self.base_url = base_url.rstrip('/')
        self.secret = secret
        self.admin_secret = admin_secret
        self.polling = polling or PollingService()
        self.http = http or requests.Session()
        self.timeout = timeout

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()

    async def aclose(self):
        """Stop all polling and release pooled connections."""
        await self.polling.aclose()
        self.http.close()

    def _secret_for(self, admin: bool) -> str:
        if admin and self.admin_secret:
            return self.admin_secret
        return self.secret

    def _send(self, method, url, params, body):
        headers = {'Accept': 'application/json'}
        try:
            return self.http.request(method, url, params=params, json=body, headers=headers, timeout=self.timeout)
        except requests.Timeout as exc:
            raise RequestTimeout(url) from exc
        except requests.RequestException as exc:
            raise NetworkError(str(exc)) from exc

    async def _request(self, action, method, path, params=None, body=None, channel=None, admin=False):
        url = f"{self.base_url}{path}"
        params = dict(params or {})
        secret = self._secret_for(admin)
        if secret:
            params['secret'] = secret

        async def call():
            worker = asyncio.ensure_future(asyncio.to_thread(self._send, method, url, params, body))
            try:
                return await asyncio.wait_for(asyncio.shield(worker), timeout=self.timeout)
            except asyncio.TimeoutError as exc:
                worker.add_done_callback(_release)
                raise RequestTimeout(action) from exc
            except asyncio.CancelledError:
                worker.add_done_callback(_release)
                raise

        if channel:
            response = await self.polling.run(channel, call)
            if response is None:
                return None
        else:
            response = await call()
        return self._decode(action, response)

    @staticmethod
    def _decode(action, response):
        try:
            data = response.json()
        except ValueError:
            data = {}
        message = data.get('error') if isinstance(data, dict) else None
        if response.status_code == 429:
            raise RateLimitedError(message or 'Rate limit exceeded')
        if response.status_code >= 400:
            logger.info(f"[api] {action} failed status={response.status_code} error={message}")
            raise ApiError(response.status_code, message or f'Server error: {response.status_code}')
        return data

    # ---- operations ----

    async def create_session(self, session_name):
        body = build_create_session_payload(self.secret, session_name)
        data = await self._request('createSession', 'POST', '/api/createSession', body=body)
        if not data.get('sessionCode'):
            raise ApiError(500, 'Invalid response: no session code received')
        return data

    async def fetch_session_state(self, session_code):
        """Poll the session snapshot; None when superseded by a newer poll."""
        return await self._request(
            'fetchSessionState', 'GET', '/api/fetchSessionState',
            params={'code': session_code}, channel=FETCH_SESSION_STATE,
        )

    async def join_team(self, session_code, animal_id, team_name=None, team_color=None):
        body = build_join_team_payload(self.secret, session_code, animal_id, team_name, team_color)
        return await self._request('joinTeam', 'POST', '/api/joinTeam', body=body)

    async def update_team(self, team_id, team_token, **fields):
        body = build_update_team_payload(self.secret, team_id, team_token, **fields)
        return await self._request('updateTeam', 'POST', '/api/updateTeam', body=body)

    async def admin_update_words(self, session_code, words, start_time=None):
        body = build_admin_update_words_payload(self._secret_for(True), session_code, words, start_time)
        return await self._request(
            'adminUpdateWords', 'POST', '/api/adminUpdateWords',
            params={'code': session_code}, body=body, admin=True,
        )

    async def purge_session(self, session_code=None, session_id=None):
        body = build_purge_session_payload(self._secret_for(True), session_code, session_id)
        return await self._request('purgeSession', 'POST', '/api/purgeSession', body=body, admin=True)
