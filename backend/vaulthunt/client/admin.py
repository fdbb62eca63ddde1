"""Admin dashboard controller: session setup, word entry and monitoring."""
import logging
from datetime import datetime, timezone
from typing import Optional, Set

from vaulthunt.client.errors import ActionFailed, ClientError
from vaulthunt.client.reconcile import merge_snapshot
from vaulthunt.puzzle import WORD_COUNT, check_all_words, check_word_match, pad_words
from vaulthunt.puzzle import vault_unlocked as words_unlock_vault

logger = logging.getLogger(__name__)

ADMIN_POLL_KEY = 'admin'
OFFLINE_THRESHOLD_SEC = 20


def parse_iso(value) -> Optional[datetime]:
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _now(now=None) -> datetime:
    return now or datetime.now(timezone.utc)


class AdminSync:
    def __init__(self, api, polling=None, poll_interval=3.0, offline_threshold=OFFLINE_THRESHOLD_SEC):
        self.api = api
        self.polling = polling or api.polling
        self.poll_interval = poll_interval
        self.offline_threshold = offline_threshold
        self.state = {}
        self.editing: Set[int] = set()

    @property
    def session_code(self):
        return self.state.get('sessionCode')

    @property
    def words(self):
        return pad_words(self.state.get('words') or [])

    @property
    def teams(self):
        return self.state.get('teams') or []

    async def create_session(self, session_name):
        try:
            data = await self.api.create_session(session_name)
        except ClientError as exc:
            logger.warning(f"[admin] create session failed: {exc}")
            raise ActionFailed('create the session', exc) from exc
        self.state = {**data, 'teams': []}
        logger.info(f"[admin] created session code={data['sessionCode']}")
        return data

    def open_session(self, session_code):
        """Point the dashboard at an existing session; the next poll fills it in."""
        self.state = {'sessionCode': session_code.strip().upper()}
        self.editing.clear()

    async def poll_tick(self) -> bool:
        if not self.session_code:
            return False
        try:
            remote = await self.api.fetch_session_state(self.session_code)
        except ClientError as exc:
            logger.warning(f"[admin] poll failed: {exc}")
            return False
        if remote is None:
            return False
        self.state = merge_snapshot(self.state, remote, self.editing)
        return True

    def start_polling(self):
        self.polling.start_interval(ADMIN_POLL_KEY, self.poll_tick, self.poll_interval)

    def stop(self):
        self.polling.stop_interval(ADMIN_POLL_KEY)

    # ---- word entry ----

    def begin_edit(self, index):
        if not 0 <= index < WORD_COUNT:
            raise IndexError(index)
        self.editing.add(index)

    def set_word(self, index, text) -> bool:
        """Update a slot locally; True when it now matches the solution."""
        self.begin_edit(index)
        words = self.words
        words[index] = text or ''
        self.state['words'] = words
        return check_word_match(text, index)[0]

    async def end_edit(self, index) -> bool:
        """Release the slot; a matching word is saved straight away."""
        self.editing.discard(index)
        if index < len(self.words) and check_word_match(self.words[index], index)[0]:
            await self.save_words()
            return True
        return False

    async def save_words(self, start_time=None):
        try:
            return await self.api.admin_update_words(self.session_code, self.words, start_time)
        except ClientError as exc:
            logger.warning(f"[admin] saving words failed code={self.session_code}: {exc}")
            raise ActionFailed('save the words', exc) from exc

    async def start_timer(self, now=None):
        start_time = _now(now).isoformat().replace('+00:00', 'Z')
        await self.save_words(start_time)
        self.state['startTime'] = start_time
        return start_time

    def incorrect_slots(self):
        return check_all_words(self.words)

    def vault_unlocked(self) -> bool:
        return words_unlock_vault(self.words)

    # ---- monitoring ----

    def elapsed_seconds(self, now=None) -> Optional[int]:
        started = parse_iso(self.state.get('startTime'))
        if started is None:
            return None
        return max(0, int((_now(now) - started).total_seconds()))

    def team_online(self, team, now=None) -> bool:
        last_seen = parse_iso(team.get('lastSeen'))
        if last_seen is None:
            return False
        threshold = self.state.get('offlineThresholdSec') or self.offline_threshold
        return (_now(now) - last_seen).total_seconds() < threshold

    async def purge(self, confirm_code) -> bool:
        """Delete the session once the admin has retyped its code."""
        code = self.session_code
        if not code or (confirm_code or '').strip().upper() != code:
            return False
        try:
            await self.api.purge_session(session_code=code)
        except ClientError as exc:
            raise ActionFailed('delete the session', exc) from exc
        self.stop()
        self.state = {}
        self.editing.clear()
        logger.info(f"[admin] purged session code={code}")
        return True
