"""Player-side game controller.

Holds a team's local progress, pushes it to the backend through
``updateTeam`` and persists just enough to resume after a reload.
"""
import asyncio
import logging

from vaulthunt.client.errors import ActionFailed, ApiError, ClientError, NetworkError, RateLimitedError, RequestTimeout
from vaulthunt.client.polling import Backoff
from vaulthunt.puzzle import (
    MAX_ATTEMPTS_PER_QUESTION,
    MAX_HINTS,
    PENALTY_SECONDS,
    TOTAL_QUESTIONS,
    get_animal,
    question_order,
    words_for_animal,
)

logger = logging.getLogger(__name__)

PLAYER_POLL_KEY = 'player'
RESUME_FIELDS = ('sessionCode', 'teamId', 'teamToken', 'teamName', 'info', 'questionsOrder', 'currentQIndex')


class PlayerSync:
    def __init__(self, api, storage, polling=None, question_count=TOTAL_QUESTIONS, poll_interval=5.0):
        self.api = api
        self.storage = storage
        self.polling = polling or api.polling
        self.question_count = question_count
        self.poll_interval = poll_interval
        self.backoff = Backoff()
        self.session_code = None
        self.team_id = None
        self.team_token = None
        self.team_name = None
        self.info = {}
        self.questions_order = []
        self.current_q_index = 0
        self.current_attempts = 0
        self.hints_used_for_q = 0
        self.pending = {}
        self._sync_lock = asyncio.Lock()

    @property
    def joined(self) -> bool:
        return bool(self.team_id and self.team_token)

    @property
    def finished(self) -> bool:
        return bool(self.info.get('finished'))

    @property
    def current_question(self):
        if self.current_q_index >= len(self.questions_order):
            return None
        return self.questions_order[self.current_q_index]

    # ---- session discovery ----

    async def check_session(self, session_code):
        """Fetch a session before joining; None when it does not exist."""
        try:
            return await self.api.fetch_session_state(session_code.strip().upper())
        except ApiError as exc:
            if exc.status == 404:
                return None
            raise ActionFailed('find the session', exc) from exc
        except ClientError as exc:
            raise ActionFailed('find the session', exc) from exc

    @staticmethod
    def taken_animals(snapshot):
        return {t.get('animalId') for t in (snapshot or {}).get('teams', [])}

    # ---- join / resume ----

    async def join(self, session_code, animal_id):
        animal = get_animal(animal_id)
        if animal is None:
            raise ValueError(f'unknown animal {animal_id!r}')
        session_code = session_code.strip().upper()
        try:
            data = await self.api.join_team(session_code, animal_id, animal['teamName'], animal['color'])
        except ClientError as exc:
            logger.warning(f"[player] join failed code={session_code} animal={animal_id}: {exc}")
            raise ActionFailed('register the team', exc) from exc

        self.session_code = session_code
        self.team_id = data['teamId']
        self.team_token = data['teamToken']
        self.team_name = animal['teamName']
        self.info = {
            'animalId': animal_id,
            'teamName': animal['teamName'],
            'teamColor': animal['color'],
            'word1': data.get('word1') or '',
            'word2': data.get('word2') or '',
            'progress': 0,
            'hintsUsed': 0,
            'timePenaltySeconds': 0,
            'finished': False,
        }
        self.questions_order = question_order(session_code, self.team_id, self.question_count)
        self.current_q_index = 0
        self.current_attempts = 0
        self.hints_used_for_q = 0
        self._persist()
        logger.info(f"[player] joined code={session_code} team={self.team_id}")
        return self.info

    def resume(self):
        """Restore a persisted team, or None when there is nothing usable."""
        record = self.storage.get()
        if record is None:
            return None
        if not isinstance(record, dict) or any(not record.get(k) for k in RESUME_FIELDS[:3]):
            logger.warning('[player] dropping unusable resume record')
            self.discard_resume()
            return None
        self.session_code = record['sessionCode']
        self.team_id = record['teamId']
        self.team_token = record['teamToken']
        self.team_name = record.get('teamName')
        self.info = dict(record.get('info') or {})
        self.questions_order = list(record.get('questionsOrder') or
                                    question_order(self.session_code, self.team_id, self.question_count))
        self.current_q_index = int(record.get('currentQIndex') or 0)
        self.current_attempts = 0
        self.hints_used_for_q = 0
        return record

    async def restore(self):
        """``resume()`` and confirm the session still exists on the backend."""
        record = self.resume()
        if record is None:
            return None
        if await self.check_session(self.session_code) is None:
            logger.info(f"[player] session {self.session_code} is gone, discarding resume record")
            self.discard_resume()
            self.team_id = self.team_token = None
            return None
        return record

    def discard_resume(self):
        self.storage.remove()

    def _persist(self):
        self.storage.set({
            'sessionCode': self.session_code,
            'teamId': self.team_id,
            'teamToken': self.team_token,
            'teamName': self.team_name,
            'info': self.info,
            'questionsOrder': self.questions_order,
            'currentQIndex': self.current_q_index,
        })

    # ---- gameplay ----

    async def answer(self, correct: bool) -> str:
        """Record an answer; returns 'correct', 'retry', 'failed' or 'finished'."""
        if self.finished:
            return 'finished'
        if correct:
            await self._advance()
            return 'finished' if self.finished else 'correct'
        self.current_attempts += 1
        if self.current_attempts < MAX_ATTEMPTS_PER_QUESTION:
            return 'retry'
        self.info['timePenaltySeconds'] = self.info.get('timePenaltySeconds', 0) + PENALTY_SECONDS
        self._queue(timePenaltySeconds=self.info['timePenaltySeconds'])
        await self._advance()
        return 'finished' if self.finished else 'failed'

    async def use_hint(self) -> bool:
        if self.hints_used_for_q >= MAX_HINTS or self.info.get('hintsUsed', 0) >= MAX_HINTS:
            return False
        self.hints_used_for_q += 1
        self.info['hintsUsed'] = self.info.get('hintsUsed', 0) + 1
        self.info['timePenaltySeconds'] = self.info.get('timePenaltySeconds', 0) + PENALTY_SECONDS
        self._queue(hintsUsed=self.info['hintsUsed'], timePenaltySeconds=self.info['timePenaltySeconds'])
        await self.sync()
        return True

    async def _advance(self):
        self.current_q_index = min(self.current_q_index + 1, self.question_count)
        self.current_attempts = 0
        self.hints_used_for_q = 0
        self.info['progress'] = self.current_q_index
        fields = {'progress': self.current_q_index}
        if self.current_q_index >= self.question_count:
            self.info['finished'] = True
            fields['finished'] = True
        self._queue(**fields)
        self._persist()
        await self.sync()
        self._stop_if_done()

    def _stop_if_done(self):
        # polling keeps retrying until the final update has gone out
        if self.finished and not self.pending:
            self.stop()

    # ---- sync ----

    def _queue(self, **fields):
        self.pending.update(fields)

    async def sync(self) -> bool:
        """Push queued fields; they stay queued when the push fails.

        Pushes run one at a time so an older snapshot of the queue can never
        land after a newer one. Fields queued while a push is in flight go
        out in a follow-up push before this returns.
        """
        if not self.joined:
            return True
        async with self._sync_lock:
            while self.pending:
                if self.backoff.active:
                    logger.debug('[player] sync deferred, backing off')
                    return False
                sent = dict(self.pending)
                try:
                    await self.api.update_team(
                        self.team_id, self.team_token,
                        progress=sent.get('progress'),
                        hints_used=sent.get('hintsUsed'),
                        time_penalty_seconds=sent.get('timePenaltySeconds'),
                        finished=sent.get('finished'),
                    )
                except RateLimitedError:
                    delay = self.backoff.trip()
                    logger.warning(f"[player] rate limited, backing off {delay}s")
                    return False
                except (RequestTimeout, NetworkError) as exc:
                    logger.warning(f"[player] sync failed, will retry: {exc}")
                    return False
                except ApiError as exc:
                    logger.error(f"[player] sync rejected status={exc.status}: {exc.message}")
                    self._unqueue(sent)
                    return False
                self.backoff.reset()
                self._unqueue(sent)
        return True

    def _unqueue(self, sent):
        for key, value in sent.items():
            if self.pending.get(key) == value:
                del self.pending[key]

    async def poll_tick(self):
        if not self.session_code:
            return
        try:
            snapshot = await self.api.fetch_session_state(self.session_code)
        except ClientError as exc:
            logger.warning(f"[player] poll failed: {exc}")
            return
        if snapshot is None:
            return
        if not self.info.get('word1') and self.info.get('animalId') and snapshot.get('words'):
            word1, word2 = words_for_animal(snapshot['words'], self.info.get('animalId'))
            if word1:
                self.info['word1'], self.info['word2'] = word1, word2
                self._persist()
        await self.sync()
        self._stop_if_done()

    def start_polling(self):
        self.polling.start_interval(PLAYER_POLL_KEY, self.poll_tick, self.poll_interval)

    def stop(self):
        self.polling.stop_interval(PLAYER_POLL_KEY)
