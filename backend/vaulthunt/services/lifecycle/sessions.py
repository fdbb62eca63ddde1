from flask import current_app

from vaulthunt.errors import ConstraintViolation, NotFound, ServiceUnavailable
from vaulthunt.identifiers import generate_session_code, generate_uuid
from vaulthunt.models import QuizSession, isoformat, utcnow
from vaulthunt.puzzle import pad_words, words_for_animal
from vaulthunt.socketio_events import notify_session_ended, notify_state_update
from vaulthunt.store import UNSET, SessionStore


def create_session(session_name: str, store: SessionStore = None) -> dict:
    """Create a session under a fresh code, retrying on code collisions."""
    store = store or SessionStore()
    attempts = int(current_app.config.get('SESSION_CODE_ATTEMPTS', 5))
    session_id = generate_uuid()
    for attempt in range(1, attempts + 1):
        code = generate_session_code()
        row = QuizSession(
            session_id=session_id,
            session_code=code,
            session_name=session_name,
            words_json='[]',
            created_at=utcnow(),
        )
        try:
            store.insert_session(row)
        except ConstraintViolation:
            current_app.logger.info(f"[create_session] code collision code={code} attempt={attempt}/{attempts}")
            continue
        current_app.logger.info(f"[create_session] session={session_id} code={code}")
        return {
            'sessionId': session_id,
            'sessionName': session_name,
            'sessionCode': code,
            'startTime': None,
            'words': [],
        }
    current_app.logger.error(f"[create_session] gave up after {attempts} code collisions")
    raise ServiceUnavailable('Failed to create session')


def fetch_session_state(code: str, store: SessionStore = None) -> dict:
    store = store or SessionStore()
    quiz_session = store.get_session_by_code(code)
    payload = quiz_session.to_dict()
    payload['words'] = pad_words(quiz_session.words or [])
    payload['teams'] = [t.to_dict() for t in store.list_teams_by_session(code)]
    payload['now'] = isoformat(utcnow())
    payload['offlineThresholdSec'] = int(current_app.config.get('OFFLINE_THRESHOLD_SEC', 20))
    return payload


def admin_update_words(code: str, words, start_time=UNSET, store: SessionStore = None) -> dict:
    """Store the admin's 20 words and backfill teams that joined before them.

    Teams that already hold words keep them, so an edit mid-game never changes
    an answer that was already handed out.
    """
    store = store or SessionStore()
    store.get_session_by_code(code)
    words = pad_words(words)
    store.update_session_words(code, words, start_time)

    backfilled = 0
    for team in store.list_teams_by_session(code):
        if team.word1:
            continue
        word1, word2 = words_for_animal(words, team.animal_id)
        if word1 or word2:
            store.assign_team_words(team.team_id, word1, word2)
            backfilled += 1
    current_app.logger.info(f"[admin_update_words] code={code} backfilled_teams={backfilled}")
    notify_state_update(code)
    return {'ok': True}


def purge_session(session_id: str = None, session_code: str = None, store: SessionStore = None) -> dict:
    """Delete a session and all of its teams. Unknown codes are a no-op."""
    store = store or SessionStore()
    code = session_code
    if session_id:
        try:
            code = store.get_session_by_id(session_id).session_code
        except NotFound:
            if not session_code:
                raise
    deleted_teams = store.delete_teams_by_session(code)
    deleted_sessions = store.delete_session_by_code(code)
    current_app.logger.info(
        f"[purge_session] code={code} sessions={deleted_sessions} teams={deleted_teams}"
    )
    notify_session_ended(code)
    return {'deletedSessions': deleted_sessions, 'deletedTeams': deleted_teams}
