from flask import current_app

from vaulthunt.auth import tokens_match
from vaulthunt.errors import ConstraintViolation, InvalidInput, NotFound, ServiceUnavailable, Unauthorized
from vaulthunt.identifiers import generate_team_token, generate_uuid
from vaulthunt.models import Team, utcnow
from vaulthunt.puzzle import MAX_HINTS, TOTAL_QUESTIONS, is_valid_animal_id, words_for_animal
from vaulthunt.socketio_events import notify_state_update
from vaulthunt.store import SessionStore


def join_team(session_code: str, animal_id, team_name: str = None, team_color: str = None,
              store: SessionStore = None) -> dict:
    """Claim the ``animal_id`` slot in a session, or return whoever holds it.

    Joining is idempotent: a retried join, or one that loses a race against a
    concurrent join for the same slot, gets the existing team's id and token
    back instead of an error.
    """
    store = store or SessionStore()
    if not is_valid_animal_id(animal_id):
        raise InvalidInput('animalId must be between 1 and 10')
    quiz_session = store.get_session_by_code(session_code)

    try:
        existing = store.get_team_by_animal(session_code, animal_id)
    except NotFound:
        existing = None
    if existing:
        current_app.logger.info(f"[join_team] code={session_code} animal={animal_id} existing team={existing.team_id}")
        return existing.to_join_dict()

    word1, word2 = words_for_animal(quiz_session.words, animal_id)
    team = Team(
        team_id=generate_uuid(),
        team_token=generate_team_token(),
        session_code=session_code,
        animal_id=animal_id,
        team_name=team_name or '',
        team_color=team_color or '#000000',
        word1=word1,
        word2=word2,
        last_seen=utcnow(),
    )
    try:
        store.insert_team(team)
    except ConstraintViolation:
        # Lost the race for this slot: hand back the winner
        try:
            winner = store.get_team_by_animal(session_code, animal_id)
        except NotFound:
            current_app.logger.error(f"[join_team] code={session_code} animal={animal_id} conflict without winner")
            raise ServiceUnavailable('Failed to join team')
        current_app.logger.info(f"[join_team] code={session_code} animal={animal_id} race lost to team={winner.team_id}")
        return winner.to_join_dict()

    current_app.logger.info(f"[join_team] code={session_code} animal={animal_id} team={team.team_id}")
    notify_state_update(session_code)
    return team.to_join_dict()


def _check_range(name, value, low, high=None):
    if value < low or (high is not None and value > high):
        bound = f'between {low} and {high}' if high is not None else f'at least {low}'
        raise InvalidInput(f'{name} must be {bound}')


def update_team(team_id: str, team_token: str, progress: int = None, hints_used: int = None,
                team_name: str = None, finished: bool = None, time_penalty_seconds: int = None,
                store: SessionStore = None) -> dict:
    store = store or SessionStore()
    try:
        team = store.get_team_by_id(team_id)
    except NotFound:
        raise Unauthorized('Invalid team token')
    if not tokens_match(team_token, team.team_token):
        current_app.logger.warning(f"[update_team] team={team_id} rejected token")
        raise Unauthorized('Invalid team token')

    # Validate everything before writing anything
    fields = {}
    if progress is not None:
        _check_range('progress', progress, 0, TOTAL_QUESTIONS)
        fields['progress'] = progress
    if hints_used is not None:
        _check_range('hintsUsed', hints_used, 0, MAX_HINTS)
        fields['hints_used'] = hints_used
    if time_penalty_seconds is not None:
        _check_range('timePenaltySeconds', time_penalty_seconds, 0)
        fields['time_penalty_seconds'] = time_penalty_seconds
    if team_name is not None:
        fields['team_name'] = team_name
    if finished is not None:
        # finished is sticky: a stale retry must not reopen a finished team
        if finished or not team.finished:
            fields['finished'] = finished

    store.update_team_fields(team.team_id, fields)
    notify_state_update(team.session_code)
    return {'ok': True}
