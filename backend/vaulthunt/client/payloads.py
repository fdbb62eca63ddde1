"""Builders for request bodies, validated before anything is sent.

The secret is optional here: a backend without ``APP_SECRET`` accepts
requests that carry none.
"""
from vaulthunt.client.errors import PayloadError
from vaulthunt.client.validators import (
    validate_animal_id,
    validate_hex_color,
    validate_progress,
    validate_session_code,
    validate_team_token,
    validate_words,
)
from vaulthunt.puzzle import MAX_HINTS, pad_words


def _with_secret(secret, payload):
    if secret:
        if not isinstance(secret, str):
            raise PayloadError('secret must be a string')
        return {'secret': secret.strip(), **payload}
    return payload


def build_create_session_payload(secret, session_name):
    if not session_name or not isinstance(session_name, str) or not session_name.strip():
        raise PayloadError('sessionName is required')
    return _with_secret(secret, {'sessionName': session_name.strip()})


def build_join_team_payload(secret, session_code, animal_id, team_name=None, team_color=None):
    result = validate_session_code(session_code)
    if not result:
        raise PayloadError(result.error)
    result = validate_animal_id(animal_id)
    if not result:
        raise PayloadError(result.error)
    payload = {'sessionCode': session_code.strip().upper(), 'animalId': animal_id}
    if team_name:
        payload['teamName'] = team_name
    if team_color:
        result = validate_hex_color(team_color)
        if not result:
            raise PayloadError(result.error)
        payload['teamColor'] = team_color
    return _with_secret(secret, payload)


def build_update_team_payload(secret, team_id, team_token, progress=None, hints_used=None,
                              time_penalty_seconds=None, finished=None, team_name=None):
    """Only the fields that are set end up in the payload."""
    if not team_id:
        raise PayloadError('teamId is required')
    result = validate_team_token(team_token)
    if not result:
        raise PayloadError(result.error)
    payload = {'teamId': team_id, 'teamToken': team_token}
    if progress is not None:
        result = validate_progress(progress)
        if not result:
            raise PayloadError(result.error)
        payload['progress'] = progress
    if hints_used is not None:
        if hints_used < 0 or hints_used > MAX_HINTS:
            raise PayloadError(f'hintsUsed must be between 0 and {MAX_HINTS}')
        payload['hintsUsed'] = hints_used
    if time_penalty_seconds is not None:
        payload['timePenaltySeconds'] = max(0, int(time_penalty_seconds))
    if finished is not None:
        payload['finished'] = bool(finished)
    if team_name:
        payload['teamName'] = team_name
    return _with_secret(secret, payload)


def build_admin_update_words_payload(secret, session_code, words, start_time=None):
    if not session_code:
        raise PayloadError('sessionCode is required')
    if not isinstance(words, (list, tuple)):
        raise PayloadError('words must be a list')
    words = pad_words(words)
    result = validate_words(words)
    if not result:
        raise PayloadError(result.error)
    payload = {'sessionCode': session_code, 'words': words}
    if start_time is not None:
        payload['startTime'] = start_time
    return _with_secret(secret, payload)


def build_purge_session_payload(secret, session_code=None, session_id=None):
    payload = {}
    if session_code:
        payload['sessionCode'] = session_code
    if session_id:
        payload['sessionId'] = session_id
    if not payload:
        raise PayloadError('sessionCode or sessionId is required')
    return _with_secret(secret, payload)
