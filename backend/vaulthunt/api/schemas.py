"""Request bodies for the wire protocol, validated at the HTTP boundary."""
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

from vaulthunt.errors import InvalidInput
from vaulthunt.store import UNSET


def _optional_str(data, key):
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise InvalidInput(f'{key} must be a string')
    return value


def _optional_int(data, key):
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidInput(f'{key} must be an integer')
    if isinstance(value, float) and (not math.isfinite(value) or not value.is_integer()):
        raise InvalidInput(f'{key} must be an integer')
    return int(value)


def parse_timestamp(value):
    """Accept ISO-8601 strings or epoch numbers; return naive UTC."""
    if value is None:
        return None
    if isinstance(value, bool):
        raise InvalidInput('startTime must be a timestamp')
    if isinstance(value, (int, float)):
        # Browser clients send Date.now() milliseconds
        seconds = value / 1000.0 if value > 1e11 else float(value)
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc).replace(tzinfo=None)
        except (ValueError, OverflowError, OSError) as exc:
            raise InvalidInput('startTime is out of range') from exc
    if isinstance(value, str):
        text = value.strip()
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError as exc:
            raise InvalidInput('startTime must be an ISO-8601 timestamp') from exc
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
        return parsed
    raise InvalidInput('startTime must be a timestamp')


@dataclass
class CreateSessionRequest:
    session_name: str = 'Nieuwe Sessie'

    @classmethod
    def from_json(cls, data):
        name = _optional_str(data, 'sessionName')
        return cls(session_name=name.strip() if name and name.strip() else 'Nieuwe Sessie')


@dataclass
class JoinTeamRequest:
    session_code: str
    animal_id: int
    team_name: Optional[str] = None
    team_color: Optional[str] = None

    @classmethod
    def from_json(cls, data):
        code = _optional_str(data, 'sessionCode')
        animal_id = data.get('animalId')
        if not code or animal_id is None:
            raise InvalidInput('Missing sessionCode or animalId')
        return cls(
            session_code=code.strip().upper(),
            animal_id=animal_id,
            team_name=_optional_str(data, 'teamName'),
            team_color=_optional_str(data, 'teamColor'),
        )


@dataclass
class UpdateTeamRequest:
    team_id: str
    team_token: str
    progress: Optional[int] = None
    hints_used: Optional[int] = None
    team_name: Optional[str] = None
    finished: Optional[bool] = None
    time_penalty_seconds: Optional[int] = None

    @classmethod
    def from_json(cls, data):
        team_id = _optional_str(data, 'teamId')
        team_token = _optional_str(data, 'teamToken')
        if not team_id or not team_token:
            raise InvalidInput('Missing teamId or teamToken')
        finished = data.get('finished')
        if finished is not None and not isinstance(finished, bool):
            raise InvalidInput('finished must be a boolean')
        return cls(
            team_id=team_id,
            team_token=team_token,
            progress=_optional_int(data, 'progress'),
            hints_used=_optional_int(data, 'hintsUsed'),
            team_name=_optional_str(data, 'teamName'),
            finished=finished,
            time_penalty_seconds=_optional_int(data, 'timePenaltySeconds'),
        )


@dataclass
class AdminUpdateWordsRequest:
    session_code: str
    words: List[str] = field(default_factory=list)
    start_time: object = UNSET

    @classmethod
    def from_json(cls, code, data):
        if not code or not isinstance(code, str):
            raise InvalidInput('Missing session code')
        words = data.get('words')
        if not isinstance(words, list):
            raise InvalidInput('Words array must contain exactly 20 words')
        if not all(w is None or isinstance(w, str) for w in words):
            raise InvalidInput('All words must be strings')
        start_time = UNSET
        if 'startTime' in data:
            start_time = parse_timestamp(data.get('startTime'))
        return cls(session_code=code.strip().upper(), words=words, start_time=start_time)


@dataclass
class PurgeSessionRequest:
    session_id: Optional[str] = None
    session_code: Optional[str] = None

    @classmethod
    def from_json(cls, data):
        session_id = _optional_str(data, 'sessionId')
        session_code = _optional_str(data, 'sessionCode')
        if not session_id and not session_code:
            raise InvalidInput('Either sessionId or sessionCode is required')
        return cls(
            session_id=session_id or None,
            session_code=session_code.strip().upper() if session_code else None,
        )
