import enum
import json
from datetime import datetime, timezone

from vaulthunt import db
from vaulthunt.puzzle import TOTAL_QUESTIONS


def utcnow():
    # SQLite drops tzinfo, so timestamps are stored as naive UTC
    return datetime.now(timezone.utc).replace(tzinfo=None)


def isoformat(value):
    if value is None:
        return None
    return value.isoformat(timespec='milliseconds') + 'Z'


class SessionPhase(str, enum.Enum):
    AWAITING_WORDS = 'awaiting_words'
    READY = 'ready'
    RUNNING = 'running'


class TeamStatus(str, enum.Enum):
    JOINED = 'joined'
    PLAYING = 'playing'
    FINISHED = 'finished'


class QuizSession(db.Model):
    __tablename__ = 'quiz_session'
    id = db.Column(db.Integer, primary_key=True)
    session_id = db.Column(db.String(36), unique=True, nullable=False, index=True)
    session_code = db.Column(db.String(7), unique=True, nullable=False, index=True)
    session_name = db.Column(db.String(120), nullable=False, default='')
    words_json = db.Column(db.Text, nullable=False, default='[]')
    start_time = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)

    @property
    def words(self):
        try:
            words = json.loads(self.words_json or '[]')
        except ValueError:
            words = []
        return words if isinstance(words, list) else []

    @words.setter
    def words(self, value):
        self.words_json = json.dumps(list(value))

    @property
    def phase(self):
        if self.start_time is not None:
            return SessionPhase.RUNNING
        if any(w for w in self.words):
            return SessionPhase.READY
        return SessionPhase.AWAITING_WORDS

    def to_dict(self):
        return {
            'sessionId': self.session_id,
            'sessionCode': self.session_code,
            'sessionName': self.session_name,
            'phase': self.phase.value,
            'startTime': isoformat(self.start_time),
            'words': self.words,
        }


class Team(db.Model):
    __tablename__ = 'team'
    __table_args__ = (
        db.UniqueConstraint('session_code', 'animal_id', name='uq_team_session_animal'),
    )
    id = db.Column(db.Integer, primary_key=True)
    team_id = db.Column(db.String(36), unique=True, nullable=False, index=True)
    team_token = db.Column(db.String(64), nullable=False)
    session_code = db.Column(db.String(7), nullable=False, index=True)
    animal_id = db.Column(db.Integer, nullable=False)
    team_name = db.Column(db.String(120), nullable=False, default='')
    team_color = db.Column(db.String(16), nullable=False, default='#000000')
    word1 = db.Column(db.String(120), nullable=False, default='')
    word2 = db.Column(db.String(120), nullable=False, default='')
    progress = db.Column(db.Integer, nullable=False, default=0)
    hints_used = db.Column(db.Integer, nullable=False, default=0)
    time_penalty_seconds = db.Column(db.Integer, nullable=False, default=0)
    finished = db.Column(db.Boolean, nullable=False, default=False)
    last_seen = db.Column(db.DateTime, nullable=True, default=utcnow)

    @property
    def status(self):
        if self.finished or (self.progress or 0) >= TOTAL_QUESTIONS:
            return TeamStatus.FINISHED
        if self.progress:
            return TeamStatus.PLAYING
        return TeamStatus.JOINED

    def to_dict(self):
        """Public view shared with every client of the session (no token)."""
        return {
            'teamId': self.team_id,
            'teamName': self.team_name,
            'teamColor': self.team_color,
            'animalId': self.animal_id,
            'progress': self.progress or 0,
            'hintsUsed': self.hints_used or 0,
            'timePenaltySeconds': self.time_penalty_seconds or 0,
            'finished': bool(self.finished),
            'status': self.status.value,
            'lastSeen': isoformat(self.last_seen),
        }

    def to_join_dict(self):
        """Owner view returned by joinTeam, including the capability token."""
        return {
            'teamId': self.team_id,
            'teamToken': self.team_token,
            'animalId': self.animal_id,
            'word1': self.word1 or '',
            'word2': self.word2 or '',
        }
