"""Session/team persistence over the Flask-SQLAlchemy session.

Uniqueness of session codes and of ``(session_code, animal_id)`` is enforced
by database constraints; a losing insert surfaces as ``ConstraintViolation``.
"""
import json

from sqlalchemy.exc import IntegrityError

from vaulthunt import db
from vaulthunt.errors import ConstraintViolation, NotFound
from vaulthunt.models import QuizSession, Team, utcnow

UNSET = object()


class SessionStore:
    def __init__(self, session=None):
        self.session = session or db.session

    def _commit_insert(self, row, constraint):
        self.session.add(row)
        try:
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            raise ConstraintViolation(constraint) from exc
        return row

    # ---- sessions ----

    def insert_session(self, quiz_session: QuizSession) -> QuizSession:
        return self._commit_insert(quiz_session, 'quiz_session.session_code')

    def get_session_by_code(self, code: str) -> QuizSession:
        found = QuizSession.query.filter_by(session_code=code).first()
        if not found:
            raise NotFound('Session not found')
        return found

    def get_session_by_id(self, session_id: str) -> QuizSession:
        found = QuizSession.query.filter_by(session_id=session_id).first()
        if not found:
            raise NotFound('Session not found')
        return found

    def update_session_words(self, code: str, words, start_time=UNSET) -> None:
        values = {'words_json': json.dumps(list(words))}
        if start_time is not UNSET:
            values['start_time'] = start_time
        QuizSession.query.filter_by(session_code=code).update(values, synchronize_session=False)
        self.session.commit()

    def delete_session_by_code(self, code: str) -> int:
        deleted = QuizSession.query.filter_by(session_code=code).delete(synchronize_session=False)
        self.session.commit()
        return deleted

    def list_sessions_older_than(self, cutoff):
        return QuizSession.query.filter(QuizSession.created_at < cutoff).order_by(QuizSession.created_at).all()

    # ---- teams ----

    def insert_team(self, team: Team) -> Team:
        return self._commit_insert(team, 'uq_team_session_animal')

    def get_team_by_id(self, team_id: str) -> Team:
        found = Team.query.filter_by(team_id=team_id).first()
        if not found:
            raise NotFound('Team not found')
        return found

    def get_team_by_animal(self, code: str, animal_id: int) -> Team:
        found = Team.query.filter_by(session_code=code, animal_id=animal_id).first()
        if not found:
            raise NotFound('Team not found')
        return found

    def list_teams_by_session(self, code: str):
        return Team.query.filter_by(session_code=code).order_by(Team.animal_id.asc()).all()

    def update_team_fields(self, team_id: str, fields: dict) -> None:
        values = dict(fields)
        values['last_seen'] = utcnow()
        Team.query.filter_by(team_id=team_id).update(values, synchronize_session=False)
        self.session.commit()

    def assign_team_words(self, team_id: str, word1: str, word2: str) -> None:
        # Admin-side backfill, so lastSeen is left alone
        Team.query.filter_by(team_id=team_id).update(
            {'word1': word1, 'word2': word2}, synchronize_session=False
        )
        self.session.commit()

    def delete_teams_by_session(self, code: str) -> int:
        deleted = Team.query.filter_by(session_code=code).delete(synchronize_session=False)
        self.session.commit()
        return deleted
