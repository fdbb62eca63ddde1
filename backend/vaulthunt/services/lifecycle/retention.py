from datetime import timedelta

from flask import current_app

from vaulthunt import socketio
from vaulthunt.models import utcnow
from vaulthunt.socketio_events import notify_session_ended
from vaulthunt.store import SessionStore


def auto_purge_sessions(retention_days: int = None, store: SessionStore = None) -> dict:
    """Delete every session (and its teams) older than the retention window.

    Only sessions past the horizon are touched, so the sweep is safe to run
    alongside live traffic and to repeat.
    """
    store = store or SessionStore()
    if retention_days is None:
        retention_days = int(current_app.config.get('AUTO_PURGE_DAYS', 14))
    cutoff = utcnow() - timedelta(days=retention_days)
    current_app.logger.info(f"[auto_purge] deleting sessions older than {retention_days} days (before {cutoff.isoformat()})")

    expired = store.list_sessions_older_than(cutoff)
    if not expired:
        current_app.logger.info('[auto_purge] no old sessions to delete')
        return {'deletedSessions': 0, 'deletedTeams': 0}

    deleted_sessions = 0
    deleted_teams = 0
    for quiz_session in expired:
        code = quiz_session.session_code
        deleted_teams += store.delete_teams_by_session(code)
        deleted_sessions += store.delete_session_by_code(code)
        notify_session_ended(code)
    current_app.logger.info(f"[auto_purge] complete: {deleted_sessions} sessions, {deleted_teams} teams deleted")
    return {'deletedSessions': deleted_sessions, 'deletedTeams': deleted_teams}


def schedule_retention_sweep(app) -> bool:
    """Run ``auto_purge_sessions`` on a recurring background task.

    - No-ops in TESTING mode
    - Starts at most one sweep task per app
    """
    if app.config.get('TESTING'):
        return False
    if app.extensions.get('vaulthunt.retention_task'):
        app.logger.info('[retention] sweep already scheduled')
        return False

    interval = int(app.config.get('RETENTION_SWEEP_INTERVAL_SEC', 7 * 24 * 60 * 60))

    def _worker():
        while True:
            socketio.sleep(interval)
            with app.app_context():
                try:
                    result = auto_purge_sessions()
                except Exception:
                    app.logger.exception('[retention] sweep failed; retrying next interval')
                    continue
                app.logger.info(f"[retention] sweep result={result}")

    app.extensions['vaulthunt.retention_task'] = socketio.start_background_task(_worker)
    app.logger.info(f"[retention] sweep scheduled every {interval}s")
    return True
