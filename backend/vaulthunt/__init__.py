from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
from werkzeug.exceptions import HTTPException
import click
from vaulthunt.config import Config

db = SQLAlchemy()
migrate = Migrate()
socketio = SocketIO(async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    allowed_origins = flask_app.config.get('ALLOWED_ORIGINS') or []

    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Per-process rate limiter, owned by the app rather than a module global
    from vaulthunt.rate_limit import RateLimiter
    flask_app.extensions['vaulthunt.rate_limiter'] = RateLimiter(
        max_requests=flask_app.config.get('RATE_LIMIT_MAX_REQUESTS', 60),
        window_seconds=flask_app.config.get('RATE_LIMIT_WINDOW_SECONDS', 60),
    )

    if not flask_app.config.get('APP_SECRET'):
        flask_app.logger.warning('APP_SECRET not configured - running in development mode')

    from vaulthunt.api.sessions import api
    flask_app.register_blueprint(api, url_prefix='/api')

    @flask_app.route('/')
    @flask_app.route('/health')
    def health():
        from vaulthunt.models import utcnow, isoformat
        return jsonify({'status': 'ok', 'timestamp': isoformat(utcnow())})

    @flask_app.errorhandler(HTTPException)
    def handle_http_error(exc):
        return jsonify({'error': exc.description}), exc.code

    @flask_app.errorhandler(Exception)
    def handle_unexpected_error(exc):
        db.session.rollback()
        flask_app.logger.exception(f"[error] unhandled {type(exc).__name__}")
        return jsonify({'error': 'Internal server error'}), 500

    from vaulthunt.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    @click.command('db-reset')
    def db_reset_command():
        """Drops and recreates all tables."""
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            print('Database has been reset!')

    @click.command('purge-expired')
    @click.option('--days', type=int, default=None, help='Retention window in days.')
    def purge_expired_command(days):
        """Deletes sessions (and their teams) older than the retention window."""
        from vaulthunt.services.lifecycle.retention import auto_purge_sessions
        with flask_app.app_context():
            result = auto_purge_sessions(days)
            print(f"Deleted {result['deletedSessions']} sessions and {result['deletedTeams']} teams")

    flask_app.cli.add_command(db_reset_command)
    flask_app.cli.add_command(purge_expired_command)

    return flask_app
