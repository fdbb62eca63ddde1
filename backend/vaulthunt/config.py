import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///vaulthunt.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Shared secrets. Empty APP_SECRET runs in development mode (all accepted).
    APP_SECRET = os.environ.get('APP_SECRET', '')
    # Falls back to APP_SECRET when unset
    ADMIN_SECRET = os.environ.get('ADMIN_SECRET', '')
    ALLOWED_ORIGINS = [o.strip() for o in os.environ.get('ALLOWED_ORIGINS', 'http://localhost:5173').split(',') if o.strip()]
    # Rate limiting (sliding window per client address + session code)
    RATE_LIMIT_ENABLED = os.environ.get('RATE_LIMIT_ENABLED', '1') not in ('0', 'false', 'no')
    RATE_LIMIT_MAX_REQUESTS = int(os.environ.get('RATE_LIMIT_MAX_REQUESTS', '60'))
    RATE_LIMIT_WINDOW_SECONDS = int(os.environ.get('RATE_LIMIT_WINDOW_SECONDS', '60'))
    # Retention
    AUTO_PURGE_DAYS = int(os.environ.get('AUTO_PURGE_DAYS', '14'))
    RETENTION_SWEEP_INTERVAL_SEC = int(os.environ.get('RETENTION_SWEEP_INTERVAL_SEC', str(7 * 24 * 60 * 60)))
    # Team shown offline when unseen for this long (seconds)
    OFFLINE_THRESHOLD_SEC = int(os.environ.get('OFFLINE_THRESHOLD_SEC', '20'))
    # Session code insert attempts before giving up
    SESSION_CODE_ATTEMPTS = int(os.environ.get('SESSION_CODE_ATTEMPTS', '5'))
