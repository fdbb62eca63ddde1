import os
import sys
import pytest

# Ensure the backend root (containing the `vaulthunt` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from vaulthunt import create_app, db, socketio

APP_SECRET = 'test-app-secret'
ADMIN_SECRET = 'test-admin-secret'


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    APP_SECRET = APP_SECRET
    ADMIN_SECRET = ADMIN_SECRET
    ALLOWED_ORIGINS = ['http://localhost:5173']
    RATE_LIMIT_ENABLED = True
    RATE_LIMIT_MAX_REQUESTS = 1000
    RATE_LIMIT_WINDOW_SECONDS = 60
    AUTO_PURGE_DAYS = 14
    SESSION_CODE_ATTEMPTS = 5


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import vaulthunt.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    if test_client.is_connected('/ws'):
        test_client.disconnect(namespace='/ws')


def secret_params(admin=False):
    return {'secret': ADMIN_SECRET if admin else APP_SECRET}


@pytest.fixture()
def api_call(client):
    """POST/GET helper that adds the right secret to the query string."""
    def call(method, path, json=None, admin=False, data=None, **params):
        query = {**secret_params(admin), **params}
        if data is not None:
            return client.open(f'/api/{path}', method=method, data=data,
                               content_type='application/json', query_string=query)
        return client.open(f'/api/{path}', method=method, json=json, query_string=query)
    return call


@pytest.fixture()
def new_session(api_call):
    def create(name='Test Sessie'):
        res = api_call('POST', 'createSession', json={'sessionName': name})
        assert res.status_code == 200
        return res.get_json()
    return create
