import os
import pytest

from scoreboard import create_app, socketio
from scoreboard.client.cache import LocalCache


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    CORS_ORIGINS = '*'
    SOCKETIO_NAMESPACE = '/'
    BROADCAST_INCLUDE_ORIGIN = True


class ExcludeOriginConfig(TestConfig):
    BROADCAST_INCLUDE_ORIGIN = False


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
    yield test_client
    try:
        test_client.disconnect()
    except Exception:
        pass


@pytest.fixture()
def cache(tmp_path):
    local = LocalCache(str(tmp_path / 'cache.sqlite3'))
    yield local
    local.close()


@pytest.fixture()
def exclude_origin_app():
    application = create_app(ExcludeOriginConfig)
    with application.app_context():
        yield application
