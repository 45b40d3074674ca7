import os


def _env_flag(name, default):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


def _env_origins(name, default='*'):
    value = os.environ.get(name, default)
    if value.strip() == '*':
        return '*'
    return [o.strip() for o in value.split(',') if o.strip()]


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Relay listens on all interfaces
    HOST = os.environ.get('HOST', '0.0.0.0')
    PORT = int(os.environ.get('PORT', '5000'))
    # '*' or a comma separated list
    CORS_ORIGINS = _env_origins('CORS_ORIGINS')
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/')
    # Echo each write back to its sender as well as everyone else
    BROADCAST_INCLUDE_ORIGIN = _env_flag('BROADCAST_INCLUDE_ORIGIN', True)


class ClientConfig:
    SERVER_URL = os.environ.get('SCOREBOARD_SERVER', 'http://localhost:5000')
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/')
    # Optional hosted real-time store, e.g. https://<project>-default-rtdb.firebaseio.com
    FIREBASE_DATABASE_URL = os.environ.get('FIREBASE_DATABASE_URL', '')
    FIREBASE_AUTH = os.environ.get('FIREBASE_AUTH', '')
    CACHE_PATH = os.environ.get(
        'SCOREBOARD_CACHE', os.path.join(os.path.expanduser('~'), '.scoreboard', 'cache.sqlite3')
    )
    DRAIN_INTERVAL_MS = int(os.environ.get('DRAIN_INTERVAL_MS', '50'))
    POLL_INTERVAL_SEC = float(os.environ.get('POLL_INTERVAL_SEC', '2'))
    HTTP_TIMEOUT_SEC = float(os.environ.get('HTTP_TIMEOUT_SEC', '3'))
    RECONNECT_MAX_ATTEMPTS = int(os.environ.get('RECONNECT_MAX_ATTEMPTS', '5'))
    RECONNECT_DELAY_SEC = float(os.environ.get('RECONNECT_DELAY_SEC', '1'))
    RECONNECT_COOLDOWN_SEC = float(os.environ.get('RECONNECT_COOLDOWN_SEC', '10'))
