from flask import Flask, current_app
from flask_cors import CORS
from flask_socketio import SocketIO
from scoreboard.config import Config
from scoreboard.services.game import BroadcastHub, StateStore

socketio = SocketIO(async_mode=None)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    origins = flask_app.config.get('CORS_ORIGINS', '*')
    namespace = flask_app.config.get('SOCKETIO_NAMESPACE', '/')
    CORS(flask_app, origins=origins)
    socketio.init_app(flask_app, cors_allowed_origins=origins)

    # One store and hub per app; handlers reach them through get_hub()
    def deliver(sid, state):
        socketio.emit('gameData', state.to_dict(), to=sid, namespace=namespace)

    hub = BroadcastHub(
        StateStore(),
        deliver,
        include_origin=flask_app.config.get('BROADCAST_INCLUDE_ORIGIN', True),
        logger=flask_app.logger,
    )
    flask_app.extensions['scoreboard'] = hub

    from scoreboard.main import main
    flask_app.register_blueprint(main)

    from scoreboard.api.game import game
    flask_app.register_blueprint(game, url_prefix='/api/game')

    from scoreboard.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace=namespace)

    return flask_app


def get_hub() -> BroadcastHub:
    return current_app.extensions['scoreboard']
