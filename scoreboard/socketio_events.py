from flask import current_app, request
from flask_socketio import emit
from scoreboard import get_hub
from scoreboard.models import GameState, InvalidGameState


def _get_sid() -> str:
    # request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def handle_connect():
    sid = _get_sid()
    hub = get_hub()
    # New observers get the current value right away, not on the next mutation
    hub.subscribe(sid, bootstrap=True)
    current_app.logger.info(f"[connect] sid={sid} observers={hub.observers}")


def handle_disconnect(*args):
    sid = _get_sid()
    hub = get_hub()
    hub.unsubscribe(sid)
    current_app.logger.info(f"[disconnect] sid={sid} observers={hub.observers}")


def handle_update_game_data(data):
    sid = _get_sid()
    try:
        state = GameState.from_dict(data)
    except InvalidGameState as exc:
        current_app.logger.warning(f"[update] sid={sid} rejected: {exc}")
        emit('error', {'message': str(exc)})
        return
    current_app.logger.info(f"[update] received from sid={sid}")
    get_hub().publish(sid, state)


def handle_ping(data=None):
    emit('pong', data or {})


def register_socketio_handlers(namespace: str = '/') -> None:
    """Register the push-channel handlers on the given namespace."""
    from scoreboard import socketio

    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('updateGameData', handle_update_game_data, namespace=namespace)
    socketio.on_event('ping', handle_ping, namespace=namespace)
