"""Transports that talk to the relay through Flask test clients."""

from scoreboard import socketio
from scoreboard.client.transports import Transport, TransportError
from scoreboard.models import GameState


def game_data(received):
    """Payloads of every gameData event in a test client's received list."""
    return [pkt['args'][0] for pkt in received if pkt['name'] == 'gameData']


class RelayHttp(Transport):
    """Request/response transport backed by the Flask test client."""

    name = 'relay-http'
    follows_endpoint = True

    def __init__(self, flask_app, endpoint='http://relay'):
        super().__init__()
        self.http = flask_app.test_client()
        self.endpoint = endpoint
        self.up = True
        self.writes = []

    def fetch(self):
        if not self.up:
            raise TransportError('relay down')
        res = self.http.get('/api/game')
        if res.status_code != 200:
            raise TransportError(f'status {res.status_code}')
        return GameState.from_dict(res.get_json())

    def send(self, state):
        if not self.up:
            return False
        self.writes.append(state)
        return self.http.post('/api/game', json=state.to_dict()).status_code == 200


class RelayPush(Transport):
    """Push transport backed by a Socket.IO test client.

    Deliveries queue inside the test client until ``pump`` hands them to
    the subscribers, which keeps the tests deterministic.
    """

    name = 'relay-push'
    supports_push = True
    follows_endpoint = True

    def __init__(self, flask_app, endpoint='http://relay'):
        super().__init__()
        self.flask_app = flask_app
        self.endpoint = endpoint
        self.up = True
        self.sio = None
        self.writes = []

    @property
    def connected(self):
        return self.sio is not None and self.sio.is_connected()

    def connect(self):
        if not self.up:
            raise TransportError('relay down')
        self.sio = socketio.test_client(self.flask_app)

    def disconnect(self):
        sio, self.sio = self.sio, None
        if sio is not None and sio.is_connected():
            sio.disconnect()

    def drop(self):
        """Simulate the connection dying underneath the client."""
        self.disconnect()
        if self.on_status:
            self.on_status(False)

    def send(self, state):
        if not self.connected:
            return False
        self.writes.append(state)
        self.sio.emit('updateGameData', state.to_dict())
        return True

    def pump(self):
        if self.sio is None:
            return
        for data in game_data(self.sio.get_received()):
            self._emit(GameState.from_dict(data))


class MemoryStore(Transport):
    """Stand-in for a hosted real-time store."""

    name = 'memory'

    def __init__(self, state=None):
        super().__init__()
        self.value = state
        self.up = True
        self.writes = []

    def fetch(self):
        if not self.up:
            raise TransportError('store down')
        return self.value

    def send(self, state):
        if not self.up:
            return False
        self.writes.append(state)
        self.value = state
        return True
