import logging
import threading
from typing import Callable, Optional

import socketio

from scoreboard.models import GameState, InvalidGameState
from .base import Transport, TransportError

logger = logging.getLogger(__name__)


class SocketIOTransport(Transport):
    """Push channel to the relay over Socket.IO.

    The client's own reconnection is switched off: the sync client decides
    when and how often to retry, and resyncs over HTTP afterwards. Only the
    most recently opened client counts; events from one that has been
    replaced or closed are ignored.
    """

    name = 'socketio'
    supports_push = True
    follows_endpoint = True

    def __init__(
        self,
        endpoint: str,
        namespace: str = '/',
        timeout: float = 3.0,
        on_status: Optional[Callable[[bool], None]] = None,
        client_factory: Callable[..., socketio.Client] = socketio.Client,
    ):
        super().__init__()
        self.endpoint = endpoint
        self.namespace = namespace
        self.timeout = timeout
        self.on_status = on_status
        self._client_factory = client_factory
        self._sio: Optional[socketio.Client] = None
        self._lock = threading.RLock()

    @property
    def connected(self) -> bool:
        sio = self._sio
        return sio is not None and sio.connected

    def connect(self) -> None:
        with self._lock:
            self.disconnect()
            sio = self._client_factory(reconnection=False)
            sio.on('connect', lambda: self._on_connect(sio), namespace=self.namespace)
            sio.on('disconnect', lambda *args: self._on_disconnect(sio), namespace=self.namespace)
            sio.on('gameData', lambda data: self._on_game_data(sio, data), namespace=self.namespace)
            sio.on('error', self._on_error, namespace=self.namespace)
            self._sio = sio
            try:
                sio.connect(self.endpoint, namespaces=[self.namespace], wait_timeout=self.timeout)
            except socketio.exceptions.ConnectionError as exc:
                self._sio = None
                raise TransportError(f"cannot reach {self.endpoint}: {exc}") from exc

    def disconnect(self) -> None:
        with self._lock:
            sio, self._sio = self._sio, None
            if sio is None:
                return
            try:
                sio.disconnect()
            except socketio.exceptions.SocketIOError as exc:
                logger.debug("Ignoring error while closing %s: %s", self.endpoint, exc)

    def send(self, state: GameState) -> bool:
        sio = self._sio
        if sio is None or not sio.connected:
            return False
        try:
            sio.emit('updateGameData', state.to_dict(), namespace=self.namespace)
        except socketio.exceptions.SocketIOError as exc:
            logger.warning("Emit to %s failed: %s", self.endpoint, exc)
            return False
        return True

    def _on_connect(self, sio):
        if sio is not self._sio:
            return
        logger.info("Connected to %s", self.endpoint)
        if self.on_status:
            self.on_status(True)

    def _on_disconnect(self, sio):
        # Our own disconnect() detaches the client first, so only real drops get here
        if sio is not self._sio:
            return
        logger.warning("Lost connection to %s", self.endpoint)
        if self.on_status:
            self.on_status(False)

    def _on_game_data(self, sio, data):
        if sio is not self._sio:
            logger.debug("Ignoring gameData from a replaced connection")
            return
        try:
            state = GameState.from_dict(data)
        except InvalidGameState as exc:
            logger.warning("Ignoring malformed gameData from %s: %s", self.endpoint, exc)
            return
        self._emit(state)

    def _on_error(self, data):
        logger.warning("Relay rejected update: %s", (data or {}).get('message'))
