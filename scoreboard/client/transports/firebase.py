import logging
from typing import Optional

import requests

from scoreboard.models import GameState
from .base import Transport, TransportError

logger = logging.getLogger(__name__)


class FirebaseTransport(Transport):
    """Hosted real-time store, reached through the Firebase Realtime Database REST API.

    The whole game lives under the ``gameData`` node, written with PUT so
    each write replaces the document like the relay does. Used when the
    relay itself is unreachable.
    """

    name = 'firebase'

    def __init__(
        self,
        database_url: str,
        auth: str = '',
        node: str = 'gameData',
        timeout: float = 3.0,
        session: Optional[requests.Session] = None,
    ):
        super().__init__()
        self.database_url = database_url
        self.auth = auth
        self.node = node
        self.timeout = timeout
        self._session = session or requests.Session()

    @property
    def url(self) -> str:
        return f"{self.database_url.rstrip('/')}/{self.node}.json"

    def _params(self):
        return {'auth': self.auth} if self.auth else None

    def fetch(self) -> Optional[GameState]:
        try:
            response = self._session.get(self.url, params=self._params(), timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as exc:
            raise TransportError(f"GET {self.url} failed: {exc}") from exc
        # An empty node reads back as null
        if data is None:
            return None
        try:
            return GameState.from_dict(data)
        except ValueError as exc:
            raise TransportError(f"{self.url} holds malformed game data: {exc}") from exc

    def send(self, state: GameState) -> bool:
        try:
            response = self._session.put(
                self.url, json=state.to_dict(), params=self._params(), timeout=self.timeout
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            logger.warning("PUT %s failed: %s", self.url, exc)
            return False
        return True

    def disconnect(self) -> None:
        self._session.close()
