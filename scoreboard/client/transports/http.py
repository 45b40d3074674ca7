import logging
from typing import Optional

import requests

from scoreboard.models import GameState
from .base import Transport, TransportError

logger = logging.getLogger(__name__)


class HttpTransport(Transport):
    """Request/response access to the relay's ``/api/game`` endpoint."""

    name = 'http'
    follows_endpoint = True

    def __init__(self, endpoint: str, timeout: float = 3.0, session: Optional[requests.Session] = None):
        super().__init__()
        self.endpoint = endpoint
        self.timeout = timeout
        self._session = session or requests.Session()

    @property
    def url(self) -> str:
        return f"{self.endpoint.rstrip('/')}/api/game"

    def fetch(self) -> GameState:
        try:
            response = self._session.get(self.url, timeout=self.timeout)
            response.raise_for_status()
            return GameState.from_dict(response.json())
        except (requests.RequestException, ValueError) as exc:
            raise TransportError(f"GET {self.url} failed: {exc}") from exc

    def send(self, state: GameState) -> bool:
        try:
            response = self._session.post(self.url, json=state.to_dict(), timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            logger.warning("POST %s failed: %s", self.url, exc)
            return False
        return True

    def disconnect(self) -> None:
        self._session.close()
