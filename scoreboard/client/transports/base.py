"""Common interface for the ways a client can reach the shared game state."""

from abc import ABC, abstractmethod
from typing import Callable, List, Optional

from scoreboard.models import GameState

Listener = Callable[[GameState], None]


class TransportError(Exception):
    """A transport could not complete a read or write."""


class Transport(ABC):
    """One way of reaching the shared state.

    Push transports deliver remote changes to subscribers as they happen.
    Request/response transports answer ``fetch`` and accept ``send`` but
    never push; the sync client polls them instead.
    """

    name = 'transport'
    supports_push = False
    # Relay transports follow runtime endpoint changes; hosted stores do not
    follows_endpoint = False
    # Push transports report connection changes here
    on_status: Optional[Callable[[bool], None]] = None

    def __init__(self):
        self._listeners: List[Listener] = []

    @property
    def connected(self) -> bool:
        return True

    def connect(self) -> None:
        """Open the transport. Raises TransportError when unreachable."""

    def disconnect(self) -> None:
        """Close the transport; safe to call when already closed."""

    @abstractmethod
    def send(self, state: GameState) -> bool:
        """Write a full state. Returns False instead of raising on failure."""

    def fetch(self) -> Optional[GameState]:
        """Read the current state. Raises TransportError on failure."""
        return None

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, state: GameState) -> None:
        for listener in list(self._listeners):
            listener(state)
