import threading

from scoreboard.models import GameState


class StateStore:
    """Holds the single authoritative GameState for the lifetime of the relay.

    Writes replace the whole document; the last write to complete wins. Only
    the shape is checked (by GameState itself), domain rules belong to the
    callers.
    """

    def __init__(self, initial: GameState = None):
        self._state = initial or GameState()
        self._lock = threading.Lock()

    def read(self) -> GameState:
        return self._state

    def write(self, new_state: GameState) -> GameState:
        if not isinstance(new_state, GameState):
            raise TypeError('StateStore only stores GameState values')
        with self._lock:
            self._state = new_state
            return self._state
