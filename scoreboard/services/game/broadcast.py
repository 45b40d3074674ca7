import logging
import threading
from typing import Any, Callable, Dict, Optional

from scoreboard.models import GameState
from .store import StateStore


class BroadcastHub:
    """Fans every accepted write out to the subscribed observers.

    ``deliver(observer, state)`` performs the actual send; an observer whose
    delivery raises is pruned and the remaining observers still get the
    state. With ``include_origin`` the writer receives the stored value too,
    so every replica converges on exactly what the store holds.
    """

    def __init__(
        self,
        store: StateStore,
        deliver: Callable[[Any, GameState], None],
        include_origin: bool = True,
        logger: Optional[logging.Logger] = None,
    ):
        self.store = store
        self.include_origin = include_origin
        self._deliver = deliver
        self._observers: Dict[Any, Any] = {}
        self._lock = threading.RLock()
        self._logger = logger or logging.getLogger(__name__)

    @property
    def observers(self) -> int:
        return len(self._observers)

    def subscribe(self, observer, bootstrap: bool = False) -> Any:
        """Register an observer; with ``bootstrap`` it is sent the current value first.

        The bootstrap delivery happens under the publish lock, so a concurrent
        write reaches the new observer after it, never before.
        """
        with self._lock:
            self._observers[observer] = observer
            if bootstrap:
                self._bootstrap(observer)
        return observer

    def _bootstrap(self, observer) -> None:
        state = self.store.read()
        self._deliver(observer, state)
        # A write may have landed while delivering from this same thread
        while self.store.read() is not state:
            state = self.store.read()
            self._deliver(observer, state)

    def unsubscribe(self, handle) -> None:
        with self._lock:
            self._observers.pop(handle, None)

    def publish(self, origin, state: GameState) -> GameState:
        # Store and fan-out under one lock so all observers see writes in store order
        with self._lock:
            stored = self.store.write(state)
            targets = [o for o in self._observers if self.include_origin or o != origin]
            for observer in targets:
                try:
                    self._deliver(observer, stored)
                except Exception as exc:
                    self._logger.warning(f"[publish] dropping observer={observer}: {exc}")
                    self._observers.pop(observer, None)
            self._logger.info(
                f"[publish] origin={origin} delivered={len(targets)} scores={stored.scores}"
            )
            return stored
