"""
Scoreboard sync client.

Keeps one local replica of the game state consistent with the relay while
the UI mutates it. Local changes apply immediately and are written through
to the local cache; a background worker coalesces them into at most one
outstanding network write. Remote changes arrive over the push channel, or
by polling the request/response transports while the push channel is down.
"""

from __future__ import annotations

import logging
import threading
import time
from enum import Enum
from typing import Callable, Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from scoreboard.config import ClientConfig
from scoreboard.models import GameState
from scoreboard.client.cache import LocalCache
from scoreboard.client.transports import (
    FirebaseTransport,
    HttpTransport,
    SocketIOTransport,
    Transport,
    TransportError,
)

logger = logging.getLogger(__name__)

StateListener = Callable[[GameState], None]


def _register(listeners: list, listener) -> Callable[[], None]:
    listeners.append(listener)

    def unsubscribe():
        if listener in listeners:
            listeners.remove(listener)

    return unsubscribe


class ConnectionStatus(Enum):
    CONNECTED = 'connected'
    OFFLINE = 'offline'


class SyncClient:
    """Owns a local GameState replica and keeps it in step with the relay.

    Args:
        cache: Durable local mirror, written on every change.
        push: Push transport (Socket.IO to the relay), optional.
        transports: Request/response transports in priority order, used for
            reads, for redundant writes and for polling while offline.
        drain_interval: Seconds between queue-drain ticks.
        poll_interval: Seconds between polls while the push channel is down.
        reconnect_attempts: Attempts per window before the long cooldown.
        reconnect_delay: Base delay; attempt ``n`` waits ``n * reconnect_delay``.
        reconnect_cooldown: Pause after a window of failed attempts.
    """

    def __init__(
        self,
        cache: LocalCache,
        push: Optional[Transport] = None,
        transports: Iterable[Transport] = (),
        *,
        endpoint: Optional[str] = None,
        drain_interval: float = 0.05,
        poll_interval: float = 2.0,
        reconnect_attempts: int = 5,
        reconnect_delay: float = 1.0,
        reconnect_cooldown: float = 10.0,
    ) -> None:
        self.cache = cache
        self.push = push
        self.transports: List[Transport] = list(transports)
        self.endpoint = endpoint
        self.drain_interval = drain_interval
        self.poll_interval = poll_interval
        self.max_reconnect_attempts = reconnect_attempts
        self.reconnect_delay = reconnect_delay
        self.reconnect_cooldown = reconnect_cooldown
        self.reconnect_attempts = 0

        self._state = GameState()
        self._pending: Optional[GameState] = None
        self._in_flight = False
        self._status = ConnectionStatus.OFFLINE
        self._lock = threading.Lock()
        self._connect_lock = threading.Lock()
        self._wake = threading.Event()
        self._stop = threading.Event()
        self._worker: Optional[threading.Thread] = None
        self._reconnector: Optional[threading.Thread] = None
        self._reconnect_cancel = threading.Event()
        self._listeners: List[StateListener] = []
        self._status_listeners: List[Callable[[ConnectionStatus], None]] = []

        if push is not None:
            if not push.supports_push:
                raise ValueError(f'{push.name} cannot be used as the push channel')
            push.on_status = self._on_push_status
            push.subscribe(self.on_remote_update)

    @classmethod
    def from_config(
        cls,
        config=ClientConfig,
        endpoint: Optional[str] = None,
        cache: Optional[LocalCache] = None,
    ) -> 'SyncClient':
        """Build a client with the standard chain: Socket.IO, relay HTTP, then Firebase."""
        endpoint = endpoint or config.SERVER_URL
        timeout = config.HTTP_TIMEOUT_SEC
        transports: List[Transport] = [HttpTransport(endpoint, timeout=timeout)]
        if config.FIREBASE_DATABASE_URL:
            transports.append(
                FirebaseTransport(config.FIREBASE_DATABASE_URL, auth=config.FIREBASE_AUTH, timeout=timeout)
            )
        return cls(
            cache or LocalCache(config.CACHE_PATH),
            SocketIOTransport(endpoint, namespace=config.SOCKETIO_NAMESPACE, timeout=timeout),
            transports,
            endpoint=endpoint,
            drain_interval=config.DRAIN_INTERVAL_MS / 1000.0,
            poll_interval=config.POLL_INTERVAL_SEC,
            reconnect_attempts=config.RECONNECT_MAX_ATTEMPTS,
            reconnect_delay=config.RECONNECT_DELAY_SEC,
            reconnect_cooldown=config.RECONNECT_COOLDOWN_SEC,
        )

    # -- Collaborator contract ---------------------------------------------

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def connection_status(self) -> ConnectionStatus:
        return self._status

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a state observer. Returns a function that removes it."""
        return _register(self._listeners, listener)

    def subscribe_status(self, listener: Callable[[ConnectionStatus], None]) -> Callable[[], None]:
        return _register(self._status_listeners, listener)

    def start(self) -> 'SyncClient':
        """Load the initial state, open the push channel and start the worker."""
        self._stop.clear()
        self.load_initial()
        if self.push is not None and not self._connect_push():
            self._start_reconnect()
        self._worker = threading.Thread(target=self._run, daemon=True, name='scoreboard-sync')
        self._worker.start()
        return self

    def stop(self) -> None:
        """Stop background work and close every transport."""
        self._stop.set()
        self._reconnect_cancel.set()
        self._wake.set()
        for thread in (self._worker, self._reconnector):
            if thread is not None and thread.is_alive() and thread is not threading.current_thread():
                thread.join(timeout=5)
        self._worker = None
        self._reconnector = None
        for transport in self._all_transports():
            transport.disconnect()
        self._set_status(ConnectionStatus.OFFLINE)

    def __enter__(self) -> 'SyncClient':
        return self.start()

    def __exit__(self, *exc) -> None:
        self.stop()

    # -- Reads -------------------------------------------------------------

    def load_initial(self) -> GameState:
        """Populate the replica: relay first, then other stores, then the cache.

        Failing everywhere is the normal cold start and leaves the default state.
        """
        state = self._fetch_first()
        if state is not None:
            self.on_remote_update(state)
            return state
        try:
            cached = self.cache.get()
        except SQLAlchemyError:
            logger.exception("Reading the local cache failed")
            cached = None
        if cached is not None:
            logger.info("All transports unreachable, using cached state")
            self._replace(cached)
            return cached
        logger.info("No reachable transport and no cached state, starting from defaults")
        return self._state

    def poll(self) -> bool:
        """Read the request/response transports once; apply the value if it changed."""
        state = self._fetch_first()
        if state is None or state == self._state or self._pending is not None:
            return False
        self.on_remote_update(state)
        return True

    def _fetch_first(self) -> Optional[GameState]:
        for transport in self.transports:
            try:
                state = transport.fetch()
            except TransportError as exc:
                logger.warning("Read via %s failed: %s", transport.name, exc)
                continue
            if state is not None:
                return state
        return None

    # -- Writes ------------------------------------------------------------

    def apply_local_change(self, mutator: Callable[[GameState], GameState]) -> GameState:
        """Apply a mutation optimistically; never waits on the network.

        Errors raised by ``mutator`` propagate and leave the replica unchanged.
        """
        with self._lock:
            new_state = mutator(self._state)
            if not isinstance(new_state, GameState):
                raise TypeError('mutator must return a GameState')
            self._state = new_state
            # Replica and cache change together so a remote update cannot interleave
            self._write_cache(new_state)
        self.enqueue_for_sync(new_state)
        self._notify(new_state)
        return new_state

    def enqueue_for_sync(self, state: GameState) -> None:
        """Replace any unsent update with ``state``; intermediate values are dropped."""
        with self._lock:
            self._pending = state
        self._wake.set()

    def drain_queue(self) -> bool:
        """Send the pending update if there is one and nothing is in flight.

        Returns True when at least one transport accepted the write.
        """
        with self._lock:
            if self._pending is None or self._in_flight:
                return False
            state = self._pending
            self._in_flight = True
        try:
            return self._send(state)
        finally:
            with self._lock:
                self._in_flight = False
                # A newer local change may have replaced the slot meanwhile
                if self._pending is state:
                    self._pending = None

    def _send(self, state: GameState) -> bool:
        pushed = False
        if self.push is not None and self.push.connected:
            pushed = self.push.send(state)
        written = False
        for transport in self.transports:
            if transport.send(state):
                written = True
                break
        if not (pushed or written):
            logger.warning("No transport accepted the update; keeping it local only")
        return pushed or written

    # -- Remote updates ----------------------------------------------------

    def on_remote_update(self, state: GameState) -> None:
        """Take a remote state as-is (last write wins) and tell the observers."""
        self._replace(state, persist=True)

    def _replace(self, state: GameState, persist: bool = False) -> None:
        with self._lock:
            self._state = state
            if persist:
                self._write_cache(state)
        self._notify(state)

    def _check_cache(self) -> None:
        """Pick up a cache write made by another process on this device."""
        try:
            revision = self.cache.revision()
            if not revision or revision == self.cache.seen_revision:
                return
            state = self.cache.get()
        except SQLAlchemyError:
            logger.exception("Reading the local cache failed")
            return
        if state is not None and state != self._state:
            logger.info("Local cache changed outside this client, applying it")
            self._replace(state)

    def _write_cache(self, state: GameState) -> None:
        try:
            self.cache.set(state)
        except SQLAlchemyError:
            logger.exception("Writing the local cache failed")

    # -- Connection management ---------------------------------------------

    def set_endpoint(self, endpoint: str) -> None:
        """Point the relay transports at another host and resynchronize."""
        logger.info("Switching relay endpoint to %s", endpoint)
        live = self.push is not None and (self.push.connected or self._worker is not None)
        # A retry loop still aimed at the old host must not race the new connection
        self._cancel_reconnect()
        with self._connect_lock:
            self.endpoint = endpoint
            if self.push is not None:
                self.push.disconnect()
            self._set_status(ConnectionStatus.OFFLINE)
            for transport in self._all_transports():
                if transport.follows_endpoint:
                    transport.endpoint = endpoint
        if live:
            if not self._connect_push():
                self._start_reconnect()
        self.load_initial()

    def _all_transports(self) -> List[Transport]:
        return ([self.push] if self.push is not None else []) + self.transports

    def _connect_push(self) -> bool:
        with self._connect_lock:
            try:
                self.push.connect()
            except TransportError as exc:
                logger.warning("Push channel unavailable: %s", exc)
                self._set_status(ConnectionStatus.OFFLINE)
                return False
            self.reconnect_attempts = 0
            self._set_status(ConnectionStatus.CONNECTED)
            return True

    def _on_push_status(self, up: bool) -> None:
        if up:
            self._set_status(ConnectionStatus.CONNECTED)
            return
        self._set_status(ConnectionStatus.OFFLINE)
        if not self._stop.is_set():
            self._start_reconnect()

    def _start_reconnect(self) -> None:
        with self._lock:
            if self._reconnector is not None and self._reconnector.is_alive():
                return
            self._reconnect_cancel = cancel = threading.Event()
            self._reconnector = threading.Thread(
                target=self._reconnect_loop, args=(cancel,), daemon=True, name='scoreboard-reconnect'
            )
            self._reconnector.start()

    def _cancel_reconnect(self) -> None:
        with self._lock:
            thread, self._reconnector = self._reconnector, None
            self._reconnect_cancel.set()
        if thread is not None and thread.is_alive() and thread is not threading.current_thread():
            thread.join(timeout=5)

    def _reconnect_loop(self, cancel: threading.Event) -> None:
        """Retry the push channel until it is back: short backoff, then a long cooldown."""
        while not (self._stop.is_set() or cancel.is_set()):
            try:
                if self.push.connected or self.reconnect_once():
                    return
            except Exception:
                logger.exception("Reconnect attempt %d failed unexpectedly", self.reconnect_attempts)
            if self.reconnect_attempts >= self.max_reconnect_attempts:
                logger.warning(
                    "Relay unreachable after %d attempts, cooling down for %.0fs",
                    self.reconnect_attempts,
                    self.reconnect_cooldown,
                )
                cancel.wait(self.reconnect_cooldown)
                self.reconnect_attempts = 0
            else:
                cancel.wait(self.reconnect_delay * self.reconnect_attempts)

    def reconnect_once(self) -> bool:
        """One attempt to reopen the push channel, resyncing on success."""
        self.reconnect_attempts += 1
        logger.info("Reconnect attempt %d to %s", self.reconnect_attempts, self.endpoint)
        if not self._connect_push():
            return False
        # Messages were missed while down; trust a fresh read over the channel
        self.resync()
        return True

    def resync(self) -> bool:
        """Replace the replica with a fresh request/response read."""
        state = self._fetch_first()
        if state is None:
            return False
        self.on_remote_update(state)
        return True

    def _set_status(self, status: ConnectionStatus) -> None:
        if status == self._status:
            return
        self._status = status
        logger.info("Connection status: %s", status.value)
        for listener in list(self._status_listeners):
            try:
                listener(status)
            except Exception:
                logger.exception("Status listener failed")

    def _notify(self, state: GameState) -> None:
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("State listener failed")

    # -- Worker ------------------------------------------------------------

    def _run(self) -> None:
        last_poll = time.monotonic()
        while not self._stop.is_set():
            self._wake.wait(self.drain_interval)
            self._wake.clear()
            if self._stop.is_set():
                break
            try:
                self.drain_queue()
                self._check_cache()
                push_down = self.push is None or not self.push.connected
                if push_down and time.monotonic() - last_poll >= self.poll_interval:
                    last_poll = time.monotonic()
                    self.poll()
            except Exception:
                logger.exception("Sync worker tick failed")
