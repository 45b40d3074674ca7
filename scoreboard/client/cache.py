"""Durable local mirror of the game state.

A single SQLite row survives restarts on this device. Every local change
writes through here, and it is the read source of last resort when no
transport answers. Other processes sharing the file bump the row's revision,
which lets a running client notice writes it did not make.
"""

import json
import logging
import os
import threading
import time
from typing import Callable, List, Optional

from sqlalchemy import Column, Float, Integer, String, Text, create_engine
from sqlalchemy.orm import Session, declarative_base
from sqlalchemy.pool import StaticPool

from scoreboard.models import GameState, InvalidGameState

logger = logging.getLogger(__name__)

Base = declarative_base()

CACHE_KEY = 'gameData'


class CachedState(Base):
    __tablename__ = 'cached_state'
    key = Column(String(64), primary_key=True)
    payload = Column(Text, nullable=False)
    revision = Column(Integer, nullable=False, default=0)
    updated_at = Column(Float, nullable=False, default=time.time)


class LocalCache:
    def __init__(self, path: str):
        options = {'connect_args': {'check_same_thread': False}}
        if path == ':memory:':
            # One shared connection, otherwise each thread sees its own empty database
            url = 'sqlite://'
            options['poolclass'] = StaticPool
        else:
            os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
            url = f'sqlite:///{path}'
        self.path = path
        self._engine = create_engine(url, **options)
        Base.metadata.create_all(self._engine)
        self._listeners: List[Callable[[Optional[GameState]], None]] = []
        self._lock = threading.Lock()
        self._revision = 0

    def get(self) -> Optional[GameState]:
        """Return the cached state, or None on a miss or a corrupt entry."""
        with Session(self._engine) as session:
            row = session.get(CachedState, CACHE_KEY)
            if row is None:
                return None
            payload, revision = row.payload, row.revision
        try:
            state = GameState.from_dict(json.loads(payload))
        except (ValueError, InvalidGameState) as exc:
            logger.warning("Ignoring corrupt cache entry in %s: %s", self.path, exc)
            return None
        self._revision = revision
        return state

    def set(self, state: GameState) -> None:
        payload = json.dumps(state.to_dict())
        with self._lock, Session(self._engine) as session:
            row = session.get(CachedState, CACHE_KEY)
            if row is None:
                row = CachedState(key=CACHE_KEY, payload=payload, revision=self._revision + 1)
                session.add(row)
            else:
                row.payload = payload
                row.revision = row.revision + 1
            row.updated_at = time.time()
            session.commit()
            self._revision = row.revision
        self._notify(state)

    def clear(self) -> None:
        with self._lock, Session(self._engine) as session:
            row = session.get(CachedState, CACHE_KEY)
            if row is not None:
                session.delete(row)
                session.commit()
            self._revision = 0
        self._notify(None)

    def revision(self) -> int:
        """Revision currently on disk (0 when empty)."""
        with Session(self._engine) as session:
            row = session.get(CachedState, CACHE_KEY)
            return row.revision if row is not None else 0

    @property
    def seen_revision(self) -> int:
        """Last revision this instance wrote or read."""
        return self._revision

    def subscribe(self, listener: Callable[[Optional[GameState]], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, state: Optional[GameState]) -> None:
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("Cache listener failed")

    def close(self) -> None:
        self._engine.dispose()
