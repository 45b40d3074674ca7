"""Game state services: the authoritative store, broadcast fan-out and the
pure mutators applied by the control panel.

Nothing here knows about Flask or Socket.IO; the relay's HTTP routes and
socket handlers wire these together.
"""

from .store import StateStore
from .broadcast import BroadcastHub

__all__ = ['StateStore', 'BroadcastHub']
