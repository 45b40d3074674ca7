"""Transport strategies the sync client composes into its fallback chain."""

from .base import Transport, TransportError
from .firebase import FirebaseTransport
from .http import HttpTransport
from .push import SocketIOTransport

__all__ = [
    'FirebaseTransport',
    'HttpTransport',
    'SocketIOTransport',
    'Transport',
    'TransportError',
]
