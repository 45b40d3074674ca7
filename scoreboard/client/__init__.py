"""Client side of the scoreboard: the sync client, its transports and the local cache."""

from scoreboard.client.cache import LocalCache
from scoreboard.client.endpoint import endpoint_from_query
from scoreboard.client.sync import ConnectionStatus, SyncClient

__all__ = [
    'ConnectionStatus',
    'LocalCache',
    'SyncClient',
    'endpoint_from_query',
]
