"""
KV-Cache Client: asyncio client for a remote key-value cache.

Point and batch cache operations plus paged SQL queries, sent as
commands over a pluggable transport.
"""

from .cache import Cache, Entry, KVClient
from .errors import (
    CacheError,
    CommandSealedError,
    ProtocolError,
    QueryValidationError,
    ServerError,
    TransportError,
)
from .query import QueryCursor, SqlFieldsQuery, SqlQuery

__version__ = "1.0.0"

__all__ = [
    "Cache",
    "CacheError",
    "CommandSealedError",
    "Entry",
    "KVClient",
    "ProtocolError",
    "QueryCursor",
    "QueryValidationError",
    "ServerError",
    "SqlFieldsQuery",
    "SqlQuery",
    "TransportError",
]
