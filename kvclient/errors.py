"""
Client Error Types

Every failure raised by the client derives from CacheError, so callers
can catch one type for "the cache operation did not succeed".
"""

from typing import Optional


class CacheError(Exception):
    """Base class for all client errors."""


class QueryValidationError(CacheError):
    """A query descriptor is malformed; raised before any round trip."""


class TransportError(CacheError):
    """The transport could not complete a command (network, framing)."""


class ServerError(TransportError):
    """
    The server received the command but reported a failure.

    Attributes:
        status: The server's non-zero success status
    """

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class ProtocolError(CacheError):
    """A response did not have the shape the command requires."""


class CommandSealedError(CacheError):
    """A command was modified after it had been submitted."""
