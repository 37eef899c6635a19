"""Protocol module for KV-Cache client."""

from .codec import WireCodec
from .commands import Command, CommandName
from .responses import Entry, QueryPage

__all__ = [
    "Command",
    "CommandName",
    "Entry",
    "QueryPage",
    "WireCodec",
]
