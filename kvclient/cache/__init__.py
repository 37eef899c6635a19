"""Cache module for KV-Cache client."""

from ..protocol.responses import Entry
from .cache import Cache
from .client import KVClient

__all__ = ["Cache", "Entry", "KVClient"]
