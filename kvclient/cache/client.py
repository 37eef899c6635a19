"""
Client Facade

Entry point for applications: owns the transport and hands out Cache
objects bound to it.
"""

import logging
from typing import Dict

from ..network.tcp_transport import TcpTransport
from ..network.transport import Transport
from .cache import Cache

logger = logging.getLogger(__name__)


class KVClient:
    """
    Client for a KV-Cache server.

    Usage:
        client = KVClient(host='127.0.0.1', port=7171)
        people = client.cache("people")
        await people.put("alice", 30)

    Attributes:
        transport: Transport shared by all caches of this client
    """

    def __init__(
            self,
            transport: Transport = None,
            host: str = None,
            port: int = None,
            timeout: float = None,
    ):
        """
        Initialize the client.

        Args:
            transport: Transport to use; a TcpTransport is created when omitted
            host: Server host for the default transport
            port: Server port for the default transport
            timeout: Round trip timeout for the default transport
        """
        if transport is None:
            transport = TcpTransport(host=host, port=port, timeout=timeout)
        self.transport = transport
        self._caches: Dict[str, Cache] = {}

    def cache(self, name: str) -> Cache:
        """Return the Cache for ``name``."""
        if name not in self._caches:
            logger.debug(f"Binding cache {name}")
            self._caches[name] = Cache(self.transport, name)
        return self._caches[name]
