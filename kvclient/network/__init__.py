"""Network module for KV-Cache client."""

from .tcp_transport import TcpTransport
from .transport import Transport

__all__ = ["TcpTransport", "Transport"]
