"""
TCP Transport Module

Sends each command over its own asyncio TCP connection using the
line-oriented JSON codec.
"""

import asyncio
import logging
from typing import Any

from ..config.settings import settings
from ..errors import CacheError, TransportError
from ..protocol.codec import WireCodec
from ..protocol.commands import Command
from .transport import Transport

logger = logging.getLogger(__name__)


class TcpTransport(Transport):
    """
    Transport that opens a TCP connection per command.

    Commands share no stream, so any number of them can be in flight
    at once.

    Usage:
        transport = TcpTransport(host='127.0.0.1', port=7171)
        result = await transport.run_command(command)

    Attributes:
        host: Server host
        port: Server port
        timeout: Seconds allowed for connecting and for reading the reply
    """

    def __init__(self, host: str = None, port: int = None, timeout: float = None):
        """
        Initialize the transport.

        Args:
            host: Server host (default from settings)
            port: Server port (default from settings)
            timeout: Round trip timeout in seconds (default from settings)
        """
        self.host = host if host is not None else settings.HOST
        self.port = port if port is not None else settings.PORT
        self.timeout = timeout if timeout is not None else settings.TIMEOUT
        self.codec = WireCodec()

    async def run_command(self, command: Command) -> Any:
        """
        Send a command to the server via TCP.

        Args:
            command: Command to send

        Returns:
            The decoded result of the command

        Raises:
            ServerError: If the server reported a failure
            ProtocolError: If the reply could not be decoded
            TransportError: On timeouts, refused or dropped connections
        """
        logger.debug(f"Sending {command.name} to {self.host}:{self.port}")

        try:
            reader, writer = await asyncio.wait_for(
                asyncio.open_connection(
                    self.host, self.port, limit=settings.READ_BUFFER_SIZE
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as exc:
            logger.error(f"Timeout connecting to {self.host}:{self.port}")
            raise TransportError("connection timeout") from exc
        except OSError as exc:
            logger.error(f"Error connecting to {self.host}:{self.port}: {exc}")
            raise TransportError(f"connection error: {exc}") from exc

        try:
            writer.write(self.codec.encode_command(command))
            await writer.drain()

            data = await asyncio.wait_for(reader.readline(), timeout=self.timeout)
            if not data:
                raise TransportError("empty response from server")

            return self.codec.decode_response(data)

        except asyncio.TimeoutError as exc:
            logger.error(f"Timeout waiting for {command.name} reply from {self.host}:{self.port}")
            raise TransportError("response timeout") from exc
        except CacheError as exc:
            logger.error(f"Command {command.name} failed: {exc}")
            raise
        except (OSError, ValueError) as exc:
            # ValueError: reply line longer than the stream limit
            logger.error(f"Error sending {command.name} to {self.host}:{self.port}: {exc}")
            raise TransportError(f"connection error: {exc}") from exc

        finally:
            writer.close()
            try:
                await writer.wait_closed()
            except OSError:
                pass
