"""
Wire Codec Module

Encodes commands into request lines and decodes response lines.

Protocol Format:
    Request:  {"cmd": <name>, "params": {...}, "body": <json string|null>}\n
    Response: {"successStatus": <int>, "error": <str|null>, "response": <any>}\n

A successStatus of 0 means the command succeeded and ``response``
holds its result; any other value is a server-side failure described
by ``error``.
"""

import json
from typing import Any

from ..errors import ProtocolError, ServerError
from .commands import Command

SUCCESS_STATUS = 0


class WireCodec:
    """Line-oriented JSON codec for commands and responses."""

    def encode_command(self, command: Command) -> bytes:
        """
        Format a command for sending over the wire.

        Args:
            command: The command to format

        Returns:
            UTF-8 encoded request line, newline terminated

        Examples:
            >>> codec = WireCodec()
            >>> cmd = Command.build("get").add_param("cacheName", "c")
            >>> codec.encode_command(cmd)
            b'{"cmd": "get", "params": {"cacheName": "c"}, "body": null}\\n'
        """
        message = {
            "cmd": command.name,
            "params": command.params,
            "body": command.body,
        }
        return (json.dumps(message) + "\n").encode("utf-8")

    def decode_command(self, data: bytes) -> Command:
        """
        Parse a request line back into a Command.

        Used by servers and test doubles that speak this protocol.

        Raises:
            ProtocolError: If the line is not a well-formed request
        """
        message = self._load(data)
        name = message.get("cmd")
        params = message.get("params") or {}
        body = message.get("body")
        if not isinstance(name, str) or not isinstance(params, dict):
            raise ProtocolError(f"malformed request: {message!r}")

        command = Command.build(name)
        for key, value in params.items():
            command.add_param(key, value)
        command.body = body
        return command

    def encode_response(self, result: Any = None, error: str = None) -> bytes:
        """Format a success (``error`` is None) or failure response line."""
        message = {
            "successStatus": SUCCESS_STATUS if error is None else 1,
            "error": error,
            "response": result if error is None else None,
        }
        return (json.dumps(message) + "\n").encode("utf-8")

    def decode_response(self, data: bytes) -> Any:
        """
        Parse a response line and return the command's result.

        Args:
            data: Raw response line (may include trailing newline)

        Returns:
            The ``response`` field of a successful reply

        Raises:
            ServerError: If the server reported a failure
            ProtocolError: If the line is not a well-formed response
        """
        message = self._load(data)

        status = message.get("successStatus")
        if not isinstance(status, int) or isinstance(status, bool):
            raise ProtocolError(f"response has no success status: {message!r}")

        if status != SUCCESS_STATUS:
            raise ServerError(message.get("error") or "unknown server error", status=status)

        return message.get("response")

    def _load(self, data: bytes) -> dict:
        try:
            message = json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as exc:
            raise ProtocolError(f"undecodable message: {exc}") from exc

        if not isinstance(message, dict):
            raise ProtocolError(f"message is not an object: {message!r}")
        return message
