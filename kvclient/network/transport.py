"""
Transport Interface

The cache layer never talks to the network itself. It hands each
Command to a Transport, which delivers exactly one outcome: the decoded
result, or a raised TransportError.
"""

from abc import ABC, abstractmethod
from typing import Any

from ..protocol.commands import Command


class Transport(ABC):
    """
    Sends commands to a cache server.

    Implementations must allow any number of commands to be outstanding
    at once; the client issues them from independent coroutines and
    holds no lock around dispatch.
    """

    @abstractmethod
    async def run_command(self, command: Command) -> Any:
        """
        Send a command and wait for its result.

        Args:
            command: The command to send

        Returns:
            The server's decoded result for the command

        Raises:
            TransportError: If the command could not be completed
        """
