"""
Protocol Command Definitions

This module defines the command that the client sends to the cache
server: a command name, ordered string parameters and an optional
JSON body.
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from ..errors import CommandSealedError


class CommandName(str, Enum):
    """Enumeration of command names understood by the server."""
    GET = "get"
    PUT = "put"
    PUT_IF_ABSENT = "putifabsent"
    REMOVE = "rmv"
    GET_AND_REMOVE = "getandrmv"
    REMOVE_ALL = "rmvall"
    PUT_ALL = "putall"
    GET_ALL = "getall"
    CONTAINS_KEY = "containskey"
    CONTAINS_KEYS = "containskeys"
    GET_AND_PUT = "getandput"
    GET_AND_PUT_IF_ABSENT = "getandputifabsent"
    QUERY_EXECUTE = "qryexecute"
    QUERY_FIELDS_EXECUTE = "qryfieldsexecute"
    QUERY_FETCH = "qryfetch"


@dataclass
class Command:
    """
    Represents one remote operation.

    Commands are built, submitted once and then discarded. Parameters
    are sent in the order they were added, since some server commands
    read them positionally.

    Attributes:
        name: The command name (see CommandName)
        params: Ordered parameter name -> string value mapping
        body: JSON-encoded request body, or None
    """
    name: str
    params: Dict[str, str] = field(default_factory=dict)
    body: Optional[str] = None
    _sealed: bool = field(default=False, init=False, repr=False, compare=False)

    def __post_init__(self):
        """Normalise the name so CommandName members and plain strings match."""
        if isinstance(self.name, CommandName):
            self.name = self.name.value

    @classmethod
    def build(cls, name: str) -> "Command":
        """Create an empty command."""
        return cls(name=name)

    def add_param(self, name: str, value: Any) -> "Command":
        """
        Append a parameter.

        Args:
            name: Parameter name
            value: Parameter value, converted to its string form

        Returns:
            This command, for chaining
        """
        self._check_open()
        if isinstance(value, bool):
            value = "true" if value else "false"
        self.params[name] = str(value)
        return self

    def set_body(self, payload: Any) -> "Command":
        """
        Set the request body to the JSON encoding of ``payload``.

        Returns:
            This command, for chaining
        """
        self._check_open()
        self.body = json.dumps(payload)
        return self

    def json(self) -> Any:
        """Decode the body, or return None if there is none."""
        if self.body is None:
            return None
        return json.loads(self.body)

    def seal(self) -> "Command":
        """Mark the command as submitted; later changes are rejected."""
        self._sealed = True
        return self

    @property
    def sealed(self) -> bool:
        return self._sealed

    def _check_open(self) -> None:
        if self._sealed:
            raise CommandSealedError(f"command '{self.name}' was already submitted")
