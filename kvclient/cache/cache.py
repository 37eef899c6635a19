"""
Cache Operations Module

Binds a cache name to a transport and exposes one coroutine per remote
cache command. Each call builds a single command, sends it and returns
the server's result; queries run through a QueryCursor.
"""

import logging
from typing import Any, Iterable, List, Mapping, Union

from ..network.transport import Transport
from ..protocol.commands import Command, CommandName
from ..protocol.responses import Entry
from ..query.cursor import QueryCursor
from ..query.query import Query

logger = logging.getLogger(__name__)


class Cache:
    """
    Client view of one named remote cache.

    The cache keeps no local state between calls: there is no local
    copy of values and no retry. Transport errors are raised to the
    caller unchanged.

    Usage:
        cache = Cache(transport, "people")
        await cache.put("alice", 30)
        age = await cache.get("alice")

    Attributes:
        transport: Transport used for every command
        name: The remote cache name, sent with every command
    """

    def __init__(self, transport: Transport, name: str):
        self.transport = transport
        self.name = name

    async def get(self, key: Any) -> Any:
        """
        Retrieve the value for a key.

        Returns:
            The value, or None if the key is not present
        """
        return await self._key_command(CommandName.GET, key)

    async def put(self, key: Any, value: Any) -> Any:
        """Store a key/value pair."""
        return await self._key_value_command(CommandName.PUT, key, value)

    async def put_if_absent(self, key: Any, value: Any) -> Any:
        """
        Store a key/value pair only if the key has no mapping yet.

        Returns:
            True if the value was stored
        """
        return await self._key_value_command(CommandName.PUT_IF_ABSENT, key, value)

    async def remove(self, key: Any) -> Any:
        """Remove a key."""
        return await self._key_command(CommandName.REMOVE, key)

    async def get_and_remove(self, key: Any) -> Any:
        """Remove a key and return its previous value."""
        return await self._key_command(CommandName.GET_AND_REMOVE, key)

    async def remove_all(self, keys: Iterable[Any]) -> Any:
        """Remove several keys."""
        return await self._keys_command(CommandName.REMOVE_ALL, keys)

    async def put_all(self, entries: Union[Iterable[Entry], Mapping[Any, Any]]) -> Any:
        """
        Store several key/value pairs.

        Args:
            entries: Entry objects, or a mapping of key -> value
        """
        if isinstance(entries, Mapping):
            entries = [Entry(key, value) for key, value in entries.items()]

        command = self.create_command(CommandName.PUT_ALL)
        command.set_body({"entries": [entry.to_record() for entry in entries]})
        return await self.run_command(command)

    async def get_all(self, keys: Iterable[Any]) -> List[Entry]:
        """
        Retrieve several keys.

        Args:
            keys: Keys to look up

        Returns:
            One Entry per record the server returned

        Raises:
            ProtocolError: If the server returned a malformed record
        """
        records = await self._keys_command(CommandName.GET_ALL, keys)
        return [Entry.from_record(record) for record in records or []]

    async def contains_key(self, key: Any) -> bool:
        """Check whether the cache holds a mapping for a key."""
        return await self._key_command(CommandName.CONTAINS_KEY, key)

    async def contains_keys(self, keys: Iterable[Any]) -> bool:
        """Check whether the cache holds mappings for all keys."""
        return await self._keys_command(CommandName.CONTAINS_KEYS, keys)

    async def get_and_put(self, key: Any, value: Any) -> Any:
        """Store a key/value pair and return the previous value."""
        return await self._key_value_command(CommandName.GET_AND_PUT, key, value)

    async def get_and_put_if_absent(self, key: Any, value: Any) -> Any:
        """Store a key/value pair if absent; return the existing value."""
        return await self._key_value_command(CommandName.GET_AND_PUT_IF_ABSENT, key, value)

    async def query(self, qry: Query) -> QueryCursor:
        """
        Run a query, delivering pages through ``qry.page`` and the
        outcome through ``qry.end``.

        Errors are not raised; they arrive at ``qry.end(error)``.

        Returns:
            The finished cursor, for inspecting its final state
        """
        cursor = QueryCursor(self, qry)
        await cursor.run()
        return cursor

    def cursor(self, qry: Query) -> QueryCursor:
        """Create an unstarted cursor, e.g. to iterate ``cursor.pages()``."""
        return QueryCursor(self, qry)

    def create_command(self, name: Union[CommandName, str]) -> Command:
        """Build a command bound to this cache; ``cacheName`` is always the first parameter."""
        return Command.build(name).add_param("cacheName", self.name)

    async def run_command(self, command: Command) -> Any:
        """Seal a command and send it through the transport."""
        command.seal()
        logger.debug(f"Running {command.name} on cache {self.name}")
        return await self.transport.run_command(command)

    async def _key_command(self, name: CommandName, key: Any) -> Any:
        command = self.create_command(name).set_body({"key": key})
        return await self.run_command(command)

    async def _keys_command(self, name: CommandName, keys: Iterable[Any]) -> Any:
        command = self.create_command(name).set_body({"keys": list(keys)})
        return await self.run_command(command)

    async def _key_value_command(self, name: CommandName, key: Any, value: Any) -> Any:
        command = self.create_command(name).set_body({"key": key, "val": value})
        return await self.run_command(command)

    def __repr__(self) -> str:
        return f"Cache(name={self.name!r})"
