"""
Pytest Configuration and Fixtures

This module provides shared fixtures and test doubles for all tests.
"""

import asyncio
import socket
from collections import deque
from contextlib import closing
from typing import Any, AsyncGenerator, Dict, List

import pytest
import pytest_asyncio

from kvclient.cache.cache import Cache
from kvclient.errors import ServerError
from kvclient.network.tcp_transport import TcpTransport
from kvclient.network.transport import Transport
from kvclient.protocol.codec import WireCodec
from kvclient.protocol.commands import Command


def find_free_port() -> int:
    """Find a port with nothing listening on it."""
    with closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
        s.bind(('127.0.0.1', 0))
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        return s.getsockname()[1]


# ============================================================================
# Transport Doubles
# ============================================================================

class StubTransport(Transport):
    """
    In-memory transport that behaves like a small cache server.

    Every command is recorded in ``commands``. Keyed commands operate on
    ``store``; SQL fields queries page through ``rows``.
    """

    def __init__(self):
        self.store: Dict[Any, Any] = {}
        self.rows: List[Any] = []
        self.commands: List[Command] = []
        self._cursors: Dict[int, int] = {}
        self._next_query_id = 1

    async def run_command(self, command: Command) -> Any:
        self.commands.append(command)
        return self.execute(command)

    def names(self) -> List[str]:
        return [command.name for command in self.commands]

    def execute(self, command: Command) -> Any:
        body = command.json() or {}
        name = command.name
        store = self.store

        if name == "get":
            return store.get(body["key"])
        if name == "put":
            store[body["key"]] = body["val"]
            return True
        if name == "putifabsent":
            if body["key"] in store:
                return False
            store[body["key"]] = body["val"]
            return True
        if name == "rmv":
            return store.pop(body["key"], None) is not None
        if name == "getandrmv":
            return store.pop(body["key"], None)
        if name == "rmvall":
            for key in body["keys"]:
                store.pop(key, None)
            return True
        if name == "putall":
            for record in body["entries"]:
                store[record["key"]] = record["value"]
            return True
        if name == "getall":
            return [{"key": key, "value": store[key]} for key in body["keys"] if key in store]
        if name == "containskey":
            return body["key"] in store
        if name == "containskeys":
            return all(key in store for key in body["keys"])
        if name == "getandput":
            previous = store.get(body["key"])
            store[body["key"]] = body["val"]
            return previous
        if name == "getandputifabsent":
            previous = store.get(body["key"])
            if previous is None:
                store[body["key"]] = body["val"]
            return previous
        if name in ("qryexecute", "qryfieldsexecute"):
            query_id = self._next_query_id
            self._next_query_id += 1
            self._cursors[query_id] = 0
            return self._next_page(query_id, int(command.params["psz"]))
        if name == "qryfetch":
            query_id = int(command.params["qryId"])
            if query_id not in self._cursors:
                raise ServerError(f"unknown query id {query_id}")
            return self._next_page(query_id, int(command.params["psz"]))

        raise ServerError(f"unknown command: {name}")

    def _next_page(self, query_id: int, page_size: int) -> Dict[str, Any]:
        start = self._cursors[query_id]
        items = self.rows[start:start + page_size]
        end = start + len(items)
        last = end >= len(self.rows)

        if last:
            del self._cursors[query_id]
            return {"items": items, "last": True}

        self._cursors[query_id] = end
        return {"items": items, "last": False, "queryId": query_id}


class ScriptedTransport(Transport):
    """
    Transport that replays queued replies in order.

    Each reply is either a result to return or an exception to raise.
    """

    def __init__(self, *replies: Any):
        self.replies = deque(replies)
        self.commands: List[Command] = []

    async def run_command(self, command: Command) -> Any:
        self.commands.append(command)
        if not self.replies:
            raise AssertionError(f"unexpected command: {command.name}")
        reply = self.replies.popleft()
        if isinstance(reply, Exception):
            raise reply
        return reply

    def names(self) -> List[str]:
        return [command.name for command in self.commands]


class QueryRecorder:
    """Collects the page and end callbacks of a query descriptor."""

    def __init__(self):
        self.pages: List[List[Any]] = []
        self.ends: List[Any] = []

    def attach(self, qry):
        return qry.on("page", self.pages.append).on("end", self.ends.append)


# ============================================================================
# Cache Fixtures
# ============================================================================

@pytest.fixture
def stub_transport() -> StubTransport:
    """Create an empty in-memory stub transport."""
    return StubTransport()


@pytest.fixture
def cache(stub_transport: StubTransport) -> Cache:
    """Create a Cache named 'people' on the stub transport."""
    return Cache(stub_transport, "people")


@pytest.fixture
def scripted_cache():
    """
    Factory fixture for a Cache on a ScriptedTransport.

    Usage:
        def test_something(scripted_cache):
            cache, transport = scripted_cache({"items": [], "last": True})
    """
    def factory(*replies: Any):
        transport = ScriptedTransport(*replies)
        return Cache(transport, "people"), transport
    return factory


@pytest.fixture
def recorder() -> QueryRecorder:
    """Create a recorder for query callbacks."""
    return QueryRecorder()


@pytest.fixture
def codec() -> WireCodec:
    """Create a WireCodec instance."""
    return WireCodec()


# ============================================================================
# Server Fixtures
# ============================================================================

@pytest.fixture
def free_port() -> int:
    """Get a port with no server behind it."""
    return find_free_port()


@pytest_asyncio.fixture
async def server(stub_transport: StubTransport) -> AsyncGenerator[asyncio.Server, None]:
    """
    Start a TCP server that answers with the stub transport's state.

    The server speaks the wire codec, one request line and one reply
    line per connection round trip.
    """
    codec = WireCodec()

    async def handle_client(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        try:
            while True:
                data = await reader.readline()
                if not data:
                    break

                command = codec.decode_command(data)
                stub_transport.commands.append(command)
                try:
                    reply = codec.encode_response(stub_transport.execute(command))
                except ServerError as exc:
                    reply = codec.encode_response(error=str(exc))

                writer.write(reply)
                await writer.drain()
        finally:
            writer.close()

    srv = await asyncio.start_server(handle_client, '127.0.0.1', 0)

    yield srv

    srv.close()
    await srv.wait_closed()


@pytest.fixture
def server_port(server: asyncio.Server) -> int:
    """Port the test server listens on."""
    return server.sockets[0].getsockname()[1]


@pytest.fixture
def tcp_transport(server_port: int) -> TcpTransport:
    """Create a TcpTransport connected to the test server."""
    return TcpTransport(host='127.0.0.1', port=server_port, timeout=2.0)


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
