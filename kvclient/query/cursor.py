"""
Query Cursor Module

Drives one query invocation through the server's paging protocol:

    IDLE -> EXECUTING -> (PAGING)* -> DONE
                 \\           \\
                  +-> ERROR    +-> ERROR

The execute command returns the first page. While the server reports
``last = false`` the cursor sends ``qryfetch`` with the server's query
id until a page with ``last = true`` arrives. The server owns the
cursor position; the client keeps no row counts or offsets.
"""

import logging
from enum import Enum, auto
from typing import TYPE_CHECKING, Any, AsyncIterator, List, Optional

from ..errors import QueryValidationError
from ..protocol.commands import Command, CommandName
from ..protocol.responses import QueryPage
from .query import Query, QueryKind

if TYPE_CHECKING:
    from ..cache.cache import Cache

logger = logging.getLogger(__name__)


class CursorState(Enum):
    """Enumeration of cursor states."""
    IDLE = auto()
    EXECUTING = auto()
    PAGING = auto()
    DONE = auto()
    ERROR = auto()


class QueryCursor:
    """
    Paging state machine for a single query invocation.

    Pages are requested strictly one after another: the fetch for the
    next page is only built once the previous page has been handed to
    the consumer. A cursor runs once; start a new one to rerun a query.

    Usage:
        cursor = QueryCursor(cache, qry)
        async for rows in cursor.pages():
            ...

    Attributes:
        cache: Cache the query runs against
        query: The query descriptor
        state: Current CursorState
        query_id: Server cursor id, None until a non-final page arrives
        pages_delivered: Number of pages handed to the consumer
        error: The error that moved the cursor to ERROR, if any
    """

    def __init__(self, cache: "Cache", query: Query):
        self.cache = cache
        self.query = query
        self.state = CursorState.IDLE
        self.query_id: Optional[Any] = None
        self.pages_delivered = 0
        self.error: Optional[Exception] = None

    @property
    def exhausted(self) -> bool:
        """True once the server has reported the last page."""
        return self.state == CursorState.DONE

    async def run(self) -> None:
        """
        Run the query, delivering results through the descriptor.

        Each page goes to ``query.page(rows)``; afterwards
        ``query.end(None)`` is called, or ``query.end(error)`` on the
        first failure. Errors are reported only through ``end``,
        including ones raised by the transport or by the page handler.

        Raises:
            RuntimeError: If the cursor has already been started
        """
        self._check_idle()

        pages = self.pages()
        try:
            async for rows in pages:
                self.query.page(rows)
        except Exception as exc:
            if self.state != CursorState.ERROR:
                self._fail(exc)
            self.query.end(exc)
        else:
            self.query.end(None)
        finally:
            await pages.aclose()

    async def pages(self) -> AsyncIterator[List[Any]]:
        """
        Yield each page of rows until the server reports the last one.

        Raises:
            QueryValidationError: If the descriptor is invalid; nothing is sent
            CacheError: Any transport or protocol failure, after which the
                cursor is in the ERROR state
            Exception: Whatever else the transport raises, also leaving
                the cursor in the ERROR state
            RuntimeError: If the cursor has already been started
        """
        self._check_idle()

        command = self._start()

        while True:
            try:
                result = await self.cache.run_command(command)
                page = QueryPage.from_result(result)
            except Exception as exc:
                self._fail(exc)
                raise

            self._advance(page)
            yield page.items

            if self.state == CursorState.DONE:
                return
            command = self._fetch_command()

    def _check_idle(self) -> None:
        if self.state != CursorState.IDLE:
            raise RuntimeError(f"query cursor already started (state {self.state.name})")

    def _start(self) -> Command:
        """IDLE -> EXECUTING: validate the descriptor and build the execute command."""
        qry = self.query

        if qry.kind == QueryKind.SQL:
            if qry.return_type is None:
                exc = QueryValidationError("No type for sql query.")
                self._fail(exc)
                raise exc
            command = self._query_command(CommandName.QUERY_EXECUTE)
            command.add_param("type", qry.return_type)
        else:
            command = self._query_command(CommandName.QUERY_FIELDS_EXECUTE)

        command.set_body({"arg": list(qry.arguments)})

        self.state = CursorState.EXECUTING
        logger.debug(f"Executing {qry.kind.value} query on cache {self.cache.name}: {qry.text}")
        return command

    def _advance(self, page: QueryPage) -> None:
        """EXECUTING|PAGING -> PAGING|DONE for a successfully decoded page."""
        if self.state not in (CursorState.EXECUTING, CursorState.PAGING):
            raise RuntimeError(f"unexpected page in state {self.state.name}")

        self.pages_delivered += 1

        if page.last:
            self.state = CursorState.DONE
            logger.debug(f"Query finished after {self.pages_delivered} page(s)")
        else:
            self.query_id = page.query_id
            self.state = CursorState.PAGING
            logger.debug(f"Query page {self.pages_delivered} received, cursor {self.query_id}")

    def _fail(self, exc: Exception) -> None:
        """Any state -> ERROR."""
        self.error = exc
        self.state = CursorState.ERROR
        logger.debug(f"Query failed: {exc}")

    def _query_command(self, name: CommandName) -> Command:
        command = self.cache.create_command(name)
        command.add_param("qry", self.query.text)
        return command.add_param("psz", self.query.page_size)

    def _fetch_command(self) -> Command:
        command = self.cache.create_command(CommandName.QUERY_FETCH)
        return command.add_param("qryId", self.query_id).add_param("psz", self.query.page_size)
