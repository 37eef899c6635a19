"""
Query Descriptors

A query descriptor says what to run (text, arguments, page size and,
for SQL queries, the value type) and is the only channel through which
results reach the consumer: ``page(rows)`` once per page, then
``end(error)`` exactly once.
"""

from enum import Enum
from typing import Any, Callable, Iterable, List, Optional, Tuple

from ..config.settings import settings

PageCallback = Callable[[List[Any]], None]
EndCallback = Callable[[Optional[Exception]], None]


class QueryKind(Enum):
    """Enumeration of query kinds."""
    SQL = "Sql"
    SQL_FIELDS = "SqlFields"


class Query:
    """
    Base query descriptor.

    Usage:
        qry = SqlFieldsQuery("select name from Person where age > ?", [30])
        qry.on("page", rows.extend).on("end", on_done)
        await cache.query(qry)
    """

    kind: QueryKind

    def __init__(self, text: str, arguments: Iterable[Any] = (), page_size: int = None):
        """
        Initialize the descriptor.

        Args:
            text: Query text
            arguments: Positional query arguments
            page_size: Rows per page (default from settings)

        Raises:
            ValueError: If page_size is not a positive integer
        """
        page_size = page_size if page_size is not None else settings.DEFAULT_PAGE_SIZE
        if isinstance(page_size, bool) or not isinstance(page_size, int) or page_size <= 0:
            raise ValueError("page_size must be a positive integer")

        self._text = text
        self._arguments: Tuple[Any, ...] = tuple(arguments)
        self._page_size = page_size
        self._on_page: Optional[PageCallback] = None
        self._on_end: Optional[EndCallback] = None

    @property
    def text(self) -> str:
        return self._text

    @property
    def arguments(self) -> Tuple[Any, ...]:
        return self._arguments

    @property
    def page_size(self) -> int:
        return self._page_size

    @property
    def return_type(self) -> Optional[str]:
        return None

    def on(self, event: str, callback: Callable) -> "Query":
        """
        Register a consumer callback.

        Args:
            event: "page" (called with each list of rows) or
                "end" (called with None or the terminating error)
            callback: The handler

        Returns:
            This query, for chaining

        Raises:
            ValueError: For any other event name
        """
        if event == "page":
            self._on_page = callback
        elif event == "end":
            self._on_end = callback
        else:
            raise ValueError(f"unknown query event: {event}")
        return self

    def page(self, rows: List[Any]) -> None:
        """Deliver one page of rows to the consumer."""
        if self._on_page is not None:
            self._on_page(rows)

    def end(self, error: Optional[Exception]) -> None:
        """Deliver the terminal signal; ``error`` is None on success."""
        if self._on_end is not None:
            self._on_end(error)

    def __repr__(self) -> str:
        return (f"{type(self).__name__}(text={self._text!r}, "
                f"arguments={self._arguments!r}, page_size={self._page_size})")


class SqlQuery(Query):
    """
    SQL query returning cache values of a named type.

    A missing return_type is accepted here and rejected when the query
    is run, before anything is sent.
    """

    kind = QueryKind.SQL

    def __init__(
            self,
            return_type: Optional[str],
            text: str,
            arguments: Iterable[Any] = (),
            page_size: int = None,
    ):
        super().__init__(text, arguments, page_size)
        self._return_type = return_type

    @property
    def return_type(self) -> Optional[str]:
        return self._return_type


class SqlFieldsQuery(Query):
    """SQL query returning rows of selected fields."""

    kind = QueryKind.SQL_FIELDS
