"""Query module for KV-Cache client."""

from .cursor import CursorState, QueryCursor
from .query import Query, QueryKind, SqlFieldsQuery, SqlQuery

__all__ = [
    "CursorState",
    "Query",
    "QueryCursor",
    "QueryKind",
    "SqlFieldsQuery",
    "SqlQuery",
]
