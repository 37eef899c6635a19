"""
Protocol Response Records

Typed records for the structured results some commands return. Raw
results are decoded here so that malformed replies fail loudly as
ProtocolError instead of surfacing as missing fields later.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from ..errors import ProtocolError


@dataclass(frozen=True)
class Entry:
    """
    An immutable key/value pair.

    Attributes:
        key: The cache key
        value: The value stored under the key
    """
    key: Any
    value: Any

    @classmethod
    def from_record(cls, record: Any) -> "Entry":
        """
        Decode a ``{"key": ..., "value": ...}`` record.

        Raises:
            ProtocolError: If the record is not a mapping with both fields
        """
        if not isinstance(record, Mapping) or "key" not in record or "value" not in record:
            raise ProtocolError(f"malformed entry record: {record!r}")
        return cls(key=record["key"], value=record["value"])

    def to_record(self) -> Dict[str, Any]:
        return {"key": self.key, "value": self.value}


@dataclass(frozen=True)
class QueryPage:
    """
    One page of query results.

    Attributes:
        items: Rows in this page
        last: True if the server has no further pages
        query_id: Server cursor id to fetch the next page with
    """
    items: List[Any]
    last: bool
    query_id: Optional[Any] = None

    @classmethod
    def from_result(cls, result: Any) -> "QueryPage":
        """
        Decode the result of an execute or fetch command.

        Args:
            result: Decoded response, ``{"items": [...], "last": bool, "queryId": ...}``

        Returns:
            QueryPage for the result

        Raises:
            ProtocolError: If a field is missing or has the wrong type, or
                a non-final page carries no query id
        """
        if not isinstance(result, Mapping):
            raise ProtocolError(f"query response is not an object: {result!r}")

        items = result.get("items")
        if not isinstance(items, list):
            raise ProtocolError("query response has no 'items' list")

        last = result.get("last")
        if not isinstance(last, bool):
            raise ProtocolError("query response has no boolean 'last' flag")

        query_id = result.get("queryId")
        if not last and query_id is None:
            raise ProtocolError("non-final query page has no 'queryId'")

        return cls(items=items, last=last, query_id=query_id)
