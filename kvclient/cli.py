#!/usr/bin/env python3
"""
KV-Cache Command-Line Client

Runs a single cache command against a KV-Cache server and prints the
result as JSON.

Usage:
    kv-client get mykey
    kv-client put mykey myvalue
    kv-client --cache people getall alice bob
    kv-client query "select * from Person" --type Person --page-size 100
    kv-client query "select name from Person where age > ?" --arg 30

Environment Variables:
    KV_CLIENT_HOST       - Server address
    KV_CLIENT_PORT       - Server port
    KV_CLIENT_TIMEOUT    - Round trip timeout in seconds
    KV_CLIENT_CACHE      - Default cache name
    KV_CLIENT_DEBUG      - Enable debug mode (true/false)
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import Any, List, Optional

from .cache.cache import Cache
from .cache.client import KVClient
from .config.settings import settings
from .errors import CacheError
from .query.query import SqlFieldsQuery, SqlQuery

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="kv-client",
        description="KV-Cache: command-line client",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument("--host", type=str, default=settings.HOST, help="Server host")
    parser.add_argument("--port", type=int, default=settings.PORT, help="Server port")
    parser.add_argument(
        "--timeout",
        type=float,
        default=settings.TIMEOUT,
        help="Round trip timeout in seconds",
    )
    parser.add_argument("--cache", type=str, default=settings.DEFAULT_CACHE, help="Cache name")
    parser.add_argument(
        "--debug",
        action="store_true",
        default=settings.DEBUG,
        help="Enable debug logging",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    get = commands.add_parser("get", help="Retrieve the value for a key")
    get.add_argument("key")

    put = commands.add_parser("put", help="Store a key-value pair")
    put.add_argument("key")
    put.add_argument("value")

    remove = commands.add_parser("remove", help="Remove a key")
    remove.add_argument("key")

    contains = commands.add_parser("contains", help="Check that all keys exist")
    contains.add_argument("keys", nargs="+")

    getall = commands.add_parser("getall", help="Retrieve several keys")
    getall.add_argument("keys", nargs="+")

    query = commands.add_parser("query", help="Run a SQL query, one JSON row per line")
    query.add_argument("text", help="Query text")
    query.add_argument("--type", dest="return_type", help="Value type; runs an SQL query instead of a fields query")
    query.add_argument("--page-size", type=int, default=settings.DEFAULT_PAGE_SIZE, help="Rows per page")
    query.add_argument("--arg", dest="arguments", action="append", default=[], help="Query argument (repeatable)")

    return parser.parse_args(argv)


def setup_logging(debug: bool = False) -> None:
    """Configure logging based on debug flag."""
    level = logging.DEBUG if debug else getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stderr),
        ]
    )


def emit(value: Any) -> None:
    """Print a value as one JSON line."""
    print(json.dumps(value))


async def run(args: argparse.Namespace, cache: Cache) -> None:
    """
    Execute the parsed command against ``cache``.

    Raises:
        CacheError: If the command or query fails
    """
    if args.command == "get":
        emit(await cache.get(args.key))
    elif args.command == "put":
        emit(await cache.put(args.key, args.value))
    elif args.command == "remove":
        emit(await cache.remove(args.key))
    elif args.command == "contains":
        if len(args.keys) == 1:
            emit(await cache.contains_key(args.keys[0]))
        else:
            emit(await cache.contains_keys(args.keys))
    elif args.command == "getall":
        entries = await cache.get_all(args.keys)
        emit({str(entry.key): entry.value for entry in entries})
    elif args.command == "query":
        await run_query(args, cache)


async def run_query(args: argparse.Namespace, cache: Cache) -> None:
    """Run the query command, printing each row and raising the error passed to end()."""
    if args.return_type:
        qry = SqlQuery(args.return_type, args.text, args.arguments, page_size=args.page_size)
    else:
        qry = SqlFieldsQuery(args.text, args.arguments, page_size=args.page_size)

    outcome = {}

    def on_page(rows):
        for row in rows:
            emit(row)

    qry.on("page", on_page).on("end", lambda error: outcome.update(error=error))

    cursor = await cache.query(qry)
    logger.debug(f"Query delivered {cursor.pages_delivered} page(s)")

    if outcome.get("error") is not None:
        raise outcome["error"]


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the command-line client."""
    args = parse_args(argv)
    setup_logging(debug=args.debug)

    client = KVClient(host=args.host, port=args.port, timeout=args.timeout)
    cache = client.cache(args.cache)

    try:
        asyncio.run(run(args, cache))
    except CacheError as exc:
        print(f"ERROR: {exc}")
        return 1
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
