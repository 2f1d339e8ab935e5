"""Command line access to a table store.

Usage:
    python -m tablestore.cli dump
    python -m tablestore.cli get-all users
    python -m tablestore.cli get users key123
    python -m tablestore.cli scan orders 2024
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import Optional

from .errors import DecodeError, StoreConnectionError
from .store import TableStore


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="tablestore")
    p.add_argument("--host")
    p.add_argument("--port", type=int)
    p.add_argument("--password")
    p.add_argument("--db", type=int)
    p.add_argument("-v", "--verbose", action="store_true")
    sub = p.add_subparsers(dest="command", required=True)

    sub.add_parser("dump", help="print every key with its type and value")

    get_all = sub.add_parser("get-all", help="print all fields of a table")
    get_all.add_argument("table")

    get = sub.add_parser("get", help="print one field of a table")
    get.add_argument("table")
    get.add_argument("key")

    scan = sub.add_parser("scan", help="print composite entries whose key starts with PATTERN")
    scan.add_argument("table")
    scan.add_argument("pattern", nargs="?", default="")
    return p


async def run(args: argparse.Namespace, store: TableStore):
    if args.command == "dump":
        return await store.debug_all()
    if args.command == "get-all":
        return await store.get_all(args.table)
    if args.command == "get":
        return await store.get_by_key(args.table, args.key)
    return await store.get_matching(args.table, args.pattern)


async def _run_and_close(args: argparse.Namespace, store: TableStore):
    try:
        return await run(args, store)
    finally:
        await store.close()


def main(argv: Optional[list] = None, store: Optional[TableStore] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)
    if store is None:
        store = TableStore({"host": args.host, "port": args.port, "password": args.password, "db": args.db})

    try:
        result = asyncio.run(_run_and_close(args, store))
    except StoreConnectionError as e:
        print(f"Redis connection failed: {e}", file=sys.stderr)
        return 2
    except DecodeError as e:
        print(str(e), file=sys.stderr)
        return 1

    print(json.dumps(result, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
