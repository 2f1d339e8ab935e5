"""Redis-backed table store.

Tables are Redis hashes holding JSON-encoded fields. Composite entries are
plain Redis strings named ``<table>-<key>`` and carry their own TTL. Every
method is a thin async call over a single `redis.asyncio` client.
"""

import json
import logging
from typing import Any, Dict, List, Optional

from .config import StoreOptions, resolve_options
from .values import StoredValue, decode_json, encode_json, encode_stored

logger = logging.getLogger(__name__)

COMPOSITE_SEPARATOR = "-"

_GLOB_SPECIAL = "\\*?[]"


def composite_name(table: str, key: str) -> str:
    return f"{table}{COMPOSITE_SEPARATOR}{key}"


def _escape_glob(text: str) -> str:
    return "".join("\\" + ch if ch in _GLOB_SPECIAL else ch for ch in text)


def _check_ttl(ttl: Any) -> int:
    if isinstance(ttl, bool) or not isinstance(ttl, int) or ttl <= 0:
        raise ValueError(f"ttl must be a positive number of seconds, got {ttl!r}")
    return ttl


class TableStore:
    """Table and composite-key operations over one Redis connection.

    The client is created once and reused for the lifetime of the store. No
    call is retried and write-then-expire pairs are not atomic.
    """

    def __init__(self, options: Any = None, *, client: Any = None):
        self.options: StoreOptions = resolve_options(options)
        if client is not None:
            self.client = client
            return

        from redis import asyncio as aioredis

        self.client = aioredis.Redis(
            host=self.options.host,
            port=self.options.port,
            db=self.options.db,
            password=self.options.password,
            decode_responses=True,
        )
        logger.debug("Redis client created for %s:%s", self.options.host, self.options.port)

    async def __aenter__(self) -> "TableStore":
        await self.connect()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def connect(self) -> None:
        """Ping the server so connection problems surface early."""
        from redis.exceptions import RedisError

        try:
            await self.client.ping()
        except RedisError as e:
            logger.error("Redis error: %s", e)
            raise
        logger.info("Redis connected at %s:%s", self.options.host, self.options.port)

    async def close(self) -> None:
        await self.client.aclose()

    # Tables (Redis hashes)

    async def add_or_update(self, table: str, key: str, data: Any) -> None:
        """Store `data` as JSON under `key` in `table` without touching its TTL."""
        await self.client.hset(table, key, encode_json(data))

    async def add_or_update_with_expiry(self, table: str, key: str, data: Any, ttl: int) -> None:
        """Store `data` and (re)set the TTL of the whole table.

        The write and the expiry are two round trips; if the second fails the
        field stays without a TTL.
        """
        ttl = _check_ttl(ttl)
        await self.client.hset(table, key, encode_json(data))
        await self.client.expire(table, ttl)

    async def get_by_key(self, table: str, key: str) -> Any:
        """Return the decoded field, or None if the table or field is missing."""
        raw = await self.client.hget(table, key)
        return decode_json(raw, table, key)

    async def get_all(self, table: str) -> Dict[str, Any]:
        raw = await self.client.hgetall(table)
        return {field: decode_json(value, table, field) for field, value in raw.items()}

    async def delete_by_key(self, table: str, key: str) -> int:
        """Remove one field and return the number of fields removed."""
        return await self.client.hdel(table, key)

    async def delete_all(self, table: str) -> int:
        return await self.client.delete(table)

    # Composite entries (Redis strings)

    async def add_or_update_composite(
        self, table: str, key: str, value: StoredValue, ttl: Optional[int] = None
    ) -> None:
        """Store `value` under ``<table>-<key>``, with its own TTL when given."""
        payload = encode_stored(value)
        name = composite_name(table, key)
        if ttl is None:
            await self.client.set(name, payload)
        else:
            await self.client.set(name, payload, ex=_check_ttl(ttl))

    async def get_composite(self, table: str, key: str) -> Any:
        name = composite_name(table, key)
        raw = await self.client.get(name)
        return decode_json(raw, name)

    async def get_matching(self, table: str, pattern: str = "") -> Dict[str, Any]:
        """Collect composite entries of `table` whose key starts with `pattern`.

        Keys are found with incremental SCAN, so entries created or removed
        while scanning may be missed. Entries that disappear between SCAN and
        GET are skipped. The returned keys have the table prefix stripped.
        """
        prefix = composite_name(table, "")
        match = f"{_escape_glob(prefix)}{pattern}*"
        result: Dict[str, Any] = {}
        for name in await self._scan(match):
            raw = await self.client.get(name)
            if not raw:
                continue
            result[name[len(prefix):]] = decode_json(raw, name)
        return result

    async def delete_composite(self, table: str, key: str) -> int:
        return await self.client.delete(composite_name(table, key))

    # Expiry

    async def set_expiry(self, table: str, ttl: Optional[int]) -> bool:
        """Set the TTL of `table` in seconds; `None` removes any TTL.

        Returns False when the table does not exist.
        """
        if ttl is None:
            return await self.remove_expiry(table)
        return bool(await self.client.expire(table, _check_ttl(ttl)))

    async def remove_expiry(self, table: str) -> bool:
        """Make `table` persist indefinitely. Returns True if a TTL was removed."""
        return bool(await self.client.persist(table))

    async def get_expiry(self, name: str) -> Optional[int]:
        """Return the remaining TTL in seconds, or None if there is none."""
        remaining = await self.client.ttl(name)
        if remaining is None or remaining < 0:
            return None
        return remaining

    # Debugging

    async def debug_all(self) -> Dict[str, Dict[str, Any]]:
        """Dump every key in the database, tagged with its Redis type."""
        logger.info("Starting debug of all Redis data...")
        result: Dict[str, Dict[str, Any]] = {}
        for name in await self._scan("*"):
            kind = await self.client.type(name)
            if kind == "none":
                # expired after SCAN returned it
                continue
            result[name] = {"type": kind, "value": await self._read_any(name, kind)}
        logger.info("Redis Data Dump:\n%s", json.dumps(result, indent=2, ensure_ascii=False))
        return result

    async def _read_any(self, name: str, kind: str) -> Any:
        if kind == "hash":
            return await self.client.hgetall(name)
        if kind == "string":
            return await self.client.get(name)
        if kind == "list":
            return await self.client.lrange(name, 0, -1)
        if kind == "set":
            return sorted(await self.client.smembers(name))
        if kind == "zset":
            pairs = await self.client.zrange(name, 0, -1, withscores=True)
            return [[member, score] for member, score in pairs]
        return f"Unsupported type: {kind}"

    async def _scan(self, match: str) -> List[str]:
        """Run SCAN from cursor 0 until the server hands back cursor 0."""
        names: List[str] = []
        seen = set()
        cursor = 0
        while True:
            cursor, batch = await self.client.scan(
                cursor=cursor, match=match, count=self.options.scan_count
            )
            for name in batch:
                # SCAN may return a key more than once
                if name not in seen:
                    seen.add(name)
                    names.append(name)
            if int(cursor) == 0:
                break
        return names
