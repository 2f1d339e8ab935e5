"""Error types raised by the table store.

Connection failures come straight from the Redis client; they are
re-exported here so callers do not need to import `redis` themselves.
"""

from typing import Optional

from redis.exceptions import ConnectionError as StoreConnectionError

__all__ = ["TableStoreError", "DecodeError", "StoreConnectionError"]


class TableStoreError(Exception):
    """Base class for errors raised by the table store itself."""


class DecodeError(TableStoreError, ValueError):
    """Raised when a stored payload is not valid JSON."""

    def __init__(self, name: str, field: Optional[str], payload: str):
        self.name = name
        self.field = field
        self.payload = payload
        where = f"{name}[{field}]" if field is not None else name
        super().__init__(f"stored payload at {where} is not valid JSON")
