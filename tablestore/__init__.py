"""Async table-style access to Redis hashes and composite string keys."""

from .config import StoreOptions, resolve_options
from .errors import DecodeError, StoreConnectionError, TableStoreError
from .store import COMPOSITE_SEPARATOR, TableStore, composite_name
from .values import RawText, Structured

__all__ = [
    "COMPOSITE_SEPARATOR",
    "DecodeError",
    "RawText",
    "StoreConnectionError",
    "StoreOptions",
    "Structured",
    "TableStore",
    "TableStoreError",
    "composite_name",
    "resolve_options",
]
