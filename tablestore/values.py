"""Value encoding for stored payloads.

Table fields are always JSON. Composite entries take an explicit tag so the
caller decides whether a value is JSON-encoded (`Structured`) or written as
plain text (`RawText`).
"""

import json
from dataclasses import dataclass
from typing import Any, Optional, Union

from .errors import DecodeError


@dataclass(frozen=True)
class Structured:
    """A value stored as JSON text."""
    value: Any

    def encode(self) -> str:
        return encode_json(self.value)


@dataclass(frozen=True)
class RawText:
    """A string stored verbatim."""
    text: str

    def encode(self) -> str:
        return self.text


StoredValue = Union[Structured, RawText]


def encode_json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False)


def decode_json(raw: Optional[str], name: str, field: Optional[str] = None) -> Any:
    """Decode a stored payload, returning None for a missing or empty one."""
    if not raw:
        return None
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, ValueError) as e:
        raise DecodeError(name, field, raw) from e


def encode_stored(value: StoredValue) -> str:
    if not isinstance(value, (Structured, RawText)):
        raise TypeError("composite values must be wrapped in Structured or RawText")
    return value.encode()
