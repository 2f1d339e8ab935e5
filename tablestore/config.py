"""Connection options for the table store.

Each option is taken from the caller first, then from the environment, then
from a built-in default.
"""

import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 6379
DEFAULT_SCAN_COUNT = 100

_OPTION_NAMES = ("host", "port", "password", "db", "scan_count")


@dataclass
class StoreOptions:
    """Resolved settings used to build the Redis client."""
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    password: Optional[str] = None
    db: int = 0
    scan_count: int = DEFAULT_SCAN_COUNT


def _options_to_kwargs(options: Any) -> Dict[str, Any]:
    """Normalize caller options into a plain dict of the non-empty ones.

    Accepts a dict, an object with attributes, or a Pydantic model instance.
    """
    if options is None:
        return {}
    if isinstance(options, dict):
        raw = options
    elif hasattr(options, "model_dump"):
        raw = options.model_dump()
    elif hasattr(options, "dict"):
        raw = options.dict()
    else:
        raw = {k: getattr(options, k, None) for k in _OPTION_NAMES}
    return {k: v for k, v in raw.items() if k in _OPTION_NAMES and v not in (None, "")}


def _pick(kw: Dict[str, Any], name: str, env: str, default: Any) -> Any:
    if name in kw:
        return kw[name]
    return os.getenv(env) or default


def _as_int(name: str, value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"{name} must be an integer, got {value!r}") from e


def resolve_options(options: Any = None) -> StoreOptions:
    """Merge caller options with REDIS_* environment variables and defaults."""
    kw = _options_to_kwargs(options)
    host = _pick(kw, "host", "REDIS_HOST", DEFAULT_HOST)
    port = _pick(kw, "port", "REDIS_PORT", DEFAULT_PORT)
    password = _pick(kw, "password", "REDIS_PASSWORD", None)
    db = _pick(kw, "db", "REDIS_DB", 0)
    scan_count = _pick(kw, "scan_count", "REDIS_SCAN_COUNT", DEFAULT_SCAN_COUNT)

    scan_count = _as_int("scan_count", scan_count)
    if scan_count <= 0:
        raise ValueError("scan_count must be positive")
    return StoreOptions(
        host=str(host),
        port=_as_int("port", port),
        password=password,
        db=_as_int("db", db),
        scan_count=scan_count,
    )
