"""Append-only audit trail for operator actions on the store."""

import json
import logging
import os
from datetime import datetime, timezone

logger = logging.getLogger(__name__)

DEFAULT_AUDIT_PATH = os.path.join("logs", "audit.log")


def audit_path() -> str:
    return os.getenv("AUDIT_LOG_PATH") or DEFAULT_AUDIT_PATH


def record_audit(event: dict) -> None:
    """Append `event` as one JSON line, stamped with the current UTC time.

    Write failures are logged and otherwise ignored.
    """
    event_copy = dict(event)
    event_copy.setdefault("timestamp", datetime.now(timezone.utc).isoformat())

    path = audit_path()
    try:
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(path, "a", encoding="utf-8") as fh:
            fh.write(json.dumps(event_copy, ensure_ascii=False) + "\n")
    except OSError as e:
        logger.exception("Failed writing audit to file: %s", e)


def read_audit(limit: int = 100) -> list:
    """Return the last `limit` audit events; unparsable lines come back raw."""
    path = audit_path()
    if not os.path.exists(path):
        return []
    with open(path, "r", encoding="utf-8") as fh:
        lines = fh.readlines()[-limit:]
    events = []
    for ln in lines:
        try:
            events.append(json.loads(ln))
        except json.JSONDecodeError as e:
            logger.debug("Failed to parse audit line: %s", e)
            events.append({"raw": ln.strip()})
    return events
