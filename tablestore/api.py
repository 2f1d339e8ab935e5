"""HTTP ops surface over the table store.

Meant for operators and local debugging: every route maps onto one
`TableStore` call. Destructive and dump routes require admin credentials
once `ADMIN_TOKEN` or `ADMIN_JWT_SECRET` is configured.
"""

import logging
from typing import Any, Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, generate_latest
from pydantic import BaseModel, Field

from .audit import read_audit, record_audit
from .auth import admin_required, is_admin
from .errors import DecodeError, StoreConnectionError
from .store import TableStore
from .values import RawText, Structured

logger = logging.getLogger(__name__)

MET_OPERATIONS = Counter("tablestore_operations_total", "Store operations served", ["op"])
MET_DECODE_ERRORS = Counter("tablestore_decode_errors_total", "Stored payloads that were not valid JSON")
MET_CONNECTION_ERRORS = Counter("tablestore_connection_errors_total", "Requests failed by Redis connection errors")
MET_AUTH_FAILURES = Counter("tablestore_auth_failures_total", "Admin authentication failures")

app = FastAPI(title="Table Store Ops API")

_default_store: Optional[TableStore] = None


def get_store() -> TableStore:
    """Return the process-wide store, built from REDIS_* settings on first use."""
    global _default_store
    if _default_store is None:
        _default_store = TableStore()
    return _default_store


def require_admin(
    authorization: Optional[str] = Header(None),
    x_admin_token: Optional[str] = Header(None),
) -> None:
    if admin_required() and not is_admin(authorization, x_admin_token):
        MET_AUTH_FAILURES.inc()
        raise HTTPException(status_code=403, detail="admin credentials required")


class FieldWrite(BaseModel):
    value: Any
    ttl: Optional[int] = Field(default=None, gt=0)


class CompositeWrite(BaseModel):
    value: Any
    raw: bool = False
    ttl: Optional[int] = Field(default=None, gt=0)


class ExpiryUpdate(BaseModel):
    ttl: Optional[int] = Field(default=None, gt=0)


@app.exception_handler(DecodeError)
async def _decode_error(request: Request, exc: DecodeError):
    MET_DECODE_ERRORS.inc()
    logger.warning("Undecodable payload for %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=502, content={"detail": str(exc)})


@app.exception_handler(StoreConnectionError)
async def _connection_error(request: Request, exc: StoreConnectionError):
    MET_CONNECTION_ERRORS.inc()
    logger.error("Redis error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=503, content={"detail": "store unavailable"})


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/api/tables/{table}")
async def read_table(table: str, store: TableStore = Depends(get_store)):
    MET_OPERATIONS.labels(op="get_all").inc()
    return {"table": table, "fields": await store.get_all(table)}


@app.delete("/api/tables/{table}", dependencies=[Depends(require_admin)])
async def delete_table(table: str, store: TableStore = Depends(get_store)):
    MET_OPERATIONS.labels(op="delete_all").inc()
    removed = await store.delete_all(table)
    record_audit({"action": "delete_table", "table": table, "removed": removed})
    return {"table": table, "removed": removed}


@app.get("/api/tables/{table}/fields/{key}")
async def read_field(table: str, key: str, store: TableStore = Depends(get_store)):
    MET_OPERATIONS.labels(op="get_by_key").inc()
    value = await store.get_by_key(table, key)
    if value is None:
        raise HTTPException(status_code=404, detail="field not found")
    return {"table": table, "key": key, "value": value}


@app.put("/api/tables/{table}/fields/{key}")
async def write_field(table: str, key: str, body: FieldWrite, store: TableStore = Depends(get_store)):
    if body.ttl is None:
        MET_OPERATIONS.labels(op="add_or_update").inc()
        await store.add_or_update(table, key, body.value)
    else:
        MET_OPERATIONS.labels(op="add_or_update_with_expiry").inc()
        await store.add_or_update_with_expiry(table, key, body.value, body.ttl)
    return {"table": table, "key": key, "ttl": body.ttl}


@app.delete("/api/tables/{table}/fields/{key}")
async def delete_field(table: str, key: str, store: TableStore = Depends(get_store)):
    MET_OPERATIONS.labels(op="delete_by_key").inc()
    return {"table": table, "key": key, "removed": await store.delete_by_key(table, key)}


@app.get("/api/tables/{table}/expiry")
async def read_expiry(table: str, store: TableStore = Depends(get_store)):
    MET_OPERATIONS.labels(op="get_expiry").inc()
    return {"table": table, "ttl": await store.get_expiry(table)}


@app.put("/api/tables/{table}/expiry")
async def update_expiry(table: str, body: ExpiryUpdate, store: TableStore = Depends(get_store)):
    MET_OPERATIONS.labels(op="set_expiry").inc()
    if not await store.set_expiry(table, body.ttl) and body.ttl is not None:
        raise HTTPException(status_code=404, detail="table not found")
    return {"table": table, "ttl": body.ttl}


@app.delete("/api/tables/{table}/expiry")
async def clear_expiry(table: str, store: TableStore = Depends(get_store)):
    MET_OPERATIONS.labels(op="remove_expiry").inc()
    return {"table": table, "cleared": await store.remove_expiry(table)}


@app.get("/api/composite/{table}")
async def scan_composite(table: str, pattern: str = "", store: TableStore = Depends(get_store)):
    MET_OPERATIONS.labels(op="get_matching").inc()
    return {"table": table, "entries": await store.get_matching(table, pattern)}


@app.get("/api/composite/{table}/{key}")
async def read_composite(table: str, key: str, store: TableStore = Depends(get_store)):
    MET_OPERATIONS.labels(op="get_composite").inc()
    value = await store.get_composite(table, key)
    if value is None:
        raise HTTPException(status_code=404, detail="entry not found")
    return {"table": table, "key": key, "value": value}


@app.put("/api/composite/{table}/{key}")
async def write_composite(table: str, key: str, body: CompositeWrite, store: TableStore = Depends(get_store)):
    if body.raw:
        if not isinstance(body.value, str):
            raise HTTPException(status_code=422, detail="raw values must be strings")
        value = RawText(body.value)
    else:
        value = Structured(body.value)
    MET_OPERATIONS.labels(op="add_or_update_composite").inc()
    await store.add_or_update_composite(table, key, value, body.ttl)
    return {"table": table, "key": key, "ttl": body.ttl}


@app.delete("/api/composite/{table}/{key}")
async def delete_composite(table: str, key: str, store: TableStore = Depends(get_store)):
    MET_OPERATIONS.labels(op="delete_composite").inc()
    return {"table": table, "key": key, "removed": await store.delete_composite(table, key)}


@app.get("/api/debug/dump", dependencies=[Depends(require_admin)])
async def debug_dump(store: TableStore = Depends(get_store)):
    MET_OPERATIONS.labels(op="debug_all").inc()
    data = await store.debug_all()
    record_audit({"action": "debug_dump", "keys": len(data)})
    return {"keys": data}


@app.get("/api/ops/audit", dependencies=[Depends(require_admin)])
async def get_audit(limit: int = 100):
    """Return the most recent audit events."""
    return {"events": read_audit(limit)}


@app.get("/metrics")
async def metrics():
    """Expose Prometheus metrics."""
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
