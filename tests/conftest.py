import fakeredis
import pytest
from fakeredis import aioredis as fake_aioredis

from tablestore import TableStore


@pytest.fixture
def server():
    # a fresh in-process Redis per test
    return fakeredis.FakeServer()


@pytest.fixture
def redis_sync(server):
    """Synchronous client on the same fake server, for seeding and inspection."""
    return fakeredis.FakeRedis(server=server, decode_responses=True)


@pytest.fixture
def store(server, monkeypatch):
    monkeypatch.delenv("REDIS_SCAN_COUNT", raising=False)
    client = fake_aioredis.FakeRedis(server=server, decode_responses=True)
    return TableStore(client=client)


@pytest.fixture
def client(server, monkeypatch, tmp_path):
    """Ops API client backed by the fake server, with admin checks off."""
    from fastapi.testclient import TestClient

    from tablestore.api import app, get_store

    monkeypatch.delenv("ADMIN_TOKEN", raising=False)
    monkeypatch.delenv("ADMIN_JWT_SECRET", raising=False)
    monkeypatch.setenv("AUDIT_LOG_PATH", str(tmp_path / "logs" / "audit.log"))
    api_store = TableStore(client=fake_aioredis.FakeRedis(server=server, decode_responses=True))
    app.dependency_overrides[get_store] = lambda: api_store
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
