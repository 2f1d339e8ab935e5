from dataclasses import dataclass
from typing import Optional

import pytest
from pydantic import BaseModel

from tablestore import StoreOptions, TableStore, resolve_options

_ENV = ("REDIS_HOST", "REDIS_PORT", "REDIS_PASSWORD", "REDIS_DB", "REDIS_SCAN_COUNT")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in _ENV:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    assert resolve_options() == StoreOptions(host="localhost", port=6379, password=None, db=0, scan_count=100)


def test_environment_fills_missing_options(monkeypatch):
    monkeypatch.setenv("REDIS_HOST", "cache.internal")
    monkeypatch.setenv("REDIS_PORT", "6380")
    monkeypatch.setenv("REDIS_PASSWORD", "s3cret")
    monkeypatch.setenv("REDIS_DB", "2")

    opts = resolve_options({"host": "override"})

    assert opts.host == "override"
    assert opts.port == 6380
    assert opts.password == "s3cret"
    assert opts.db == 2


def test_explicit_zero_db_beats_environment(monkeypatch):
    monkeypatch.setenv("REDIS_DB", "5")

    assert resolve_options({"db": 0}).db == 0


def test_none_and_empty_options_fall_through(monkeypatch):
    monkeypatch.setenv("REDIS_HOST", "from-env")

    assert resolve_options({"host": None}).host == "from-env"
    assert resolve_options({"host": ""}).host == "from-env"


def test_accepts_dataclass_and_pydantic_options():
    @dataclass
    class Opts:
        host: str
        port: Optional[int] = None

    class Model(BaseModel):
        host: str = "model-host"
        port: int = 7000

    assert resolve_options(Opts(host="dc-host")).host == "dc-host"
    opts = resolve_options(Model())
    assert (opts.host, opts.port) == ("model-host", 7000)


@pytest.mark.parametrize("options", [{"port": "abc"}, {"db": "x"}, {"scan_count": 0}])
def test_invalid_numbers_raise(options):
    with pytest.raises(ValueError):
        resolve_options(options)


def test_store_builds_a_client_from_options():
    store = TableStore({"host": "redis.example", "port": 6390, "password": "pw"})

    kwargs = store.client.connection_pool.connection_kwargs
    assert kwargs["host"] == "redis.example"
    assert kwargs["port"] == 6390
    assert kwargs["password"] == "pw"
    assert kwargs["decode_responses"] is True
