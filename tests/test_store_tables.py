import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from tablestore import DecodeError, StoreConnectionError


@pytest.mark.asyncio
async def test_write_then_read_round_trips(store):
    value = {"name": "John", "age": 30, "tags": ["a", "b"], "nested": {"ok": True, "n": None}}
    await store.add_or_update("users", "key123", value)

    assert await store.get_by_key("users", "key123") == value


@pytest.mark.asyncio
async def test_values_are_stored_as_json_in_a_hash(store, redis_sync):
    await store.add_or_update("users", "key123", {"name": "John"})

    assert redis_sync.type("users") == "hash"
    assert redis_sync.hget("users", "key123") == '{"name": "John"}'


@pytest.mark.asyncio
async def test_last_write_wins(store):
    await store.add_or_update("users", "k", 1)
    await store.add_or_update("users", "k", [2, 3])

    assert await store.get_by_key("users", "k") == [2, 3]


@pytest.mark.asyncio
async def test_missing_field_and_table_read_as_none(store):
    await store.add_or_update("users", "k", "v")

    assert await store.get_by_key("users", "other") is None
    assert await store.get_by_key("nope", "k") is None
    assert await store.get_all("nope") == {}


@pytest.mark.asyncio
async def test_end_to_end_users_table(store):
    await store.add_or_update("users", "key123", {"name": "John", "age": 30})
    assert await store.get_all("users") == {"key123": {"name": "John", "age": 30}}

    assert await store.delete_by_key("users", "key123") == 1
    assert await store.get_all("users") == {}


@pytest.mark.asyncio
async def test_deleting_missing_things_returns_zero(store):
    assert await store.delete_by_key("users", "ghost") == 0
    assert await store.delete_all("users") == 0
    assert await store.delete_composite("users", "ghost") == 0


@pytest.mark.asyncio
async def test_delete_all_removes_the_table(store, redis_sync):
    await store.add_or_update("orders", "a", 1)
    await store.add_or_update("orders", "b", 2)

    assert await store.delete_all("orders") == 1
    assert not redis_sync.exists("orders")


@pytest.mark.asyncio
async def test_invalid_json_raises_decode_error(store, redis_sync):
    redis_sync.hset("users", "good", '{"x": 1}')
    redis_sync.hset("users", "bad", "not json")

    with pytest.raises(DecodeError) as exc_info:
        await store.get_by_key("users", "bad")
    assert exc_info.value.name == "users"
    assert exc_info.value.field == "bad"
    assert exc_info.value.payload == "not json"

    with pytest.raises(DecodeError):
        await store.get_all("users")


@pytest.mark.asyncio
async def test_connection_errors_propagate_unchanged(store, monkeypatch):
    async def refuse(*args, **kwargs):
        raise RedisConnectionError("Connection refused")

    monkeypatch.setattr(store.client, "hset", refuse)

    with pytest.raises(StoreConnectionError, match="Connection refused"):
        await store.add_or_update("users", "k", 1)
    assert StoreConnectionError is RedisConnectionError


@pytest.mark.asyncio
async def test_connect_logs_success(store, caplog):
    caplog.set_level("INFO", logger="tablestore.store")
    await store.connect()

    assert "Redis connected" in caplog.text


@pytest.mark.asyncio
async def test_connect_logs_and_reraises_errors(store, monkeypatch, caplog):
    async def refuse(*args, **kwargs):
        raise RedisConnectionError("no route")

    monkeypatch.setattr(store.client, "ping", refuse)

    with pytest.raises(RedisConnectionError):
        await store.connect()
    assert "Redis error: no route" in caplog.text


@pytest.mark.asyncio
async def test_async_context_manager_connects_and_closes(store):
    async with store as s:
        await s.add_or_update("t", "k", {"v": 1})
        assert await s.get_by_key("t", "k") == {"v": 1}
