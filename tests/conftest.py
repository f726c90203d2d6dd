from __future__ import annotations

import asyncio
import time
from datetime import timedelta
from typing import Any

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import DataError

from files_manager.config.settings import Settings
import files_manager.infrastructure.cache.redis.redis_client as redis_client_module
import files_manager.infrastructure.persistence.mongo.db_client as db_client_module


class FakeCollection:
    """Motor collection stand-in; only count_documents is used by DBClient."""

    def __init__(self, name: str, count: int = 0, *, raise_on_count: Exception | None = None) -> None:
        self.name = name
        self.count = count
        self.raise_on_count = raise_on_count
        self.count_calls: list[dict[str, Any]] = []

    async def count_documents(self, filter: dict[str, Any]) -> int:
        self.count_calls.append(filter)
        if self.raise_on_count is not None:
            raise self.raise_on_count
        return self.count


class FakeMongoDatabase:
    def __init__(self, name: str) -> None:
        self.name = name
        self.collections: dict[str, FakeCollection] = {}

    def __getitem__(self, collection_name: str) -> FakeCollection:
        if collection_name not in self.collections:
            self.collections[collection_name] = FakeCollection(collection_name)
        return self.collections[collection_name]


class _FakeAdmin:
    def __init__(self, client: FakeMongoClient) -> None:
        self._client = client

    async def command(self, name: str) -> dict[str, Any]:
        self._client.commands.append(name)
        if self._client.ping_gate is not None:
            await self._client.ping_gate.wait()
        if self._client.raise_on_ping is not None:
            raise self._client.raise_on_ping
        return {"ok": 1.0}


class FakeMongoClient:
    """Implements the slice of AsyncIOMotorClient used by DBClient."""

    def __init__(self, *, raise_on_ping: Exception | None = None) -> None:
        self.raise_on_ping = raise_on_ping
        self.ping_gate: asyncio.Event | None = None
        self.commands: list[str] = []
        self.databases: dict[str, FakeMongoDatabase] = {}
        self.closed = False
        self.uri: str | None = None
        self.options: dict[str, Any] = {}
        self.admin = _FakeAdmin(self)

    def __getitem__(self, name: str) -> FakeMongoDatabase:
        if name not in self.databases:
            self.databases[name] = FakeMongoDatabase(name)
        return self.databases[name]

    def collection(self, database: str, name: str) -> FakeCollection:
        return self[database][name]

    def close(self) -> None:
        self.closed = True


class FakeRedis:
    """In-memory Redis stub with TTL; ``fail_with`` makes every call raise.

    Values are kept as bytes and decoded on read the way redis-py does with
    ``decode_responses=True``, using the ``encoding_errors`` the client was built with.
    """

    def __init__(self) -> None:
        self._store: dict[str, bytes] = {}
        self._expiry: dict[str, float] = {}
        self.fail_with: Exception | None = None
        self.set_calls: list[tuple[str, Any, int | None]] = []
        self.ping_calls = 0
        self.closed = False
        self.options: dict[str, Any] = {}
        self.now = time.monotonic

    def _check(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with

    def _evict(self, key: str) -> None:
        if key in self._expiry and self.now() >= self._expiry[key]:
            self._store.pop(key, None)
            self._expiry.pop(key, None)

    def _encode(self, value: Any) -> bytes:
        if isinstance(value, bytes):
            return value
        if isinstance(value, bool) or not isinstance(value, (str, int, float)):
            raise DataError(f"Invalid input of type: {type(value).__name__!r}")
        return str(value).encode("utf-8")

    def put_raw(self, key: str, raw: bytes) -> None:
        """Store bytes as another client sharing the server would."""
        self._store[key] = raw
        self._expiry.pop(key, None)

    async def ping(self) -> bool:
        self.ping_calls += 1
        self._check()
        return True

    async def get(self, key: str) -> str | None:
        self._check()
        self._evict(key)
        raw = self._store.get(key)
        if raw is None:
            return None
        return raw.decode("utf-8", self.options.get("encoding_errors", "strict"))

    async def set(self, key: str, value: Any, *, ex: int | timedelta | None = None) -> bool:
        if ex is not None:
            if isinstance(ex, timedelta):
                ex = int(ex.total_seconds())
            elif not isinstance(ex, int):
                raise DataError("ex must be datetime.timedelta or int")
        self._check()
        encoded = self._encode(value)
        self.set_calls.append((key, value, ex))
        self._store[key] = encoded
        if ex is not None:
            self._expiry[key] = self.now() + ex
        else:
            self._expiry.pop(key, None)
        return True

    async def delete(self, *keys: str) -> int:
        self._check()
        count = 0
        for k in keys:
            if k in self._store:
                del self._store[k]
                self._expiry.pop(k, None)
                count += 1
        return count

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        db_host="mongo.test",
        db_port=27017,
        db_database="files_manager",
        redis_url="redis://redis.test:6379",
        redis_health_check_interval_seconds=0,
    )


@pytest.fixture()
def fake_mongo() -> FakeMongoClient:
    return FakeMongoClient()


@pytest.fixture()
def unreachable_mongo() -> FakeMongoClient:
    return FakeMongoClient(raise_on_ping=RuntimeError("server selection timeout"))


def _install_mongo(monkeypatch: pytest.MonkeyPatch, client: FakeMongoClient) -> FakeMongoClient:
    def _factory(uri: str, **kwargs: Any) -> FakeMongoClient:
        client.uri = uri
        client.options = kwargs
        return client

    monkeypatch.setattr(db_client_module, "AsyncIOMotorClient", _factory)
    return client


@pytest.fixture()
def patch_mongo(monkeypatch: pytest.MonkeyPatch, fake_mongo: FakeMongoClient) -> FakeMongoClient:
    return _install_mongo(monkeypatch, fake_mongo)


@pytest.fixture()
def patch_unreachable_mongo(monkeypatch: pytest.MonkeyPatch, unreachable_mongo: FakeMongoClient) -> FakeMongoClient:
    return _install_mongo(monkeypatch, unreachable_mongo)


@pytest.fixture()
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture()
def patch_redis(monkeypatch: pytest.MonkeyPatch, fake_redis: FakeRedis) -> FakeRedis:
    def _from_url(url: str, **kwargs: Any) -> FakeRedis:
        fake_redis.options = kwargs
        return fake_redis

    monkeypatch.setattr(redis_client_module.aioredis, "from_url", _from_url)
    return fake_redis


@pytest.fixture()
def redis_down() -> Exception:
    return RedisConnectionError("Error 111 connecting to redis.test:6379. Connection refused.")
