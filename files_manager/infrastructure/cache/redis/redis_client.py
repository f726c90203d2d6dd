"""
Redis key-value store client.

Lifecycle:
  PENDING -> CONNECTED <-> DISCONNECTED, and any state -> CLOSED on close().
  Connect and error events fire repeatedly over the process lifetime: from the
  initial probe, from the background health watcher and from the outcome of every
  data operation. redis-py reconnects lazily on the next command, so a later
  successful command or ping restores liveness.

Data operations always attempt the backend call (the client handle exists for the
whole lifetime) and never raise: get degrades to None, set and delete to a no-op.
"""
from __future__ import annotations

import asyncio
from typing import Any

import redis.asyncio as aioredis
from loguru import logger
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError
from redis.exceptions import TimeoutError as RedisTimeoutError

from files_manager.config.settings import Settings
from files_manager.core import SERVICE_NAME
from files_manager.infrastructure.cache.redis.constants import ConnectionState

_CONNECTION_ERRORS = (RedisConnectionError, RedisTimeoutError)


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


def _encode_value(value: Any) -> Any:
    # redis-py rejects bools
    if isinstance(value, bool):
        return "true" if value else "false"
    return value


class RedisClient:
    """KeyValueStore implementation using Redis."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._state = (
            ConnectionState.CONNECTED if settings.redis_optimistic_liveness else ConnectionState.PENDING
        )
        self._client: aioredis.Redis = aioredis.from_url(
            settings.redis_url,
            decode_responses=True,
            encoding_errors="replace",
            socket_timeout=settings.redis_socket_timeout_seconds,
            socket_connect_timeout=settings.redis_socket_timeout_seconds,
        )
        self._connect_task: asyncio.Task[bool] | None = None
        self._watch_task: asyncio.Task[None] | None = None

    @property
    def state(self) -> ConnectionState:
        return self._state

    def is_alive(self) -> bool:
        return self._state == ConnectionState.CONNECTED

    def _on_error(self, exc: BaseException) -> None:
        if self._state == ConnectionState.CLOSED:
            return
        if self._state != ConnectionState.DISCONNECTED:
            logger.warning("redis client failed to connect: {}", exc)
            _log("redis_disconnected")
        self._state = ConnectionState.DISCONNECTED

    def _on_connect(self) -> None:
        if self._state == ConnectionState.CLOSED:
            return
        if self._state != ConnectionState.CONNECTED:
            _log("redis_connected")
        self._state = ConnectionState.CONNECTED

    async def _probe(self) -> bool:
        try:
            await self._client.ping()
        except RedisError as e:
            self._on_error(e)
            return False
        self._on_connect()
        return True

    async def _watch(self) -> None:
        interval = self._settings.redis_health_check_interval_seconds
        while True:
            await asyncio.sleep(interval)
            await self._probe()

    def start(self) -> asyncio.Task[bool]:
        """Schedule the connection probe and the health watcher.

        The returned task resolves to True once the first ping succeeds.
        """
        if self._connect_task is None:
            _log("redis_connecting", url=self._settings.redis_url)
            self._connect_task = asyncio.create_task(self._probe())
            if self._settings.redis_health_check_interval_seconds > 0:
                self._watch_task = asyncio.create_task(self._watch())
        return self._connect_task

    async def wait_ready(self) -> bool:
        await self.start()
        return self.is_alive()

    async def get(self, key: str) -> str | None:
        if self._state == ConnectionState.CLOSED:
            return None
        try:
            value = await self._client.get(key)
        except _CONNECTION_ERRORS as e:
            self._on_error(e)
            _log("redis_get_failed", key=key)
            return None
        except RedisError as e:
            logger.warning("redis get failed for {}: {}", key, e)
            _log("redis_get_failed", key=key)
            return None
        self._on_connect()
        return value

    async def set(self, key: str, value: Any, duration: int) -> None:
        """Store ``value`` under ``key`` expiring after ``duration`` seconds (one SET ... EX)."""
        if self._state == ConnectionState.CLOSED:
            return
        try:
            await self._client.set(key, _encode_value(value), ex=duration)
        except _CONNECTION_ERRORS as e:
            self._on_error(e)
            _log("redis_set_failed", key=key)
            return
        except RedisError as e:
            logger.warning("redis set failed for {}: {}", key, e)
            _log("redis_set_failed", key=key)
            return
        self._on_connect()

    async def delete(self, key: str) -> None:
        if self._state == ConnectionState.CLOSED:
            return
        try:
            await self._client.delete(key)
        except _CONNECTION_ERRORS as e:
            self._on_error(e)
            _log("redis_del_failed", key=key)
            return
        except RedisError as e:
            logger.warning("redis del failed for {}: {}", key, e)
            _log("redis_del_failed", key=key)
            return
        self._on_connect()

    async def close(self) -> None:
        self._state = ConnectionState.CLOSED
        for task in (self._watch_task, self._connect_task):
            if task is not None and not task.done():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
        self._watch_task = None
        try:
            await self._client.aclose()
        except Exception as e:
            logger.warning("redis close failed: {}", e)
        _log("redis_closed")
