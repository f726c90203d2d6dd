"""
MongoDB document store client.

Lifecycle:
  PENDING -> (ping ok) -> CONNECTED
  PENDING -> (any error) -> FAILED
  The state is fixed once the single connection attempt completes.

Data operations never raise: while not CONNECTED they return 0 without touching
the backend, and backend errors are logged and reported as 0.
"""
from __future__ import annotations

import asyncio
import inspect
from typing import Any
from urllib.parse import quote_plus

from loguru import logger
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from files_manager.config.settings import Settings
from files_manager.constants import FILES_COLLECTION, USERS_COLLECTION
from files_manager.core import SERVICE_NAME
from files_manager.infrastructure.persistence.mongo.constants import ConnectionState


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


def _build_mongo_uri(settings: Settings) -> str:
    user, password = settings.db_user, settings.db_password
    if user and password:
        return f"mongodb://{quote_plus(user)}:{quote_plus(password)}@{settings.db_host}:{settings.db_port}"
    return f"mongodb://{settings.db_host}:{settings.db_port}"


async def _close_client(client: AsyncIOMotorClient) -> None:
    res = client.close()
    if inspect.isawaitable(res):
        await res


class DBClient:
    """DocumentStore implementation using MongoDB."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._state = ConnectionState.PENDING
        self._client: AsyncIOMotorClient | None = None
        self._db: AsyncIOMotorDatabase | None = None
        self._connect_task: asyncio.Task[bool] | None = None

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def database(self) -> AsyncIOMotorDatabase:
        if self._db is None:
            raise RuntimeError("db_not_connected")
        return self._db

    def is_alive(self) -> bool:
        return self._state == ConnectionState.CONNECTED and self._db is not None

    def start(self) -> asyncio.Task[bool]:
        """Schedule the connection attempt; the task resolves to True when connected."""
        if self._connect_task is None:
            self._connect_task = asyncio.create_task(self._connect())
        return self._connect_task

    async def wait_ready(self) -> bool:
        await self.start()
        return self.is_alive()

    async def _connect(self) -> bool:
        _log("db_connecting", host=self._settings.db_host, port=self._settings.db_port)
        client: AsyncIOMotorClient | None = None
        try:
            client = AsyncIOMotorClient(
                _build_mongo_uri(self._settings),
                serverSelectionTimeoutMS=self._settings.db_server_selection_timeout_ms,
            )
            await client.admin.command("ping")
        except asyncio.CancelledError:
            if client is not None:
                await _close_client(client)
            raise
        except Exception as e:
            logger.warning("db connect failed: {}", e)
            if client is not None:
                await _close_client(client)
            self._state = ConnectionState.FAILED
            _log("db_connect_failed")
            return False
        self._client = client
        self._db = client[self._settings.db_database]
        self._state = ConnectionState.CONNECTED
        _log("db_connected", database=self._settings.db_database)
        return True

    async def count_documents(self, collection_name: str) -> int:
        """Number of documents in ``collection_name``; 0 when not connected or on error."""
        if not self.is_alive():
            return 0
        try:
            return await self.database[collection_name].count_documents({})
        except Exception as e:
            logger.warning("db count failed for {}: {}", collection_name, e)
            _log("db_count_failed", collection=collection_name)
            return 0

    async def nb_users(self) -> int:
        return await self.count_documents(USERS_COLLECTION)

    async def nb_files(self) -> int:
        return await self.count_documents(FILES_COLLECTION)

    async def close(self) -> None:
        if self._connect_task is not None and not self._connect_task.done():
            self._connect_task.cancel()
            try:
                await self._connect_task
            except asyncio.CancelledError:
                pass
        if self._client is not None:
            await _close_client(self._client)
            self._client = None
        self._db = None
        self._state = ConnectionState.FAILED
        _log("db_closed")
