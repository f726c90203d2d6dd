"""
Composition root: single place where the storage clients are built.

Each client exists exactly once per process and is owned by AppDependencies;
callers receive it from here instead of importing a module-level instance.
No DI container library, explicit wiring only.
"""
from __future__ import annotations

import asyncio
from typing import Any

from loguru import logger

from files_manager.config.settings import Settings
from files_manager.core import SERVICE_NAME
from files_manager.infrastructure.cache.factory import create_key_value_store
from files_manager.infrastructure.persistence.factory import create_document_store
from files_manager.ports.document_store import DocumentStore
from files_manager.ports.key_value_store import KeyValueStore


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


class AppDependencies:
    """Holds the wired storage clients and their lifecycle."""

    def __init__(
        self,
        *,
        settings: Settings,
        document_store: DocumentStore,
        key_value_store: KeyValueStore,
    ) -> None:
        self._settings = settings
        self._document_store = document_store
        self._key_value_store = key_value_store

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def document_store(self) -> DocumentStore:
        return self._document_store

    @property
    def key_value_store(self) -> KeyValueStore:
        return self._key_value_store

    def start(self) -> None:
        """Kick off both connection attempts without waiting for them."""
        self._key_value_store.start()
        self._document_store.start()

    async def wait_ready(self) -> dict[str, bool]:
        redis_alive, db_alive = await asyncio.gather(
            self._key_value_store.wait_ready(),
            self._document_store.wait_ready(),
        )
        return {"redis": redis_alive, "db": db_alive}

    def status(self) -> dict[str, bool]:
        return {
            "redis": self._key_value_store.is_alive(),
            "db": self._document_store.is_alive(),
        }

    async def stats(self) -> dict[str, int]:
        users, files = await asyncio.gather(
            self._document_store.nb_users(),
            self._document_store.nb_files(),
        )
        return {"users": users, "files": files}

    async def close(self) -> None:
        for name, component in (("key_value_store", self._key_value_store), ("document_store", self._document_store)):
            try:
                await component.close()
            except Exception as exc:
                logger.warning("{} close failed: {}", name, exc)


def create_app_dependencies(settings: Settings | None = None) -> AppDependencies:
    """
    Build both storage clients in one place. Caller owns lifecycle
    (start/wait_ready/close).
    """
    _settings = settings or Settings()
    return AppDependencies(
        settings=_settings,
        document_store=create_document_store(_settings),
        key_value_store=create_key_value_store(_settings),
    )
