"""Port: document store façade. Implementations live in infrastructure."""
from __future__ import annotations

import asyncio
from typing import Protocol


class DocumentStore(Protocol):
    """Interface for document store liveness and collection counts."""

    def is_alive(self) -> bool: ...

    def start(self) -> asyncio.Task[bool]: ...

    async def wait_ready(self) -> bool: ...

    async def count_documents(self, collection_name: str) -> int: ...

    async def nb_users(self) -> int: ...

    async def nb_files(self) -> int: ...

    async def close(self) -> None: ...
