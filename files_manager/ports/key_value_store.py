"""Port: key-value store façade. Implementations live in infrastructure."""
from __future__ import annotations

import asyncio
from typing import Any, Protocol


class KeyValueStore(Protocol):
    """Interface for key-value liveness and get / set-with-expiry / delete.

    None of the data operations raise on backend failure.
    """

    def is_alive(self) -> bool: ...

    def start(self) -> asyncio.Task[bool]: ...

    async def wait_ready(self) -> bool: ...

    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: Any, duration: int) -> None: ...

    async def delete(self, key: str) -> None: ...

    async def close(self) -> None: ...
