"""Key-value store factory. Only place that imports the concrete key-value client."""
from __future__ import annotations

from files_manager.config.settings import Settings
from files_manager.infrastructure.cache.redis.redis_client import RedisClient
from files_manager.ports.key_value_store import KeyValueStore


def create_key_value_store(settings: Settings) -> KeyValueStore:
    return RedisClient(settings)
