"""
Persistent storage implementations for the SDK feature cache.

Available backends:
- MemoryStorage: Process-local (development/testing)
- LocalFileStorage: Local filesystem
- RedisStorage: Redis (shared between processes)

Usage:
    from flagsync.implementations.storage import create_storage

    storage = await create_storage(settings)
"""

from flagsync.core.config import Settings
from flagsync.core.interfaces.storage import PersistentStorage
from flagsync.implementations.storage.memory import MemoryStorage
from flagsync.implementations.storage.local import LocalFileStorage
from flagsync.implementations.storage.redis import RedisStorage


async def create_storage(settings: Settings) -> PersistentStorage:
    """Build the storage backend selected by SDK_CACHE_STORAGE_BACKEND."""
    config = settings.get_storage_config()
    backend = config["backend"]

    if backend == "file":
        return LocalFileStorage(**config["file"])
    if backend == "redis":
        storage = RedisStorage(**config["redis"])
        await storage.connect()
        return storage
    return MemoryStorage()


__all__ = ["MemoryStorage", "LocalFileStorage", "RedisStorage", "create_storage"]
