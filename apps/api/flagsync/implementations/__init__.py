"""
Backend implementations for core interfaces.
"""

from flagsync.implementations.storage.memory import MemoryStorage
from flagsync.implementations.storage.local import LocalFileStorage
from flagsync.implementations.storage.redis import RedisStorage

__all__ = [
    "MemoryStorage",
    "LocalFileStorage",
    "RedisStorage",
]
