"""
In-memory persistent storage for development and testing.
"""

from __future__ import annotations


class MemoryStorage:
    """
    Dict-backed storage slots.

    Note: Nothing survives a restart. Useful for tests and for SDK
    processes that do not need a warm cache on startup.

    Usage:
        storage = MemoryStorage()
        await storage.set_item("growthbook:cache:features", "[]")
        raw = await storage.get_item("growthbook:cache:features")
    """

    def __init__(self, initial: dict[str, str] | None = None):
        self.items: dict[str, str] = dict(initial or {})

    async def get_item(self, key: str) -> str | None:
        return self.items.get(key)

    async def set_item(self, key: str, value: str) -> None:
        self.items[key] = value

    async def remove_item(self, key: str) -> None:
        self.items.pop(key, None)

    def clear(self) -> None:
        self.items.clear()
