"""
Redis persistent storage backend implementation.
"""

from __future__ import annotations

import redis.asyncio as redis


class RedisStorage:
    """
    Redis-backed storage slots.

    Lets several SDK processes share one warm cache.

    Usage:
        storage = RedisStorage(redis_url="redis://localhost:6379/0", prefix="flagsync:")
        await storage.connect()

        await storage.set_item("growthbook:cache:features", payload)
        raw = await storage.get_item("growthbook:cache:features")
    """

    def __init__(
        self,
        redis_url: str = "redis://localhost:6379/0",
        prefix: str = "",
        client: redis.Redis | None = None,
    ):
        self.redis_url = redis_url
        self.prefix = prefix
        self._client: redis.Redis | None = client

    async def connect(self) -> None:
        """Connect to Redis."""
        if self._client is None:
            self._client = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
            )

    async def disconnect(self) -> None:
        """Disconnect from Redis."""
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def client(self) -> redis.Redis:
        if self._client is None:
            raise RuntimeError("Storage not connected. Call connect() first.")
        return self._client

    def _key(self, key: str) -> str:
        """Prepend prefix to key."""
        return f"{self.prefix}{key}" if self.prefix else key

    async def get_item(self, key: str) -> str | None:
        value = await self.client.get(self._key(key))
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    async def set_item(self, key: str, value: str) -> None:
        await self.client.set(self._key(key), value)

    async def remove_item(self, key: str) -> None:
        await self.client.delete(self._key(key))
