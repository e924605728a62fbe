"""
Durable key-value storage protocol.

Backs the SDK feature cache across process restarts, the same role
`localStorage` plays in a browser.

Implementations: MemoryStorage, LocalFileStorage, RedisStorage
"""
from __future__ import annotations

from typing import Protocol


class PersistentStorage(Protocol):
    """
    Protocol for durable string slots keyed by name.

    Example implementations:
    - MemoryStorage: Process-local dict (testing/dev)
    - LocalFileStorage: One file per key on local disk
    - RedisStorage: Shared Redis instance
    """

    async def get_item(self, key: str) -> str | None:
        """Read a slot. Returns None if it was never written."""
        ...

    async def set_item(self, key: str, value: str) -> None:
        """Write (or overwrite) a slot."""
        ...

    async def remove_item(self, key: str) -> None:
        """Remove a slot. Missing keys are ignored."""
        ...
