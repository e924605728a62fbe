"""
Local filesystem storage backend implementation.
"""

from __future__ import annotations

from urllib.parse import quote

import aiofiles
import aiofiles.os
from pathlib import Path


class LocalFileStorage:
    """
    Local filesystem storage backend.

    Stores each slot as a file in a local directory. Useful for server-side
    SDK processes that should start with a warm cache after a restart.

    Usage:
        storage = LocalFileStorage(base_path="./.flagsync")

        await storage.set_item("growthbook:cache:features", payload)
        raw = await storage.get_item("growthbook:cache:features")
        await storage.remove_item("growthbook:cache:features")
    """

    def __init__(
        self,
        base_path: str = "./.flagsync",
        encoding: str = "utf-8",
    ):
        """
        Initialize local storage backend.

        Args:
            base_path: Directory to store slot files
            encoding: Text encoding for slot contents
        """
        self.base_path = Path(base_path)
        self.encoding = encoding

        # Create base directory if needed
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _full_path(self, key: str) -> Path:
        """Get full filesystem path for key."""
        # Percent-encoding keeps distinct keys distinct and leaves no path separators
        safe_key = quote(key, safe="")
        return self.base_path / f"{safe_key}.json"

    async def get_item(self, key: str) -> str | None:
        full_path = self._full_path(key)
        if not await aiofiles.os.path.exists(full_path):
            return None
        async with aiofiles.open(full_path, "r", encoding=self.encoding) as f:
            return await f.read()

    async def set_item(self, key: str, value: str) -> None:
        full_path = self._full_path(key)
        tmp_path = full_path.with_suffix(full_path.suffix + ".tmp")

        # Write then rename so readers never see a half-written slot
        async with aiofiles.open(tmp_path, "w", encoding=self.encoding) as f:
            await f.write(value)
        await aiofiles.os.replace(tmp_path, full_path)

    async def remove_item(self, key: str) -> None:
        full_path = self._full_path(key)
        if await aiofiles.os.path.exists(full_path):
            await aiofiles.os.remove(full_path)
