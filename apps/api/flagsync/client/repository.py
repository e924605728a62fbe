"""
Feature Repository - client-side SDK payload cache.

Keyed by (api host, client key). Supports:
- Fetch coalescing: at most one request in flight per key, across threads
  and event loops
- Stale-while-revalidate: cached payloads are served immediately and
  refreshed in the background once past their TTL
- Persistence: the cache is written to durable storage after every
  successful fetch and reloaded once on first use

Usage:
    repository = FeatureRepository(storage=LocalFileStorage("./.flagsync"))

    payload = await repository.load("https://cdn.example.com", "sdk-abc123")
    if payload is not None:
        features = payload["features"]

    await repository.close()
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import json
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Union

import httpx
import structlog
from pydantic import ValidationError

from flagsync.core.interfaces.storage import PersistentStorage
from flagsync.schemas.sdk import FeatureApiResponse, PersistedCacheEntry
from flagsync.utils.timezone import Clock, to_iso8601, utc_now

logger = structlog.get_logger()

RepositoryKey = str
FeatureApiPayload = dict[str, Any]

KEY_SEPARATOR = "||"
DEFAULT_TTL = timedelta(seconds=60)
DEFAULT_STORAGE_KEY = "growthbook:cache:features"


def make_repository_key(api_host: str, client_key: str) -> RepositoryKey:
    """
    Compose the cache key for a payload source.

    Raises:
        ValueError: if either part contains the separator, since two
            different (host, client key) pairs could then share a key
    """
    if KEY_SEPARATOR in api_host or KEY_SEPARATOR in client_key:
        raise ValueError(
            f"api_host and client_key must not contain {KEY_SEPARATOR!r}"
        )
    return f"{api_host}{KEY_SEPARATOR}{client_key}"


def split_repository_key(key: RepositoryKey) -> tuple[str, str]:
    api_host, client_key = key.split(KEY_SEPARATOR, 1)
    return api_host, client_key


@dataclass
class CacheEntry:
    """Cached payload and the moment it should be refreshed."""
    data: FeatureApiPayload
    stale_at: datetime

    def is_stale(self, now: datetime) -> bool:
        return now >= self.stale_at


class FeatureRepository:
    """
    Process-wide SDK payload cache.

    Construct once at startup and share it. All network and storage errors
    are logged and turned into "no data"; callers see the previous cached
    payload or None, never an exception.

    In-flight fetches are tracked as `concurrent.futures.Future`s, so callers
    on other threads (each with its own event loop) join the same fetch. A
    fetch runs on the loop of the caller that started it. Without an explicit
    `http_client`, each event loop gets its own owned client.
    """

    def __init__(
        self,
        storage: PersistentStorage | None = None,
        *,
        ttl: Union[int, timedelta] = DEFAULT_TTL,
        storage_key: str = DEFAULT_STORAGE_KEY,
        clock: Clock = utc_now,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ):
        """
        Initialize the repository.

        Args:
            storage: Durable slot for the serialized cache (None = no persistence)
            ttl: Time before a cached payload is refreshed (seconds or timedelta)
            storage_key: Slot name in `storage`
            clock: Returns the current timezone-aware time
            http_client: Shared client; one per event loop is created (and owned) if omitted
            timeout: Request timeout for owned clients
        """
        self.storage = storage
        self.ttl = ttl if isinstance(ttl, timedelta) else timedelta(seconds=ttl)
        self.storage_key = storage_key
        self._clock = clock
        self._http_client = http_client
        self._timeout = timeout
        self._owned_clients: dict[asyncio.AbstractEventLoop, httpx.AsyncClient] = {}

        self._cache: dict[RepositoryKey, CacheEntry] = {}
        self._active_fetches: dict[RepositoryKey, concurrent.futures.Future] = {}
        self._background_tasks: set[asyncio.Task] = set()
        self._lock = threading.Lock()

        self._initialized: concurrent.futures.Future | None = None

    # ============================================================
    # PUBLIC API
    # ============================================================

    async def load(self, api_host: str, client_key: str) -> FeatureApiPayload | None:
        """
        Get the payload for a client key.

        Never waits on the network when a cached entry exists; a stale entry
        is returned as-is and refreshed in the background.
        """
        key = make_repository_key(api_host, client_key)
        await self.initialize()

        entry = self._cache.get(key)
        if entry is None:
            return await self._fetch(key)

        if entry.is_stale(self._clock()):
            self._start_fetch(key)

        return entry.data

    async def refresh(self, api_host: str, client_key: str) -> FeatureApiPayload | None:
        """Fetch now (joining any in-flight fetch) and wait for the result."""
        key = make_repository_key(api_host, client_key)
        await self.initialize()
        return await self._fetch(key)

    async def clear(self) -> None:
        """Evict every entry and persist the empty cache."""
        await self.initialize()
        self._cache.clear()
        await self._save_persistent_cache()

    def get_entry(self, api_host: str, client_key: str) -> CacheEntry | None:
        return self._cache.get(make_repository_key(api_host, client_key))

    async def wait_for_pending(self) -> None:
        """Wait until every in-flight fetch has settled."""
        while True:
            with self._lock:
                pending = list(self._active_fetches.values())
            if not pending:
                return
            await asyncio.gather(*(asyncio.wrap_future(f) for f in pending))

    async def close(self) -> None:
        """Let pending fetches settle, then release the calling loop's owned client."""
        await self.wait_for_pending()
        loop = asyncio.get_running_loop()
        with self._lock:
            client = self._owned_clients.pop(loop, None)
        if client is not None:
            await client.aclose()

    async def initialize(self) -> None:
        """Seed the cache from durable storage. Runs once per instance."""
        with self._lock:
            done = self._initialized
            owner = done is None
            if owner:
                done = self._initialized = concurrent.futures.Future()
                done.set_running_or_notify_cancel()

        if not owner:
            await asyncio.wrap_future(done)
            return

        try:
            await self._load_persistent_cache()
        finally:
            done.set_result(None)

    # ============================================================
    # FETCHING
    # ============================================================

    async def _fetch(self, key: RepositoryKey) -> FeatureApiPayload | None:
        return await asyncio.wrap_future(self._start_fetch(key))

    def _start_fetch(self, key: RepositoryKey) -> concurrent.futures.Future:
        """Start a fetch for `key`, or return the one already in flight."""
        with self._lock:
            future = self._active_fetches.get(key)
            if future is not None:
                return future
            future = concurrent.futures.Future()
            # Running futures ignore cancel() from a single waiter's wrap_future
            future.set_running_or_notify_cancel()
            self._active_fetches[key] = future

        task = asyncio.get_running_loop().create_task(self._fetch_and_store(key, future))
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)
        task.add_done_callback(self._log_unexpected_failure)
        return future

    async def _fetch_and_store(
        self,
        key: RepositoryKey,
        future: concurrent.futures.Future,
    ) -> None:
        data = None
        try:
            data = await self._fetch_remote(key)
            if data is not None:
                self._cache[key] = CacheEntry(data=data, stale_at=self._clock() + self.ttl)
                await self._save_persistent_cache()
        finally:
            with self._lock:
                self._active_fetches.pop(key, None)
            future.set_result(data)

    async def _fetch_remote(self, key: RepositoryKey) -> FeatureApiPayload | None:
        api_host, client_key = split_repository_key(key)
        url = f"{api_host.rstrip('/')}/api/features/{client_key}"

        try:
            response = await self._client().get(url)
            response.raise_for_status()
            body = response.json()
            FeatureApiResponse.model_validate(body)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning("Feature fetch failed", url=url, error=str(e))
            return None
        except (ValueError, ValidationError) as e:
            logger.warning("Malformed feature payload", url=url, error=str(e))
            return None

        return body

    def _client(self) -> httpx.AsyncClient:
        if self._http_client is not None:
            return self._http_client
        loop = asyncio.get_running_loop()
        with self._lock:
            client = self._owned_clients.get(loop)
            if client is None:
                client = self._owned_clients[loop] = httpx.AsyncClient(timeout=self._timeout)
        return client

    @staticmethod
    def _log_unexpected_failure(task: asyncio.Task) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(
                "Background feature refresh failed",
                error=str(error),
                exc_info=error,
            )

    # ============================================================
    # PERSISTENCE
    # ============================================================

    async def _load_persistent_cache(self) -> None:
        if self.storage is None:
            return

        try:
            raw = await self.storage.get_item(self.storage_key)
        except Exception as e:
            logger.warning("Could not read persisted feature cache", error=str(e))
            return
        if not raw:
            return

        try:
            records = json.loads(raw)
        except ValueError as e:
            logger.warning("Discarding unreadable feature cache", error=str(e))
            return
        if not isinstance(records, list):
            logger.warning("Discarding unreadable feature cache", error="expected a list")
            return

        now = self._clock()
        admitted = 0
        for record in records:
            try:
                key, value = record
                if not isinstance(key, str) or KEY_SEPARATOR not in key:
                    raise ValueError(f"invalid repository key: {key!r}")
                entry = PersistedCacheEntry.model_validate(value)
                FeatureApiResponse.model_validate(entry.data)
            except (TypeError, ValueError, ValidationError) as e:
                logger.warning("Dropping corrupt feature cache entry", error=str(e))
                continue

            if entry.staleAt < now:
                continue
            # Persisted data only seeds the cache; refresh it on next access
            self._cache[key] = CacheEntry(data=entry.data, stale_at=now)
            admitted += 1

        logger.debug("Loaded persisted feature cache", entries=admitted)

    async def _save_persistent_cache(self) -> None:
        if self.storage is None:
            return

        records = [
            [key, {"data": entry.data, "staleAt": to_iso8601(entry.stale_at)}]
            for key, entry in list(self._cache.items())
        ]
        try:
            await self.storage.set_item(self.storage_key, json.dumps(records))
        except Exception as e:
            logger.warning("Could not persist feature cache", error=str(e))
