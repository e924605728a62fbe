"""
Build a FeatureRepository from application settings.
"""

from flagsync.core.config import Settings, get_settings
from flagsync.implementations.storage import create_storage

from .repository import FeatureRepository


async def create_feature_repository(settings: Settings | None = None) -> FeatureRepository:
    """
    Create the process-wide repository described by SDK_CACHE_* settings.

    Usage:
        repository = await create_feature_repository()
        await repository.initialize()
    """
    settings = settings or get_settings()
    cache = settings.sdk_cache

    storage = await create_storage(settings)
    return FeatureRepository(
        storage=storage,
        ttl=cache.ttl,
        storage_key=cache.storage_key,
        timeout=cache.fetch_timeout,
    )
