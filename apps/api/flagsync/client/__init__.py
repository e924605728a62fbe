"""
SDK-side feature repository.

Usage:
    from flagsync.client import FeatureRepository

    repository = FeatureRepository()
    payload = await repository.load("https://cdn.example.com", "sdk-abc123")
"""

from .repository import (
    CacheEntry,
    FeatureRepository,
    make_repository_key,
    DEFAULT_STORAGE_KEY,
    DEFAULT_TTL,
)
from .factory import create_feature_repository

__all__ = [
    "CacheEntry",
    "FeatureRepository",
    "make_repository_key",
    "create_feature_repository",
    "DEFAULT_STORAGE_KEY",
    "DEFAULT_TTL",
]
