"""
FastAPI dependencies for the SDK payload endpoint.

Usage:
    from flagsync.core.features import PayloadService

    @router.get("/{client_key}")
    async def sdk_payload(client_key: str, service: PayloadService):
        return await service.get_payload(client_key)
"""

from typing import Annotated

from fastapi import Depends

from flagsync.core.config import settings

from .interfaces import DefinitionStore
from .service import SDKPayloadService
from .backends.memory import MemoryDefinitionStore


# ============================================================
# STORE FACTORY
# ============================================================

# In-memory store singleton (for development)
_memory_store: MemoryDefinitionStore | None = None


def get_memory_store() -> MemoryDefinitionStore:
    """Get or create memory store singleton, seeded from FEATURE_SEED_FILE if set."""
    global _memory_store
    if _memory_store is None:
        _memory_store = MemoryDefinitionStore()
        if settings.features.seed_file:
            _memory_store.load_file(settings.features.seed_file)
    return _memory_store


async def get_definition_store() -> DefinitionStore:
    """
    Get definition store based on configuration.

    Uses FEATURE_BACKEND setting:
    - "memory": In-memory (development/testing)
    """
    backend_type = settings.features.backend

    if backend_type != "memory":
        raise RuntimeError(f"Unsupported definition store backend: {backend_type}")
    return get_memory_store()


# ============================================================
# PAYLOAD SERVICE DEPENDENCY
# ============================================================

async def get_payload_service(
    store: DefinitionStore = Depends(get_definition_store),
) -> SDKPayloadService:
    """Get payload service instance."""
    return SDKPayloadService(store)


# Type alias for cleaner injection
PayloadService = Annotated[SDKPayloadService, Depends(get_payload_service)]
