"""
SDK Feature Payloads.

Serves canonical feature and experiment definitions to SDKs, scrubbed for
each SDK's capability set.

Usage:
    from flagsync.core.features import PayloadService

    @router.get("/{client_key}")
    async def sdk_payload(client_key: str, service: PayloadService):
        return await service.get_payload(client_key)

Seeding the development store:
    from flagsync.core.features import SDKConnection, get_memory_store

    get_memory_store().seed(
        connections=[SDKConnection(key="sdk-abc", capabilities=["bucketingV2"])],
        features={"new_checkout": {"defaultValue": False, "rules": []}},
    )
"""

from .interfaces import (
    SDKConnection,
    ConnectionNotFound,
    DefinitionStore,
    PayloadServiceBase,
)

from .service import SDKPayloadService

from .dependencies import (
    PayloadService,
    get_payload_service,
    get_definition_store,
    get_memory_store,
)

from .backends import (
    MemoryDefinitionStore,
)

__all__ = [
    # Interfaces
    "SDKConnection",
    "ConnectionNotFound",
    "DefinitionStore",
    "PayloadServiceBase",
    # Service
    "SDKPayloadService",
    # Dependencies
    "PayloadService",
    "get_payload_service",
    "get_definition_store",
    "get_memory_store",
    # Backends
    "MemoryDefinitionStore",
]
