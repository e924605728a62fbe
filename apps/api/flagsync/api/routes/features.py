"""
SDK feature payload routes.
"""

from typing import Any

from fastapi import APIRouter, HTTPException, Query, Response, status

from flagsync.core.config import settings
from flagsync.core.features import ConnectionNotFound, PayloadService
from flagsync.core.sdk import CapabilitySet

router = APIRouter()


@router.get("/{client_key}")
async def get_sdk_payload(
    client_key: str,
    service: PayloadService,
    response: Response,
    capabilities: str | None = Query(
        default=None,
        description="Comma-separated SDK capability tags; defaults to the connection's",
    ),
) -> dict[str, Any]:
    """
    Get the feature payload for an SDK connection.

    Definitions are scrubbed down to what the capability set can parse.
    Unknown capability tags are ignored.
    """
    caps = CapabilitySet.from_header(capabilities) if capabilities is not None else None

    try:
        payload = await service.get_payload(client_key, caps)
    except ConnectionNotFound:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"SDK connection '{client_key}' not found",
        )

    response.headers["Cache-Control"] = f"public, max-age={settings.features.cache_max_age}"
    return payload
