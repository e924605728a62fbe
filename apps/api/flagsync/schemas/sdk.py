"""
SDK wire schemas.

Validates payloads crossing a process boundary: the fetch endpoint body,
the persisted cache record and the definition store seed document.
Feature and experiment bodies stay free-form JSON; only the envelope is typed.
"""

from datetime import datetime
from typing import Any
from pydantic import BaseModel, ConfigDict, Field, field_validator

from flagsync.utils.timezone import to_utc


class FeatureApiResponse(BaseModel):
    """Body of GET {host}/api/features/{clientKey}."""
    model_config = ConfigDict(extra="allow")

    features: dict[str, dict[str, Any]]
    experiments: list[dict[str, Any]] | None = None
    encryptedFeatures: str | None = None
    savedGroups: dict[str, list[str]] | None = None


class PersistedCacheEntry(BaseModel):
    """Value half of one `[key, {data, staleAt}]` persisted pair."""
    data: dict[str, Any]
    staleAt: datetime

    @field_validator("staleAt")
    @classmethod
    def ensure_utc(cls, v: datetime) -> datetime:
        return to_utc(v)


class SDKConnectionSchema(BaseModel):
    """Client key registration as it appears in a seed document."""
    key: str = Field(min_length=1)
    name: str = ""
    projects: list[str] = Field(default_factory=list)
    capabilities: list[str] = Field(default_factory=list)
    includeExperiments: bool = True


class DefinitionSeed(BaseModel):
    """Seed document for the in-memory definition store."""
    connections: list[SDKConnectionSchema] = Field(default_factory=list)
    features: dict[str, dict[str, Any]] = Field(default_factory=dict)
    experiments: list[dict[str, Any]] = Field(default_factory=list)
    savedGroups: dict[str, list[str]] = Field(default_factory=dict)
