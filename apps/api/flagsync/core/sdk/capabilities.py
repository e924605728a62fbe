"""
SDK Capability Registry.

Catalog of the protocol features an SDK build can advertise, plus the
declarative table that maps each capability to the rule keys it unlocks.

Usage:
    from flagsync.core.sdk import CapabilitySet

    caps = CapabilitySet.parse(["bucketingV2", "prerequisites"])
    caps.prerequisites          # True
    caps.allowed_rule_keys()    # strict keys + bucketingV2 + prerequisite keys

    # Tags from an unknown (newer) SDK are ignored, never rejected
    CapabilitySet.from_header("redirects, someFutureThing").tags()
    # ("redirects",)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable

import structlog

logger = structlog.get_logger()


class SDKCapability(str, Enum):
    """Capability tags understood by the payload negotiation."""
    BUCKETING_V2 = "bucketingV2"
    STICKY_BUCKETING = "stickyBucketing"
    PREREQUISITES = "prerequisites"
    SAVED_GROUP_REFERENCES = "savedGroupReferences"
    REDIRECTS = "redirects"
    LOOSE_UNMARSHALLING = "looseUnmarshalling"


@dataclass(frozen=True)
class CapabilityInfo:
    tag: SDKCapability
    description: str


CATALOG_VERSION = 1

CAPABILITY_CATALOG: dict[SDKCapability, CapabilityInfo] = {
    info.tag: info
    for info in (
        CapabilityInfo(
            SDKCapability.BUCKETING_V2,
            "Hash v2, explicit bucket ranges, filters and experiment metadata",
        ),
        CapabilityInfo(
            SDKCapability.STICKY_BUCKETING,
            "Persisted bucket assignments with fallback attributes",
        ),
        CapabilityInfo(
            SDKCapability.PREREQUISITES,
            "Rules and experiments gated on the state of other features",
        ),
        CapabilityInfo(
            SDKCapability.SAVED_GROUP_REFERENCES,
            "Resolves $ingroup/$ningroup against shipped saved groups",
        ),
        CapabilityInfo(
            SDKCapability.REDIRECTS,
            "URL redirect auto experiments",
        ),
        CapabilityInfo(
            SDKCapability.LOOSE_UNMARSHALLING,
            "Tolerates unknown fields in feature definitions",
        ),
    )
}


# ============================================================
# PAYLOAD KEY TIERS
# ============================================================

STRICT_FEATURE_KEYS: tuple[str, ...] = ("defaultValue", "rules")

STRICT_RULE_KEYS: tuple[str, ...] = (
    "key",
    "variations",
    "weights",
    "coverage",
    "condition",
    "namespace",
    "force",
    "hashAttribute",
)

BUCKETING_V2_KEYS: tuple[str, ...] = (
    "hashVersion",
    "range",
    "ranges",
    "meta",
    "filters",
    "seed",
    "name",
    "phase",
)

STICKY_BUCKETING_KEYS: tuple[str, ...] = (
    "fallbackAttribute",
    "disableStickyBucketing",
    "bucketVersion",
    "minBucketVersion",
)

PREREQUISITE_KEYS: tuple[str, ...] = ("parentConditions",)

# Order here fixes the key order of scrubbed rules
RULE_KEY_TIERS: tuple[tuple[SDKCapability, tuple[str, ...]], ...] = (
    (SDKCapability.BUCKETING_V2, BUCKETING_V2_KEYS),
    (SDKCapability.STICKY_BUCKETING, STICKY_BUCKETING_KEYS),
    (SDKCapability.PREREQUISITES, PREREQUISITE_KEYS),
)


# ============================================================
# CAPABILITY SET
# ============================================================

@dataclass(frozen=True)
class CapabilitySet:
    """
    Immutable, order-independent set of SDK capabilities.

    Build with `parse()` or `from_header()` so unknown tags are dropped.
    """
    capabilities: frozenset[SDKCapability] = frozenset()

    @classmethod
    def parse(cls, tags: Iterable[str]) -> "CapabilitySet":
        """Build a set from raw tags, ignoring any tag not in the catalog."""
        known: set[SDKCapability] = set()
        for tag in tags:
            try:
                known.add(SDKCapability(tag))
            except ValueError:
                logger.debug("Ignoring unknown SDK capability", capability=tag)
        return cls(frozenset(known))

    @classmethod
    def from_header(cls, value: str | None) -> "CapabilitySet":
        """Parse a comma-separated tag list (header or query string)."""
        if not value:
            return cls()
        return cls.parse(part.strip() for part in value.split(",") if part.strip())

    @classmethod
    def coerce(cls, value: "CapabilitySet | Iterable[str]") -> "CapabilitySet":
        if isinstance(value, CapabilitySet):
            return value
        return cls.parse(value)

    def supports(self, capability: SDKCapability | str) -> bool:
        try:
            return SDKCapability(capability) in self.capabilities
        except ValueError:
            return False

    @property
    def bucketing_v2(self) -> bool:
        return SDKCapability.BUCKETING_V2 in self.capabilities

    @property
    def sticky_bucketing(self) -> bool:
        return SDKCapability.STICKY_BUCKETING in self.capabilities

    @property
    def prerequisites(self) -> bool:
        return SDKCapability.PREREQUISITES in self.capabilities

    @property
    def saved_group_references(self) -> bool:
        return SDKCapability.SAVED_GROUP_REFERENCES in self.capabilities

    @property
    def redirects(self) -> bool:
        return SDKCapability.REDIRECTS in self.capabilities

    @property
    def loose_unmarshalling(self) -> bool:
        return SDKCapability.LOOSE_UNMARSHALLING in self.capabilities

    def allowed_rule_keys(self) -> tuple[str, ...]:
        """Strict rule keys followed by every tier this set unlocks."""
        keys = list(STRICT_RULE_KEYS)
        for capability, tier_keys in RULE_KEY_TIERS:
            if capability in self.capabilities:
                keys.extend(tier_keys)
        return tuple(keys)

    def tags(self) -> tuple[str, ...]:
        return tuple(sorted(c.value for c in self.capabilities))

    def __contains__(self, item: object) -> bool:
        return isinstance(item, (str, SDKCapability)) and self.supports(item)

    def __len__(self) -> int:
        return len(self.capabilities)
