"""
Capability-negotiated SDK payloads.

Usage:
    from flagsync.core.sdk import CapabilitySet, scrub_features

    caps = CapabilitySet.from_header("bucketingV2,stickyBucketing")
    features = scrub_features(canonical_features, caps, id_lists)
"""

from .capabilities import (
    SDKCapability,
    CapabilityInfo,
    CapabilitySet,
    CAPABILITY_CATALOG,
    CATALOG_VERSION,
    RULE_KEY_TIERS,
    STRICT_FEATURE_KEYS,
    STRICT_RULE_KEYS,
)

from .walker import (
    recursive_walk,
    replace_id_lists,
)

from .payload import (
    scrub_features,
    scrub_experiments,
    scrub_id_lists,
)

__all__ = [
    # Capabilities
    "SDKCapability",
    "CapabilityInfo",
    "CapabilitySet",
    "CAPABILITY_CATALOG",
    "CATALOG_VERSION",
    "RULE_KEY_TIERS",
    "STRICT_FEATURE_KEYS",
    "STRICT_RULE_KEYS",
    # Walker
    "recursive_walk",
    "replace_id_lists",
    # Scrubbing
    "scrub_features",
    "scrub_experiments",
    "scrub_id_lists",
]
