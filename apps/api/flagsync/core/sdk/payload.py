"""
SDK payload scrubbing.

Reduces canonical feature, experiment and saved-group definitions to what an
SDK with a given capability set can safely parse:

- Rule fields outside the enabled key tiers are dropped
- Features gated by prerequisites are removed for SDKs without prerequisites
- Redirect experiments are removed for SDKs without redirects
- Saved-group references are inlined for SDKs that cannot resolve them

All functions are pure: canonical inputs are never mutated, and identical
inputs always produce identical output.
"""

from __future__ import annotations

import copy
from typing import Any, Iterable, Mapping, Sequence, Union

from .capabilities import (
    CapabilitySet,
    PREREQUISITE_KEYS,
    STRICT_FEATURE_KEYS,
)
from .walker import IdLists, recursive_walk, replace_id_lists

FeatureMap = dict[str, dict[str, Any]]
ExperimentList = list[dict[str, Any]]

Capabilities = Union[CapabilitySet, Iterable[str]]


def _pick(source: Mapping[str, Any], keys: Sequence[str]) -> dict[str, Any]:
    return {key: source[key] for key in keys if key in source}


def _has_gating_prerequisite(rule: Mapping[str, Any]) -> bool:
    return any(
        bool(pc.get("gate"))
        for pc in rule.get("parentConditions") or []
        if isinstance(pc, Mapping)
    )


def _has_prerequisites(item: Mapping[str, Any]) -> bool:
    return len(item.get("parentConditions") or []) > 0


# ============================================================
# FEATURES
# ============================================================

def scrub_features(
    features: Mapping[str, Mapping[str, Any]],
    capabilities: Capabilities,
    id_lists: IdLists,
) -> FeatureMap:
    """
    Scrub a feature map for the given capabilities.

    Prerequisite filtering always runs before the loose-unmarshalling
    shortcut; only field-level pruning is skippable.
    """
    caps = CapabilitySet.coerce(capabilities)
    allowed_rule_keys = caps.allowed_rule_keys()

    if caps.saved_group_references:
        scrubbed: FeatureMap = copy.deepcopy(dict(features))
    else:
        scrubbed = recursive_walk(features, replace_id_lists(id_lists))

    if not caps.prerequisites:
        for key in list(scrubbed):
            feature = scrubbed[key]
            rules = feature.get("rules") or []
            if any(_has_gating_prerequisite(rule) for rule in rules):
                del scrubbed[key]
                continue
            if "rules" in feature and feature["rules"] is not None:
                feature["rules"] = [rule for rule in rules if not _has_prerequisites(rule)]

    if caps.loose_unmarshalling:
        return scrubbed

    for key, feature in scrubbed.items():
        feature = _pick(feature, STRICT_FEATURE_KEYS)
        if feature.get("rules") is not None:
            feature["rules"] = [_pick(rule, allowed_rule_keys) for rule in feature["rules"]]
        scrubbed[key] = feature

    return scrubbed


# ============================================================
# EXPERIMENTS
# ============================================================

def scrub_experiments(
    experiments: Sequence[Mapping[str, Any]],
    capabilities: Capabilities,
    id_lists: IdLists,
) -> ExperimentList:
    """Scrub auto experiments for the given capabilities."""
    caps = CapabilitySet.coerce(capabilities)

    if not caps.saved_group_references:
        experiments = recursive_walk(list(experiments), replace_id_lists(id_lists))

    if caps.prerequisites and caps.redirects:
        return list(experiments)

    scrubbed: ExperimentList = []
    for experiment in experiments:
        if not caps.redirects and experiment.get("changeType") == "redirect":
            continue
        if not caps.prerequisites:
            if _has_prerequisites(experiment):
                continue
            experiment = {
                key: value
                for key, value in experiment.items()
                if key not in PREREQUISITE_KEYS
            }
        scrubbed.append(dict(experiment))

    return scrubbed


# ============================================================
# SAVED GROUPS
# ============================================================

def scrub_id_lists(
    id_lists: IdLists,
    capabilities: Capabilities,
) -> dict[str, list[str]] | None:
    """
    Saved groups are shipped only to SDKs that resolve references themselves.

    Everyone else already received inlined memberships from the scrubbers.
    """
    caps = CapabilitySet.coerce(capabilities)
    if not caps.saved_group_references:
        return None
    return {group_id: list(members) for group_id, members in id_lists.items()}
