"""
Tests for SDK payload scrubbing.
"""

import copy
import itertools
import json

import pytest

from flagsync.core.sdk import (
    CapabilitySet,
    SDKCapability,
    STRICT_FEATURE_KEYS,
    scrub_experiments,
    scrub_features,
    scrub_id_lists,
)

ALL_CAPABILITIES = [c.value for c in SDKCapability]
MODERN = [
    "bucketingV2",
    "stickyBucketing",
    "prerequisites",
    "savedGroupReferences",
    "redirects",
]


def all_capability_sets():
    for size in range(len(ALL_CAPABILITIES) + 1):
        for combo in itertools.combinations(ALL_CAPABILITIES, size):
            yield list(combo)


# ============================================================
# FEATURES
# ============================================================


def test_legacy_sdk_gets_strict_payload(features, id_lists):
    """No capabilities: strict keys, inlined groups, no prerequisites."""
    result = scrub_features(features, [], id_lists)

    assert result == {
        "checkout_v2": {
            "defaultValue": False,
            "rules": [
                {
                    "key": "checkout-exp",
                    "variations": [False, True],
                    "weights": [0.5, 0.5],
                    "coverage": 1,
                    "condition": {"id": {"$in": ["u1", "u2"]}},
                    "hashAttribute": "id",
                },
                {"condition": {"country": "US"}, "force": False},
            ],
        },
        "dark_mode": {"defaultValue": True},
    }


def test_gated_feature_removed_entirely():
    """A gating prerequisite makes the whole feature undeliverable."""
    features = {
        "f": {
            "defaultValue": 1,
            "rules": [
                {
                    "key": "r1",
                    "parentConditions": [{"id": "p", "condition": {}, "gate": True}],
                    "hashVersion": 2,
                }
            ],
        }
    }

    assert scrub_features(features, [], {}) == {}


def test_modern_sdk_keeps_tier_fields_and_references(features, id_lists):
    result = scrub_features(features, MODERN, id_lists)

    rule = result["checkout_v2"]["rules"][0]
    assert rule["condition"] == {"id": {"$ingroup": "beta"}}
    assert rule["hashVersion"] == 2
    assert rule["seed"] == "checkout-exp"
    assert rule["fallbackAttribute"] == "deviceId"
    assert rule["bucketVersion"] == 1
    assert "id" not in rule

    assert len(result["checkout_v2"]["rules"]) == 3
    assert result["checkout_v2"]["rules"][1]["parentConditions"]
    assert "gated_banner" in result
    assert "project" not in result["checkout_v2"]


@pytest.mark.parametrize("capabilities", list(all_capability_sets()))
def test_no_prerequisites_means_no_parent_conditions(features, id_lists, capabilities):
    result = scrub_features(features, capabilities, id_lists)

    if "prerequisites" in capabilities:
        return
    assert "gated_banner" not in result
    for feature in result.values():
        for rule in feature.get("rules", []):
            assert not rule.get("parentConditions")


@pytest.mark.parametrize(
    "capabilities",
    [
        [],
        ["bucketingV2"],
        ["stickyBucketing"],
        ["prerequisites"],
        ["bucketingV2", "stickyBucketing"],
        ["bucketingV2", "stickyBucketing", "prerequisites"],
    ],
)
def test_rules_only_contain_allowed_keys(features, id_lists, capabilities):
    allowed = set(CapabilitySet.parse(capabilities).allowed_rule_keys())

    result = scrub_features(features, capabilities, id_lists)

    for feature in result.values():
        assert set(feature) <= set(STRICT_FEATURE_KEYS)
        for rule in feature.get("rules", []):
            assert set(rule) <= allowed


def test_loose_unmarshalling_skips_pruning_but_not_prerequisites(features, id_lists):
    """Unknown fields survive; prerequisite filtering still applies."""
    result = scrub_features(features, ["looseUnmarshalling", "savedGroupReferences"], id_lists)

    expected = copy.deepcopy(features)
    del expected["gated_banner"]
    expected["checkout_v2"]["rules"] = [
        r for r in expected["checkout_v2"]["rules"] if not r.get("parentConditions")
    ]
    assert result == expected


def test_loose_unmarshalling_with_prerequisites_is_unchanged(features, id_lists):
    caps = ["looseUnmarshalling", "prerequisites", "savedGroupReferences"]

    assert scrub_features(features, caps, id_lists) == features


def test_feature_and_rule_order_preserved(features, id_lists):
    result = scrub_features(features, MODERN, id_lists)

    assert list(result) == ["checkout_v2", "gated_banner", "dark_mode"]
    assert [r.get("force") for r in result["checkout_v2"]["rules"]] == [None, True, False]


@pytest.mark.parametrize("capabilities", list(all_capability_sets()))
def test_scrubbing_is_idempotent(features, id_lists, capabilities):
    once = scrub_features(features, capabilities, id_lists)
    twice = scrub_features(once, capabilities, id_lists)

    assert twice == once


def test_output_is_byte_identical_across_calls_and_tag_order(features, id_lists):
    a = scrub_features(features, ["stickyBucketing", "bucketingV2"], id_lists)
    b = scrub_features(copy.deepcopy(features), ["bucketingV2", "stickyBucketing"], id_lists)

    assert json.dumps(a) == json.dumps(b)


def test_canonical_features_not_mutated(features, id_lists):
    original = copy.deepcopy(features)

    scrub_features(features, [], id_lists)
    scrub_features(features, ALL_CAPABILITIES, id_lists)

    assert features == original


def test_unknown_capabilities_are_ignored(features, id_lists):
    assert scrub_features(features, ["teleportation"], id_lists) == scrub_features(
        features, [], id_lists
    )


# ============================================================
# EXPERIMENTS
# ============================================================


def test_legacy_sdk_experiments(experiments, id_lists):
    result = scrub_experiments(experiments, [], id_lists)

    assert [e["key"] for e in result] == ["hero-copy"]
    assert result[0]["condition"] == {"id": {"$nin": ["s1"]}}


def test_redirects_supported(experiments, id_lists):
    result = scrub_experiments(experiments, ["redirects"], id_lists)

    assert [e["key"] for e in result] == ["hero-copy", "new-landing"]


def test_prerequisites_supported_keeps_parent_conditions(experiments, id_lists):
    result = scrub_experiments(experiments, ["prerequisites"], id_lists)

    assert [e["key"] for e in result] == ["hero-copy", "upsell"]
    assert result[1]["parentConditions"] == experiments[2]["parentConditions"]


def test_empty_parent_conditions_are_stripped(id_lists):
    experiments = [{"key": "e1", "variations": [{}, {}], "parentConditions": []}]

    result = scrub_experiments(experiments, [], id_lists)

    assert result == [{"key": "e1", "variations": [{}, {}]}]


def test_full_support_returns_experiments_unchanged(experiments, id_lists):
    result = scrub_experiments(
        experiments, ["prerequisites", "redirects", "savedGroupReferences"], id_lists
    )

    assert result == experiments


def test_full_support_without_group_references_still_resolves(experiments, id_lists):
    """The fast path never ships unresolved group references."""
    result = scrub_experiments(experiments, ["prerequisites", "redirects"], id_lists)

    assert len(result) == 3
    assert result[0]["condition"] == {"id": {"$nin": ["s1"]}}


def test_canonical_experiments_not_mutated(experiments, id_lists):
    original = copy.deepcopy(experiments)

    scrub_experiments(experiments, [], id_lists)

    assert experiments == original


# ============================================================
# SAVED GROUPS
# ============================================================


def test_id_lists_shipped_only_with_group_references(id_lists):
    assert scrub_id_lists(id_lists, ["savedGroupReferences"]) == id_lists
    assert scrub_id_lists(id_lists, ["bucketingV2"]) is None
    assert scrub_id_lists(id_lists, []) is None
