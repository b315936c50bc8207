"""Tests de la table plan → limite de versions."""

from __future__ import annotations

import pytest

from pitch_history.domain.plan_tiers import (
    UNLIMITED_VERSIONS,
    VERSION_LIMITS,
    normalize_plan_tier,
    resolve_version_limit,
)


@pytest.mark.parametrize(
    ("tier", "limit"),
    [("free", 3), ("starter", 3), ("growth", 30), ("scale", 100), ("enterprise", 100)],
)
def test_known_limits(tier: str, limit: int) -> None:
    assert resolve_version_limit(tier) == limit


def test_unknown_tier_uses_default_limit() -> None:
    assert resolve_version_limit("platinum") == VERSION_LIMITS["starter"]
    assert resolve_version_limit(None) == VERSION_LIMITS["starter"]


def test_unlimited_sentinel_is_returned_as_is() -> None:
    limits = {"starter": 3, "vip": UNLIMITED_VERSIONS}
    assert resolve_version_limit("vip", limits) == UNLIMITED_VERSIONS


def test_normalize_plan_tier_shapes() -> None:
    assert normalize_plan_tier("Growth") == "growth"
    assert normalize_plan_tier({"tier": "scale"}) == "scale"
    assert normalize_plan_tier({"name": "scale"}) == "starter"
    assert normalize_plan_tier(None, default="free") == "free"
    assert normalize_plan_tier("  ") == "starter"


def test_limits_table_is_immutable() -> None:
    with pytest.raises(TypeError):
        VERSION_LIMITS["starter"] = 10  # type: ignore[index]
