"""
Limites de rétention des versions par plan d'abonnement.

Table immuable plan → nombre maximal de versions conservées par pitch. La valeur
`UNLIMITED_VERSIONS` désactive l'élagage pour le plan concerné.
"""

# ============================================================
# Module : pitch_history/domain/plan_tiers.py
# Objet  : Table plan → limite de versions (lecture seule).
# ============================================================

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

UNLIMITED_VERSIONS = -1
DEFAULT_PLAN_TIER = "starter"

VERSION_LIMITS: Mapping[str, int] = MappingProxyType(
    {
        "free": 3,
        "starter": 3,
        "growth": 30,
        "scale": 100,
        "enterprise": 100,
    }
)


def normalize_plan_tier(plan: Any, default: str = DEFAULT_PLAN_TIER) -> str:
    """Extrait le nom du plan d'un enregistrement utilisateur.

    Le plan peut être stocké sous forme de chaîne (`"growth"`) ou d'objet (`{"tier": "growth"}`);
    toute autre forme retombe sur `default`.
    """
    if isinstance(plan, str) and plan.strip():
        return plan.strip().lower()
    if isinstance(plan, Mapping):
        tier = plan.get("tier")
        if isinstance(tier, str) and tier.strip():
            return tier.strip().lower()
    return default


def is_known_tier(tier: str, limits: Mapping[str, int] = VERSION_LIMITS) -> bool:
    return tier in limits


def resolve_version_limit(
    tier: str | None,
    limits: Mapping[str, int] = VERSION_LIMITS,
    default_tier: str = DEFAULT_PLAN_TIER,
) -> int:
    """Retourne la limite de versions d'un plan; un plan inconnu prend la limite par défaut."""
    if tier and tier in limits:
        return int(limits[tier])
    return int(limits.get(default_tier, VERSION_LIMITS[DEFAULT_PLAN_TIER]))
