"""
Gestion de la rétention des versions par plan d'abonnement.

Le `RetentionManager` plafonne le nombre de versions d'un pitch selon le plan de son
propriétaire, en supprimant les plus anciennes (numéros croissants) en un seul lot.

Notes:
- Le plan est résolu via un collaborateur externe; tout échec retombe sur le plan par défaut.
- La rétention tourne hors du chemin d'écriture: ses échecs sont journalisés, jamais propagés
  (voir `safe_cleanup`).
- Une légère obsolescence du comptage (création concurrente) est tolérée: au pire une version de
  plus ou de moins est élaguée.
"""

from __future__ import annotations

from collections.abc import Mapping

import structlog

from pitch_history.app.metrics import RETENTION_FAILURES, VERSIONS_PRUNED
from pitch_history.domain.contracts import PlanLookup, VersionLog
from pitch_history.domain.plan_tiers import (
    DEFAULT_PLAN_TIER,
    UNLIMITED_VERSIONS,
    VERSION_LIMITS,
    is_known_tier,
    resolve_version_limit,
)


class RetentionManager:
    """Applique la limite de versions d'un pitch selon le plan du propriétaire."""

    def __init__(
        self,
        versions: VersionLog,
        plans: PlanLookup,
        limits: Mapping[str, int] = VERSION_LIMITS,
        default_tier: str = DEFAULT_PLAN_TIER,
    ) -> None:
        self._versions = versions
        self._plans = plans
        self._limits = limits
        self._default_tier = default_tier
        self._log = structlog.get_logger(__name__).bind(component="retention")

    def resolve_tier(self, owner_id: str) -> str:
        """Résout le plan du propriétaire; retombe sur le plan par défaut en cas d'échec."""
        try:
            tier = self._plans.get_plan_tier(owner_id)
        except Exception as exc:
            self._log.warning(
                "retention_plan_lookup_failed", owner_id=owner_id, error=type(exc).__name__
            )
            return self._default_tier
        if not tier or not is_known_tier(tier, self._limits):
            self._log.warning("retention_unknown_tier", owner_id=owner_id, tier=tier)
            return self._default_tier
        return tier

    def version_limit(self, owner_id: str) -> int:
        return resolve_version_limit(self.resolve_tier(owner_id), self._limits, self._default_tier)

    def cleanup(self, pitch_id: str, owner_id: str) -> int:
        """Élague les versions excédentaires du pitch.

        Args:
            pitch_id: pitch concerné.
            owner_id: propriétaire (détermine le plan et donc la limite).

        Returns:
            int: nombre de versions supprimées (0 si rien à faire).
        """
        limit = self.version_limit(owner_id)
        if limit == UNLIMITED_VERSIONS:
            self._log.debug("retention_unlimited", pitch_id=pitch_id, owner_id=owner_id)
            return 0
        total = self._versions.count_versions(pitch_id)
        if total <= limit:
            return 0
        excess = total - limit
        deleted = self._versions.delete_oldest(pitch_id, excess)
        VERSIONS_PRUNED.inc(deleted)
        self._log.info(
            "retention_pruned",
            pitch_id=pitch_id,
            owner_id=owner_id,
            limit=limit,
            total=total,
            deleted=deleted,
        )
        return deleted

    def safe_cleanup(self, pitch_id: str, owner_id: str) -> int:
        """Variante isolée de `cleanup`: journalise et absorbe toute erreur."""
        try:
            return self.cleanup(pitch_id, owner_id)
        except Exception:
            RETENTION_FAILURES.labels(stage="cleanup").inc()
            self._log.exception("retention_cleanup_failed", pitch_id=pitch_id, owner_id=owner_id)
            return 0
