"""
Conteneur d'injection de dépendances et configuration application.

Instancie les composants centraux (settings, moteur SQL, stores, rétention, restauration)
et expose un singleton `container` utilisé par le reste de l'application.
"""

from __future__ import annotations

from pitch_history.core.settings import Settings, get_settings
from pitch_history.domain.restore import RestoreController
from pitch_history.domain.retention import RetentionManager
from pitch_history.infra.ops.retention_dispatch import (
    CeleryRetentionDispatcher,
    LocalRetentionDispatcher,
)
from pitch_history.infra.repo.db import get_engine, get_session_factory
from pitch_history.infra.repo.models import Base
from pitch_history.infra.repositories import (
    InMemoryPitchStore,
    InMemoryUserPlanLookup,
    RedisPitchStore,
    RedisUserPlanLookup,
)
from pitch_history.services.version_store import VersionStore


class Container:
    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self.engine = get_engine(self.settings.DATABASE_URL)
        self.session_factory = get_session_factory(self.engine)

        if self.settings.REDIS_URL:
            try:
                self.pitch_store = RedisPitchStore(self.settings.REDIS_URL)
                self.plan_lookup = RedisUserPlanLookup(
                    self.settings.REDIS_URL, default_tier=self.settings.DEFAULT_PLAN_TIER
                )
                self.storage_backend = "redis"
            except Exception as err:
                if self.settings.REQUIRE_REDIS:
                    raise RuntimeError("Redis required but unavailable") from err
                self._use_memory_stores()
                self.storage_backend = "memory-fallback"
        else:
            if self.settings.REQUIRE_REDIS:
                raise RuntimeError("Redis required but REDIS_URL not set")
            self._use_memory_stores()
            self.storage_backend = "memory"

        if self.settings.RETENTION_DISPATCH == "local":
            # résolution tardive: le manager de rétention dépend du store construit plus bas
            self.retention_dispatcher = LocalRetentionDispatcher(
                lambda pitch_id, owner_id: self.retention.safe_cleanup(pitch_id, owner_id),
                maxsize=self.settings.RETENTION_QUEUE_MAXSIZE,
            )
        else:
            self.retention_dispatcher = CeleryRetentionDispatcher()

        self.version_store = VersionStore(
            self.session_factory,
            scheduler=self.retention_dispatcher,
            max_attempts=self.settings.VERSION_TXN_MAX_ATTEMPTS,
            base_delay=self.settings.VERSION_TXN_BASE_DELAY_S,
            max_delay=self.settings.VERSION_TXN_MAX_DELAY_S,
            list_default_limit=self.settings.VERSION_LIST_DEFAULT_LIMIT,
            list_max_limit=self.settings.VERSION_LIST_MAX_LIMIT,
        )
        self.retention = RetentionManager(
            self.version_store,
            self.plan_lookup,
            default_tier=self.settings.DEFAULT_PLAN_TIER,
        )
        self.restore = RestoreController(self.version_store, self.pitch_store)

    def _use_memory_stores(self) -> None:
        self.pitch_store = InMemoryPitchStore()
        self.plan_lookup = InMemoryUserPlanLookup(default_tier=self.settings.DEFAULT_PLAN_TIER)

    def init_schema(self) -> None:
        """Crée les tables manquantes (dev/tests; la prod passe par Alembic)."""
        Base.metadata.create_all(self.engine)


container = Container()
