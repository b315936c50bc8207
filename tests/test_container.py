"""Tests du câblage du conteneur applicatif."""

from __future__ import annotations

import pytest

from pitch_history.core.container import Container
from pitch_history.core.settings import Settings
from pitch_history.infra.ops.retention_dispatch import (
    CeleryRetentionDispatcher,
    LocalRetentionDispatcher,
)


def _settings(**overrides) -> Settings:
    base = {"DATABASE_URL": "sqlite+pysqlite:///:memory:", "REDIS_URL": None}
    return Settings(**{**base, **overrides})


def test_local_dispatch_wires_retention_end_to_end(tmp_path):
    # base fichier: le worker de rétention utilise sa propre connexion
    db_url = f"sqlite+pysqlite:///{tmp_path / 'versions.db'}"
    c = Container(
        _settings(DATABASE_URL=db_url, RETENTION_DISPATCH="local", DEFAULT_PLAN_TIER="free")
    )
    c.init_schema()
    assert isinstance(c.retention_dispatcher, LocalRetentionDispatcher)
    assert c.storage_backend == "memory"

    pitch = {"id": "p1", "userId": "u1", "level": 0}
    for n in range(5):
        c.version_store.create_version("p1", {**pitch, "level": n}, "u1", "J", {"level": n + 1})
    c.retention_dispatcher.join()
    c.retention_dispatcher.stop()

    assert c.version_store.count_versions("p1") == 3


def test_celery_dispatch_mode():
    c = Container(_settings(RETENTION_DISPATCH="celery"))
    assert isinstance(c.retention_dispatcher, CeleryRetentionDispatcher)


def test_require_redis_without_url_fails():
    with pytest.raises(RuntimeError):
        Container(_settings(REQUIRE_REDIS=True))
