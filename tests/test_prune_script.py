"""Tests du script de rétention manuelle."""

from __future__ import annotations

from types import SimpleNamespace

from fakes import FakePlanLookup
from pitch_history.domain.retention import RetentionManager
from scripts.prune_versions import main


def test_prune_script_deletes_excess(version_store, capsys):
    for n in range(5):
        version_store.create_version("p1", {"userId": "u1", "level": n}, "u1", "J", {"level": n + 1})
    container = SimpleNamespace(
        version_store=version_store,
        retention=RetentionManager(version_store, FakePlanLookup({"u1": "free"})),
    )

    assert main(["p1", "u1"], container=container) == 2
    assert "deleted=2" in capsys.readouterr().out
    assert version_store.count_versions("p1") == 3


def test_prune_script_dry_run(version_store, capsys):
    version_store.create_version("p1", {"userId": "u1"}, "u1", "J", {"level": 1})
    container = SimpleNamespace(
        version_store=version_store,
        retention=RetentionManager(version_store, FakePlanLookup({"u1": "growth"})),
    )

    assert main(["p1", "u1", "--dry-run"], container=container) == 0
    assert "versions=1 limit=30" in capsys.readouterr().out
    assert version_store.count_versions("p1") == 1
