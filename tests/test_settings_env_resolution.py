"""
Tests pour la résolution des variables d'environnement.

Ce module teste le chargement des paramètres à partir d'un fichier .env désigné par `ENV_FILE`.
"""

from __future__ import annotations

import importlib
from pathlib import Path


def test_settings_reads_env_file(tmp_path: Path, monkeypatch) -> None:
    """Les valeurs du fichier pointé par ENV_FILE sont appliquées aux settings."""
    env = tmp_path / ".env.custom"
    env.write_text(
        "VERSION_TXN_MAX_ATTEMPTS=7\nVERSION_LIST_MAX_LIMIT=25\nDEFAULT_PLAN_TIER=free\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("ENV_FILE", str(env))

    settings_mod = importlib.import_module("pitch_history.core.settings")
    try:
        importlib.reload(settings_mod)
        s = settings_mod.get_settings()
        assert s.VERSION_TXN_MAX_ATTEMPTS == 7
        assert s.VERSION_LIST_MAX_LIMIT == 25
        assert s.DEFAULT_PLAN_TIER == "free"
        # l'environnement du processus reste prioritaire sur le fichier
        assert s.RETENTION_DISPATCH == "local"
    finally:
        monkeypatch.delenv("ENV_FILE")
        importlib.reload(settings_mod)


def test_defaults() -> None:
    from pitch_history.core.settings import Settings

    s = Settings(_env_file=None)
    assert s.VERSION_TXN_MAX_ATTEMPTS == 5
    assert s.VERSION_LIST_DEFAULT_LIMIT == 50
    assert s.VERSION_LIST_MAX_LIMIT == 100
    assert s.DEFAULT_PLAN_TIER == "starter"
