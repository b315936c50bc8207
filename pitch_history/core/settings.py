"""Définition et chargement des paramètres de configuration applicative.

Objectif du module
------------------
- Centraliser les paramètres (env/.env) via Pydantic Settings
- Résoudre le fichier `.env` à utiliser selon la stratégie: ENV_FILE > .env.{APP_ENV} > .env
"""

import os
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

# Détermination du fichier .env à utiliser avec priorité:
# 1) ENV_FILE (chemin explicite)
# 2) .env.{APP_ENV} si présent
# 3) .env (défaut)
_cwd = Path.cwd()
_env_file_from_env = os.getenv("ENV_FILE")
if _env_file_from_env:
    _ENV_FILE_PATH = _env_file_from_env
else:
    _app_env = os.getenv("APP_ENV", "dev")
    _candidate_specific = _cwd / f".env.{_app_env}"
    _candidate_default = _cwd / ".env"
    if _candidate_specific.exists():
        _ENV_FILE_PATH = _candidate_specific
    else:
        _ENV_FILE_PATH = _candidate_default


class Settings(BaseSettings):
    """Modèle de configuration chargé depuis l'environnement et .env."""

    model_config = SettingsConfigDict(
        env_file=_ENV_FILE_PATH,
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=False,
    )
    APP_NAME: str = "pitch-history"
    APP_ENV: str = "dev"
    APP_DEBUG: bool = True

    DATABASE_URL: str = "sqlite+pysqlite:///./pitch_versions.db"
    REDIS_URL: str | None = None
    REQUIRE_REDIS: bool = False
    CELERY_BROKER_URL: str = "redis://redis:6379/0"
    CELERY_RESULT_BACKEND: str = "redis://redis:6379/1"

    # JWT (jetons émis par le service d'authentification amont)
    JWT_SECRET: str = "dev-secret-change-me"
    JWT_ALG: str = "HS256"

    # Allocation des numéros de version (retry borné autour de la transaction)
    VERSION_TXN_MAX_ATTEMPTS: int = 5
    VERSION_TXN_BASE_DELAY_S: float = 0.05
    VERSION_TXN_MAX_DELAY_S: float = 1.0

    # Listing
    VERSION_LIST_DEFAULT_LIMIT: int = 50
    VERSION_LIST_MAX_LIMIT: int = 100

    # Rétention: "celery" (worker) | "local" (file bornée + thread)
    RETENTION_DISPATCH: Literal["celery", "local"] = "celery"
    RETENTION_QUEUE_MAXSIZE: int = 256
    DEFAULT_PLAN_TIER: str = "starter"


def get_settings() -> Settings:
    """Construit et retourne la configuration de l'application."""
    return Settings()
