"""Configuration de test pour pytest avec gestion des chemins.

Ce module configure pytest pour résoudre les imports `pitch_history` en ajoutant la racine du projet
au sys.path, force une configuration de test (SQLite en mémoire, rétention locale) et fournit les
fixtures de persistance communes.
"""

import os
import sys

import pytest

# Ensure project root is on sys.path so that
# imports like `from pitch_history...` resolve.
CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)
# `fakes` est importable depuis les sous-dossiers de tests
if CURRENT_DIR not in sys.path:
    sys.path.insert(0, CURRENT_DIR)

# Le conteneur singleton lit l'environnement à l'import
os.environ["APP_ENV"] = "test"
os.environ["APP_DEBUG"] = "false"
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["RETENTION_DISPATCH"] = "local"
os.environ.pop("REDIS_URL", None)
os.environ.pop("REQUIRE_REDIS", None)

from fakes import FakePlanLookup, RecordingScheduler  # noqa: E402
from pitch_history.infra.repo.db import get_engine, get_session_factory  # noqa: E402
from pitch_history.infra.repo.models import Base  # noqa: E402
from pitch_history.infra.repositories import InMemoryPitchStore  # noqa: E402
from pitch_history.services.version_store import VersionStore  # noqa: E402


@pytest.fixture
def engine():
    """Moteur SQLite en mémoire avec le schéma créé."""
    eng = get_engine("sqlite+pysqlite:///:memory:")
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return get_session_factory(engine)


@pytest.fixture
def scheduler() -> RecordingScheduler:
    return RecordingScheduler()


@pytest.fixture
def version_store(session_factory, scheduler) -> VersionStore:
    """Store de versions sans attente entre retries."""
    return VersionStore(session_factory, scheduler=scheduler, sleep=lambda _s: None)


@pytest.fixture
def pitch_store() -> InMemoryPitchStore:
    return InMemoryPitchStore()


@pytest.fixture
def plans() -> FakePlanLookup:
    return FakePlanLookup()
