"""
Store des versions de pitch.

Chaque mutation d'un pitch produit une version immuable: numéro séquentiel par pitch, snapshot
de l'état précédent, diff catégorisé et description. L'allocation du numéro et l'insertion ont
lieu dans une même transaction, protégée par la contrainte unique `(pitch_id, version_number)`
et rejouée un nombre borné de fois en cas de contention.

La rétention est planifiée après le commit uniquement; ses échecs ne remontent jamais.
"""

from __future__ import annotations

import random
import time
import uuid
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import Any

import structlog
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session, sessionmaker

from pitch_history.app.metrics import (
    RETENTION_FAILURES,
    VERSION_TXN_EXHAUSTED,
    VERSION_TXN_RETRIES,
    VERSIONS_CREATED,
)
from pitch_history.domain.contracts import RetentionScheduler
from pitch_history.domain.diff_engine import compute_diff, describe_changes, detect_change_type
from pitch_history.domain.errors import NotFoundError, TransientError
from pitch_history.domain.pitch_fields import PitchField
from pitch_history.domain.snapshot import sanitize_snapshot
from pitch_history.domain.version import (
    ChangeType,
    Version,
    VersionChanges,
    VersionPreview,
    VersionSummary,
)
from pitch_history.infra.ops.post_commit import register_action_after_commit
from pitch_history.infra.repo.db import session_scope
from pitch_history.infra.repo.version_repo import PitchVersionRepo

UNKNOWN_ACTOR_NAME = "Unknown"

# Messages de pilote signalant un verrou ou une sérialisation concurrente
_LOCK_MARKERS = (
    "database is locked",
    "database table is locked",
    "deadlock",
    "could not serialize",
    "lock wait timeout",
    "lock timeout",
)
_UNIQUE_MARKERS = ("unique", "duplicate")


def calculate_retry_delay(attempt: int, base_delay: float, max_delay: float) -> float:
    """Délai exponentiel avec jitter (x0.5 à x1.5), plafonné à `max_delay`."""
    delay = base_delay * (2**attempt)
    delay *= random.uniform(0.5, 1.5)
    return min(delay, max_delay)


def is_contention_error(exc: Exception) -> bool:
    """Vrai si l'échec vient d'une écriture concurrente et mérite une nouvelle tentative.

    Une violation de la contrainte unique `(pitch_id, version_number)` ou un verrou occupé le
    sont; un schéma absent ou une contrainte d'intégrité d'une autre nature ne le sont pas.
    """
    message = str(getattr(exc, "orig", None) or exc).lower()
    if isinstance(exc, IntegrityError):
        return any(marker in message for marker in _UNIQUE_MARKERS)
    if isinstance(exc, OperationalError):
        return any(marker in message for marker in _LOCK_MARKERS)
    return False


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _new_version_id() -> str:
    return uuid.uuid4().hex


class VersionStore:
    """Journal append-only des versions, une transaction par création."""

    def __init__(
        self,
        session_factory: sessionmaker,
        scheduler: RetentionScheduler | None = None,
        *,
        max_attempts: int = 5,
        base_delay: float = 0.05,
        max_delay: float = 1.0,
        list_default_limit: int = 50,
        list_max_limit: int = 100,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], datetime] = _utcnow,
        id_factory: Callable[[], str] = _new_version_id,
    ) -> None:
        self._session_factory = session_factory
        self._scheduler = scheduler
        self._max_attempts = max(1, max_attempts)
        self._base_delay = base_delay
        self._max_delay = max_delay
        self._list_default_limit = list_default_limit
        self._list_max_limit = list_max_limit
        self._sleep = sleep
        self._clock = clock
        self._id_factory = id_factory
        self._log = structlog.get_logger(__name__).bind(component="version_store")

    # ------------------------------------------------------------------ write path

    def create_version(
        self,
        pitch_id: str,
        pre_image: Mapping[str, Any] | None,
        actor_id: str,
        actor_name: str | None,
        post_image_patch: Mapping[str, Any] | None = None,
        change_type: ChangeType | str | None = None,
        owner_id: str | None = None,
    ) -> Version:
        """Enregistre une version de `pitch_id` à partir de son état avant mutation.

        Args:
            pitch_id: pitch concerné.
            pre_image: état avant mutation (vide/None pour la première version).
            actor_id: auteur de la mutation.
            actor_name: nom affiché de l'auteur ("Unknown" si vide).
            post_image_patch: champs appliqués par la mutation.
            change_type: type imposé; détecté depuis le diff sinon.
            owner_id: propriétaire pour la rétention (sinon `userId` du pré-état, sinon l'auteur).

        Raises:
            TransientError: contention persistante après `max_attempts` tentatives.
        """
        pre = dict(pre_image or {})
        patch = dict(post_image_patch or {})
        owner = owner_id or pre.get(PitchField.USER_ID.value) or actor_id
        name = actor_name or UNKNOWN_ACTOR_NAME

        attempt = 0
        while True:
            attempt += 1
            session = self._session_factory()
            try:
                version = self._insert_next(session, pitch_id, pre, patch, actor_id, name, change_type)
                if self._scheduler is not None:
                    register_action_after_commit(
                        session, self._schedule_retention, pitch_id, str(owner)
                    )
                session.commit()
            except (IntegrityError, OperationalError) as exc:
                session.rollback()
                if not is_contention_error(exc):
                    raise
                if attempt >= self._max_attempts:
                    VERSION_TXN_EXHAUSTED.inc()
                    self._log.error(
                        "version_txn_exhausted",
                        pitch_id=pitch_id,
                        attempts=attempt,
                        error=type(exc).__name__,
                    )
                    raise TransientError(
                        "Could not allocate a version number, retry later", attempts=attempt
                    ) from exc
                delay = calculate_retry_delay(attempt - 1, self._base_delay, self._max_delay)
                VERSION_TXN_RETRIES.inc()
                self._log.warning(
                    "version_txn_retry",
                    pitch_id=pitch_id,
                    attempt=attempt,
                    delay_s=round(delay, 3),
                    error=type(exc).__name__,
                )
                self._sleep(delay)
                continue
            except Exception:
                session.rollback()
                raise
            finally:
                session.close()

            VERSIONS_CREATED.labels(type=version.changes.type.value).inc()
            self._log.info(
                "version_created",
                pitch_id=pitch_id,
                version_number=version.version_number,
                type=version.changes.type.value,
                attempts=attempt,
            )
            return version

    def _insert_next(
        self,
        session: Session,
        pitch_id: str,
        pre: dict[str, Any],
        patch: dict[str, Any],
        actor_id: str,
        actor_name: str,
        change_type: ChangeType | str | None,
    ) -> Version:
        repo = PitchVersionRepo(session)
        number = repo.max_version_number(pitch_id) + 1

        diff = compute_diff(pre, {**pre, **patch})
        if change_type is not None:
            kind = ChangeType(change_type)
        elif not pre:
            kind = ChangeType.CREATED
        else:
            kind = detect_change_type(diff)

        version = Version(
            version_id=self._id_factory(),
            pitch_id=pitch_id,
            version_number=number,
            changes=VersionChanges(
                type=kind,
                user_id=actor_id,
                user_name=actor_name,
                description=describe_changes(diff, kind),
                diff=diff,
            ),
            created_at=self._clock(),
            created_by=actor_id,
            snapshot=sanitize_snapshot(pre),
        )
        repo.add(version)
        return version

    def _schedule_retention(self, pitch_id: str, owner_id: str) -> None:
        try:
            self._scheduler.schedule(pitch_id, owner_id)  # type: ignore[union-attr]
        except Exception:
            RETENTION_FAILURES.labels(stage="dispatch").inc()
            self._log.exception("retention_schedule_failed", pitch_id=pitch_id, owner_id=owner_id)

    # ------------------------------------------------------------------ read path

    def clamp_limit(self, limit: int | None) -> int:
        if not limit or limit < 1:
            return self._list_default_limit
        return min(limit, self._list_max_limit)

    def list_versions(self, pitch_id: str, limit: int | None = None) -> list[VersionSummary]:
        """Versions du pitch, plus récente d'abord, sans snapshot."""
        with session_scope(self._session_factory) as session:
            return PitchVersionRepo(session).list_for_pitch(pitch_id, self.clamp_limit(limit))

    def get_version(self, version_id: str) -> Version:
        with session_scope(self._session_factory) as session:
            version = PitchVersionRepo(session).get(version_id)
        if version is None:
            raise NotFoundError("Version not found")
        return version

    def preview_version(self, version_id: str) -> VersionPreview:
        return VersionPreview.from_version(self.get_version(version_id))

    # ------------------------------------------------------------------ retention hooks

    def count_versions(self, pitch_id: str) -> int:
        with session_scope(self._session_factory) as session:
            return PitchVersionRepo(session).count(pitch_id)

    def delete_oldest(self, pitch_id: str, count: int) -> int:
        with session_scope(self._session_factory) as session:
            return PitchVersionRepo(session).delete_oldest(pitch_id, count)
