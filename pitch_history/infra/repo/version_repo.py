# ============================================================
# Module : pitch_history/infra/repo/version_repo.py
# Objet  : Accès SQL pour les versions de pitch.
# Notes  : la session (et donc la transaction) est fournie par l'appelant.
# ============================================================

from __future__ import annotations

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from ...domain.version import Version, VersionChanges, VersionSummary
from .models import PitchVersionORM

_SUMMARY_COLUMNS = (
    PitchVersionORM.id,
    PitchVersionORM.pitch_id,
    PitchVersionORM.version_number,
    PitchVersionORM.changes,
    PitchVersionORM.created_at,
    PitchVersionORM.created_by,
)


class PitchVersionRepo:
    """CRUD des versions de pitch (append-only, suppression par lot pour la rétention)."""

    def __init__(self, session: Session) -> None:
        """Construit le repo avec une session (SQLAlchemy)."""
        self._session = session

    def max_version_number(self, pitch_id: str) -> int:
        """Plus grand numéro de version du pitch, 0 si aucun."""
        stmt = select(func.max(PitchVersionORM.version_number)).where(
            PitchVersionORM.pitch_id == pitch_id
        )
        return int(self._session.execute(stmt).scalar() or 0)

    def add(self, version: Version) -> None:
        """Insère une version. Lève IntegrityError sur doublon (pitch_id, version_number).

        Le rollback est laissé à l'appelant, qui possède la transaction.
        """
        row = PitchVersionORM(
            id=version.version_id,
            pitch_id=version.pitch_id,
            version_number=version.version_number,
            snapshot=version.snapshot,
            changes=version.changes.to_dict(),
            created_at=version.created_at,
            created_by=version.created_by,
        )
        self._session.add(row)
        self._session.flush()

    def get(self, version_id: str) -> Version | None:
        row = self._session.get(PitchVersionORM, version_id)
        if row is None:
            return None
        return Version(
            version_id=row.id,
            pitch_id=row.pitch_id,
            version_number=row.version_number,
            changes=VersionChanges.from_dict(row.changes or {}),
            created_at=row.created_at,
            created_by=row.created_by,
            snapshot=dict(row.snapshot or {}),
        )

    def list_for_pitch(self, pitch_id: str, limit: int) -> list[VersionSummary]:
        """Versions du pitch, plus récente d'abord, sans charger les snapshots."""
        stmt = (
            select(*_SUMMARY_COLUMNS)
            .where(PitchVersionORM.pitch_id == pitch_id)
            .order_by(PitchVersionORM.version_number.desc())
            .limit(limit)
        )
        return [
            VersionSummary(
                version_id=r.id,
                pitch_id=r.pitch_id,
                version_number=r.version_number,
                changes=VersionChanges.from_dict(r.changes or {}),
                created_at=r.created_at,
                created_by=r.created_by,
            )
            for r in self._session.execute(stmt).all()
        ]

    def count(self, pitch_id: str) -> int:
        stmt = select(func.count()).select_from(PitchVersionORM).where(
            PitchVersionORM.pitch_id == pitch_id
        )
        return int(self._session.execute(stmt).scalar() or 0)

    def delete_oldest(self, pitch_id: str, count: int) -> int:
        """Supprime les `count` versions de plus petit numéro. Retourne le nombre supprimé."""
        if count <= 0:
            return 0
        ids = (
            self._session.execute(
                select(PitchVersionORM.id)
                .where(PitchVersionORM.pitch_id == pitch_id)
                .order_by(PitchVersionORM.version_number.asc())
                .limit(count)
            )
            .scalars()
            .all()
        )
        if not ids:
            return 0
        result = self._session.execute(
            delete(PitchVersionORM).where(PitchVersionORM.id.in_(ids))
        )
        return int(result.rowcount or 0)
