"""SQLAlchemy models for persistence layer (PitchVersion)."""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Integer,
    MetaData,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Classe de base pour tous les modèles SQLAlchemy."""

    metadata = MetaData()


def _utcnow() -> datetime:
    return datetime.now(UTC)


class PitchVersionORM(Base):
    """Modèle ORM pour les versions de pitch (journal append-only)."""

    __tablename__ = "pitch_versions"

    id = Column(String(32), primary_key=True)
    pitch_id = Column(String(128), nullable=False, index=True)
    version_number = Column(Integer, nullable=False)
    snapshot = Column(JSON, nullable=False, default=dict)
    changes = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    created_by = Column(String(128), nullable=False)

    __table_args__ = (
        UniqueConstraint("pitch_id", "version_number", name="uq_pitch_version_number"),
    )
