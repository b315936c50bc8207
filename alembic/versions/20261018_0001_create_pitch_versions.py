# mypy: ignore-errors
"""
Migration Alembic pour créer la table pitch_versions.

Cette migration crée le journal des versions de pitch: un enregistrement par mutation, numéroté
séquentiellement par pitch (unicité `(pitch_id, version_number)`).
"""

from __future__ import annotations

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Crée la table pitch_versions et son index par pitch."""
    op.create_table(
        "pitch_versions",
        sa.Column("id", sa.String(length=32), primary_key=True),
        sa.Column("pitch_id", sa.String(length=128), nullable=False),
        sa.Column("version_number", sa.Integer(), nullable=False),
        sa.Column("snapshot", sa.JSON(), nullable=False),
        sa.Column("changes", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_by", sa.String(length=128), nullable=False),
        sa.UniqueConstraint("pitch_id", "version_number", name="uq_pitch_version_number"),
    )
    op.create_index("ix_pitch_versions_pitch_id", "pitch_versions", ["pitch_id"])


def downgrade() -> None:
    """Supprime la table pitch_versions et son index."""
    op.drop_index("ix_pitch_versions_pitch_id", table_name="pitch_versions")
    op.drop_table("pitch_versions")
