"""
Modèles de domaine de l'historique des versions (POPO).

Ce module définit les objets échangés entre le moteur de diff, le store de versions, la rétention
et la restauration. Les dicts produits par `to_dict()` suivent le format stocké en base
(clés camelCase).
"""

# ============================================================
# Module : pitch_history/domain/version.py
# Objet  : Version, diff catégorisé et projections (POPO).
# ============================================================

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from .pitch_fields import DiffCategory


class ChangeType(str, Enum):
    """Nature d'une mutation enregistrée."""

    CREATED = "created"
    EDITED = "edited"
    FORMATTED = "formatted"
    SHARED = "shared"
    RESTORED = "restored"


@dataclass(frozen=True)
class DiffEntry:
    """
    Opération élémentaire d'un diff.

    Attributs
    - op: "add" | "remove" | "replace".
    - field: chemin du champ (ex: "sellerContext/company").
    - old_value: valeur précédente résumée (replace/remove), sinon None.
    - new_value: nouvelle valeur résumée (add/replace), sinon None.
    """

    op: str
    field: str
    old_value: Any = None
    new_value: Any = None

    @property
    def top_field(self) -> str:
        head = self.field.split("/", 1)[0]
        return head.replace("~1", "/").replace("~0", "~")

    def to_dict(self) -> dict[str, Any]:
        return {
            "op": self.op,
            "field": self.field,
            "oldValue": self.old_value,
            "newValue": self.new_value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DiffEntry:
        return cls(
            op=str(data.get("op", "")),
            field=str(data.get("field", "")),
            old_value=data.get("oldValue"),
            new_value=data.get("newValue"),
        )


@dataclass
class CategorizedDiff:
    """Diff réparti dans les quatre catégories fixes."""

    metadata: list[DiffEntry] = field(default_factory=list)
    content: list[DiffEntry] = field(default_factory=list)
    formatting: list[DiffEntry] = field(default_factory=list)
    structure: list[DiffEntry] = field(default_factory=list)

    def bucket(self, category: DiffCategory) -> list[DiffEntry]:
        """Retourne la liste d'entrées d'une catégorie."""
        return getattr(self, category.value)

    def entries(self) -> list[DiffEntry]:
        """Toutes les entrées, dans l'ordre des catégories."""
        return [*self.metadata, *self.content, *self.formatting, *self.structure]

    def is_empty(self) -> bool:
        return not self.entries()

    def touched_fields(self) -> set[str]:
        """Champs de premier niveau touchés par le diff."""
        return {e.top_field for e in self.entries()}

    def to_dict(self) -> dict[str, list[dict[str, Any]]]:
        return {c.value: [e.to_dict() for e in self.bucket(c)] for c in DiffCategory}

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> CategorizedDiff:
        diff = cls()
        for c in DiffCategory:
            for raw in (data or {}).get(c.value, []) or []:
                diff.bucket(c).append(DiffEntry.from_dict(raw))
        return diff


@dataclass
class VersionChanges:
    """Bloc `changes` d'une version: type, auteur, description et diff."""

    type: ChangeType
    user_id: str
    user_name: str
    description: str
    diff: CategorizedDiff

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "userId": self.user_id,
            "userName": self.user_name,
            "description": self.description,
            "diff": self.diff.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> VersionChanges:
        return cls(
            type=ChangeType(data.get("type", ChangeType.EDITED.value)),
            user_id=str(data.get("userId", "")),
            user_name=str(data.get("userName", "Unknown")),
            description=str(data.get("description", "")),
            diff=CategorizedDiff.from_dict(data.get("diff")),
        )


@dataclass
class VersionSummary:
    """Projection de liste (sans snapshot)."""

    version_id: str
    pitch_id: str
    version_number: int
    changes: VersionChanges
    created_at: datetime
    created_by: str


@dataclass
class Version(VersionSummary):
    """Version complète, immuable une fois persistée."""

    snapshot: dict[str, Any] = field(default_factory=dict)

    def summary(self) -> VersionSummary:
        return VersionSummary(
            version_id=self.version_id,
            pitch_id=self.pitch_id,
            version_number=self.version_number,
            changes=self.changes,
            created_at=self.created_at,
            created_by=self.created_by,
        )


@dataclass
class VersionPreview:
    """Projection lecture seule d'une version pour prévisualisation."""

    version_number: int
    snapshot: dict[str, Any]
    changes: VersionChanges
    created_at: datetime

    @classmethod
    def from_version(cls, version: Version) -> VersionPreview:
        return cls(
            version_number=version.version_number,
            snapshot=version.snapshot,
            changes=version.changes,
            created_at=version.created_at,
        )


@dataclass
class RestoreResult:
    """Résultat d'une restauration."""

    message: str
    restored_fields: list[str]
    restored_version_number: int
    pre_restore_version: VersionSummary | None = None
