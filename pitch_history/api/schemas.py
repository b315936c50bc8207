"""
Schémas Pydantic des réponses de l'API des versions.

Les champs sont déclarés en snake_case et sérialisés en camelCase (format JSON historique des
clients).
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from pitch_history.domain.version import (
    RestoreResult,
    Version,
    VersionChanges,
    VersionPreview,
    VersionSummary,
)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DiffEntryOut(CamelModel):
    op: str
    field: str
    old_value: Any = None
    new_value: Any = None


class CategorizedDiffOut(CamelModel):
    metadata: list[DiffEntryOut] = []
    content: list[DiffEntryOut] = []
    formatting: list[DiffEntryOut] = []
    structure: list[DiffEntryOut] = []


class VersionChangesOut(CamelModel):
    type: str
    user_id: str
    user_name: str
    description: str
    diff: CategorizedDiffOut

    @classmethod
    def from_domain(cls, changes: VersionChanges) -> VersionChangesOut:
        return cls.model_validate(changes.to_dict())


class VersionSummaryOut(CamelModel):
    """Entrée de liste: pas de snapshot."""

    id: str
    pitch_id: str
    version_number: int
    changes: VersionChangesOut
    created_at: datetime
    created_by: str

    @classmethod
    def from_domain(cls, v: VersionSummary) -> VersionSummaryOut:
        return cls(
            id=v.version_id,
            pitch_id=v.pitch_id,
            version_number=v.version_number,
            changes=VersionChangesOut.from_domain(v.changes),
            created_at=v.created_at,
            created_by=v.created_by,
        )


class VersionOut(VersionSummaryOut):
    snapshot: dict[str, Any]

    @classmethod
    def from_domain(cls, v: Version) -> VersionOut:  # type: ignore[override]
        return cls(
            id=v.version_id,
            pitch_id=v.pitch_id,
            version_number=v.version_number,
            changes=VersionChangesOut.from_domain(v.changes),
            created_at=v.created_at,
            created_by=v.created_by,
            snapshot=v.snapshot,
        )


class VersionPreviewOut(CamelModel):
    version_number: int
    snapshot: dict[str, Any]
    changes: VersionChangesOut
    created_at: datetime

    @classmethod
    def from_domain(cls, p: VersionPreview) -> VersionPreviewOut:
        return cls(
            version_number=p.version_number,
            snapshot=p.snapshot,
            changes=VersionChangesOut.from_domain(p.changes),
            created_at=p.created_at,
        )


class VersionListResponse(CamelModel):
    success: bool = True
    data: list[VersionSummaryOut]
    total: int


class VersionResponse(CamelModel):
    success: bool = True
    data: VersionOut


class VersionPreviewResponse(CamelModel):
    success: bool = True
    data: VersionPreviewOut


class RestoreData(CamelModel):
    restored_fields: list[str]


class RestoreResponse(CamelModel):
    success: bool = True
    message: str
    data: RestoreData

    @classmethod
    def from_domain(cls, result: RestoreResult) -> RestoreResponse:
        return cls(message=result.message, data=RestoreData(restored_fields=result.restored_fields))
