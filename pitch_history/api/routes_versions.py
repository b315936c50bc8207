"""
Routes de l'historique des versions d'un pitch.

Toutes les routes exigent un jeton bearer et la propriété du pitch adressé. Les erreurs métier
(version introuvable, version d'un autre pitch, contention) sont converties par les handlers de
`pitch_history.api.errors`.
"""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, Depends, Query

from pitch_history.api.deps import (
    Actor,
    get_current_actor,
    get_owned_pitch,
    get_restore_controller,
    get_version_store,
)
from pitch_history.api.schemas import (
    RestoreResponse,
    VersionListResponse,
    VersionOut,
    VersionPreviewOut,
    VersionPreviewResponse,
    VersionResponse,
    VersionSummaryOut,
)
from pitch_history.domain.errors import ConflictError
from pitch_history.domain.restore import RestoreController
from pitch_history.domain.version import VersionPreview
from pitch_history.services.version_store import VersionStore

router = APIRouter(prefix="/pitch/{pitch_id}/versions", tags=["versions"])
log = structlog.get_logger(__name__)


def _ensure_belongs(pitch_id: str, version_pitch_id: str) -> None:
    if version_pitch_id != pitch_id:
        raise ConflictError("Version does not belong to this pitch")


@router.get("", response_model=VersionListResponse)
def list_versions(
    pitch_id: str,
    limit: int | None = Query(None),
    _pitch: dict[str, Any] = Depends(get_owned_pitch),
    store: VersionStore = Depends(get_version_store),
) -> VersionListResponse:
    """Liste les versions du pitch (plus récente d'abord, sans snapshot)."""
    versions = store.list_versions(pitch_id, limit)
    return VersionListResponse(
        data=[VersionSummaryOut.from_domain(v) for v in versions], total=len(versions)
    )


@router.get("/{version_id}", response_model=VersionResponse)
def get_version(
    pitch_id: str,
    version_id: str,
    _pitch: dict[str, Any] = Depends(get_owned_pitch),
    store: VersionStore = Depends(get_version_store),
) -> VersionResponse:
    """Retourne une version complète (snapshot inclus)."""
    version = store.get_version(version_id)
    _ensure_belongs(pitch_id, version.pitch_id)
    return VersionResponse(data=VersionOut.from_domain(version))


@router.get("/{version_id}/preview", response_model=VersionPreviewResponse)
def preview_version(
    pitch_id: str,
    version_id: str,
    _pitch: dict[str, Any] = Depends(get_owned_pitch),
    store: VersionStore = Depends(get_version_store),
) -> VersionPreviewResponse:
    """Projection lecture seule d'une version, sans rien modifier."""
    version = store.get_version(version_id)
    _ensure_belongs(pitch_id, version.pitch_id)
    preview = VersionPreview.from_version(version)
    return VersionPreviewResponse(data=VersionPreviewOut.from_domain(preview))


@router.post("/{version_id}/restore", response_model=RestoreResponse)
def restore_version(
    pitch_id: str,
    version_id: str,
    _pitch: dict[str, Any] = Depends(get_owned_pitch),
    actor: Actor = Depends(get_current_actor),
    restore: RestoreController = Depends(get_restore_controller),
) -> RestoreResponse:
    """Restaure le pitch à l'état de la version (l'état courant est versionné d'abord)."""
    result = restore.restore_version(pitch_id, version_id, actor.id, actor.name)
    log.info(
        "restore_requested",
        pitch_id=pitch_id,
        version_id=version_id,
        actor_id=actor.id,
        fields=len(result.restored_fields),
    )
    return RestoreResponse.from_domain(result)
