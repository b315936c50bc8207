"""
Restauration d'un pitch vers une version antérieure.

Déroulé (linéaire, par requête):
1. Valider la version cible (existence, appartenance au pitch).
2. Charger le pitch "live".
3. Filtrer le snapshot cible sur la liste blanche des champs restaurables.
4. Enregistrer l'état courant comme nouvelle version (`restored`) avant toute écriture.
5. Appliquer les champs filtrés sur le pitch (+ `updatedAt`).

Les étapes 1 et 2 n'écrivent rien. Un échec à l'étape 5 laisse une version pré-restauration
valide: l'appelant peut rejouer l'application des champs.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import Any

import structlog

from pitch_history.app.metrics import RESTORES_TOTAL
from pitch_history.domain.contracts import PitchStore, VersionRecorder
from pitch_history.domain.errors import ConflictError, InvalidRestoreTargetError, NotFoundError
from pitch_history.domain.pitch_fields import RESTORABLE_FIELDS, PitchField
from pitch_history.domain.version import ChangeType, RestoreResult

UPDATED_AT_FIELD = "updatedAt"


def filter_restorable(snapshot: Any) -> dict[str, Any]:
    """Ne garde du snapshot que les champs de la liste blanche (ordre de la liste)."""
    if not isinstance(snapshot, Mapping):
        raise InvalidRestoreTargetError("Version snapshot is not restorable")
    return {name: snapshot[name] for name in RESTORABLE_FIELDS if name in snapshot}


def _utc_now_iso() -> str:
    return datetime.now(UTC).isoformat()


class RestoreController:
    """Orchestre la restauration d'un pitch vers une version enregistrée."""

    def __init__(
        self,
        versions: VersionRecorder,
        pitches: PitchStore,
        clock: Callable[[], Any] = _utc_now_iso,
    ) -> None:
        """Initialise le contrôleur.

        Paramètres:
        - versions: store de versions (`get_version`, `create_version`).
        - pitches: store du pitch "live".
        - clock: fournit la valeur écrite dans `updatedAt`.
        """
        self._versions = versions
        self._pitches = pitches
        self._clock = clock
        self._log = structlog.get_logger(__name__).bind(component="restore")

    def restore_version(
        self, pitch_id: str, version_id: str, actor_id: str, actor_name: str | None
    ) -> RestoreResult:
        """Restaure `pitch_id` à l'état de la version `version_id`.

        Raises:
            NotFoundError: version ou pitch introuvable.
            ConflictError: la version appartient à un autre pitch.
            InvalidRestoreTargetError: snapshot inexploitable.
            TransientError: contention lors de l'enregistrement de la version pré-restauration.
        """
        try:
            version = self._versions.get_version(version_id)
        except NotFoundError:
            RESTORES_TOTAL.labels(result="not_found").inc()
            raise
        if version.pitch_id != pitch_id:
            RESTORES_TOTAL.labels(result="conflict").inc()
            raise ConflictError("Version does not belong to this pitch")

        current = self._pitches.get(pitch_id)
        if current is None:
            RESTORES_TOTAL.labels(result="not_found").inc()
            raise NotFoundError("Pitch not found")

        fields = filter_restorable(version.snapshot)

        pre_restore = self._versions.create_version(
            pitch_id,
            current,
            actor_id,
            actor_name,
            fields,
            change_type=ChangeType.RESTORED,
            owner_id=current.get(PitchField.USER_ID.value),
        )

        self._pitches.update(pitch_id, {**fields, UPDATED_AT_FIELD: self._clock()})
        RESTORES_TOTAL.labels(result="ok").inc()
        self._log.info(
            "pitch_restored",
            pitch_id=pitch_id,
            version_id=version_id,
            restored_version=version.version_number,
            pre_restore_version=pre_restore.version_number,
            fields=len(fields),
        )
        return RestoreResult(
            message=f"Restored to version {version.version_number}",
            restored_fields=list(fields),
            restored_version_number=version.version_number,
            pre_restore_version=pre_restore.summary(),
        )
