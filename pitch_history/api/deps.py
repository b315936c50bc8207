"""Dépendances partagées pour les routes de l'API.

But du module
-------------
- Centraliser l'accès aux composants du conteneur (store de versions, restauration, pitchs),
  surchargeables en test via `app.dependency_overrides`.
- Authentifier l'acteur (jeton bearer) et vérifier qu'il possède le pitch adressé.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from fastapi import Depends, Header

from pitch_history.api.errors import forbidden, unauthorized
from pitch_history.core.container import container
from pitch_history.domain.auth import decode_token
from pitch_history.domain.contracts import PitchStore
from pitch_history.domain.errors import NotFoundError
from pitch_history.domain.pitch_fields import PitchField
from pitch_history.domain.restore import RestoreController
from pitch_history.services.version_store import UNKNOWN_ACTOR_NAME, VersionStore

ANONYMOUS_OWNER = "anonymous"


@dataclass(frozen=True)
class Actor:
    id: str
    name: str


def get_version_store() -> VersionStore:
    return container.version_store


def get_restore_controller() -> RestoreController:
    return container.restore


def get_pitch_store() -> PitchStore:
    return container.pitch_store


def get_jwt_config() -> tuple[str, str]:
    return container.settings.JWT_SECRET, container.settings.JWT_ALG


def get_current_actor(
    authorization: str | None = Header(None),
    jwt_config: tuple[str, str] = Depends(get_jwt_config),
) -> Actor:
    """Extrait et valide l'acteur courant à partir du token d'autorisation."""
    if not authorization or not authorization.lower().startswith("bearer "):
        raise unauthorized("missing_token")
    token = authorization.split(" ", 1)[1]
    secret, alg = jwt_config
    data = decode_token(token, secret, alg)
    if not data:
        raise unauthorized("invalid_token")
    return Actor(id=data.sub, name=data.name or UNKNOWN_ACTOR_NAME)


def get_owned_pitch(
    pitch_id: str,
    actor: Actor = Depends(get_current_actor),
    pitches: PitchStore = Depends(get_pitch_store),
) -> dict[str, Any]:
    """Charge le pitch et vérifie que l'acteur en est propriétaire (ou que le pitch est anonyme)."""
    pitch = pitches.get(pitch_id)
    if pitch is None:
        raise NotFoundError("Pitch not found")
    owner = pitch.get(PitchField.USER_ID.value)
    if owner != actor.id and owner != ANONYMOUS_OWNER:
        raise forbidden("Not authorized to access this pitch")
    return pitch
