"""Erreurs métier de l'historique des versions.

Chaque erreur porte un `code` stable, converti en réponse HTTP par la couche API.
"""

from __future__ import annotations


class VersioningError(Exception):
    """Erreur de base du sous-système de versions."""

    code = "VERSIONING_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(VersioningError):
    """Pitch ou version introuvable."""

    code = "NOT_FOUND"


class ConflictError(VersioningError):
    """La version ne correspond pas au pitch référencé."""

    code = "CONFLICT"


class TransientError(VersioningError):
    """Contention transactionnelle: retries épuisés, l'appelant peut réessayer."""

    code = "TRANSIENT"

    def __init__(self, message: str, attempts: int = 0) -> None:
        super().__init__(message)
        self.attempts = attempts


class InvalidRestoreTargetError(VersioningError):
    """Cible de restauration malformée (snapshot inexploitable)."""

    code = "INVALID_RESTORE_TARGET"
