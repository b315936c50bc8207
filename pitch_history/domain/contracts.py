"""Interfaces des collaborateurs externes de l'historique des versions.

Ce module définit les contrats consommés par le cœur (store du pitch "live", résolution du plan
d'abonnement) et le contrat de planification de la rétention.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from pitch_history.domain.version import ChangeType, Version


class PitchStore(ABC):
    """Store de l'état courant ("live") des pitchs."""

    @abstractmethod
    def get(self, pitch_id: str) -> dict[str, Any] | None:
        """Retourne les champs courants du pitch, ou None s'il n'existe pas."""
        raise NotImplementedError

    @abstractmethod
    def update(self, pitch_id: str, fields: dict[str, Any]) -> None:
        """Fusionne `fields` dans le pitch existant (KeyError si absent)."""
        raise NotImplementedError


class PlanLookup(ABC):
    """Résolution du plan d'abonnement d'un propriétaire."""

    @abstractmethod
    def get_plan_tier(self, owner_id: str) -> str:
        """Retourne le nom du plan (ex: "starter", "growth")."""
        raise NotImplementedError


class VersionLog(Protocol):
    """Vue "élagage" du journal de versions, utilisée par la rétention."""

    def count_versions(self, pitch_id: str) -> int:
        """Nombre de versions conservées pour le pitch."""

    def delete_oldest(self, pitch_id: str, count: int) -> int:
        """Supprime en un lot les `count` plus anciennes versions; retourne le nombre supprimé."""


class VersionRecorder(Protocol):
    """Vue "restauration" du journal: lecture d'une version et enregistrement d'une nouvelle."""

    def get_version(self, version_id: str) -> Version:
        """Retourne la version (NotFoundError si absente)."""

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
        """Enregistre une version à partir de l'état avant mutation."""


class RetentionScheduler(Protocol):
    """Planifie une passe de rétention hors du chemin d'écriture."""

    def schedule(self, pitch_id: str, owner_id: str) -> None:
        """Envoie une demande de nettoyage (non bloquant).

        Args:
            pitch_id: Pitch dont les versions doivent être plafonnées.
            owner_id: Propriétaire dont le plan fixe la limite.
        """
