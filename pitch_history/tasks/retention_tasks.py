"""
Tâches Celery pour la rétention des versions.

Plafonne le nombre de versions d'un pitch selon le plan de son propriétaire. La tâche est
idempotente: rejouée, elle ne supprime que l'excédent restant.
"""

from __future__ import annotations

from pitch_history.app.celery_app import celery_app
from pitch_history.core.container import container


@celery_app.task(name="pitch_history.tasks.cleanup_versions")
def cleanup_versions_task(pitch_id: str, owner_id: str) -> int:
    return container.retention.safe_cleanup(pitch_id, owner_id)
