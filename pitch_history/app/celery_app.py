"""
Module: celery_app.

But: Initialiser l’instance Celery de l’application et charger la config runtime.

Notes:
- Les tâches de rétention sont routées vers la queue `retention`.
- Aucun secret loggé.
"""

from celery import Celery

from pitch_history.core.container import container

celery_app = Celery(
    "pitch_history",
    broker=container.settings.CELERY_BROKER_URL,
    backend=container.settings.CELERY_RESULT_BACKEND,
)
# Load configuration from module (retries, timeouts, acks)
celery_app.config_from_object("pitch_history.app.celeryconfig")
celery_app.conf.task_routes = {"pitch_history.tasks.*": {"queue": "retention"}}
celery_app.conf.imports = ("pitch_history.tasks.retention_tasks",)

__all__ = ["celery_app"]
