"""
Planification de la rétention hors du chemin d'écriture.

Deux implémentations de `RetentionScheduler`:
- `CeleryRetentionDispatcher`: envoie la tâche `pitch_history.tasks.cleanup_versions` au broker;
- `LocalRetentionDispatcher`: file bornée consommée par un thread démon (dev/tests, sans broker).

Dans les deux cas, `schedule()` ne bloque pas la requête appelante.
"""

from __future__ import annotations

import queue
import threading
from collections.abc import Callable
from typing import Any

import structlog

from pitch_history.app.metrics import RETENTION_FAILURES

CLEANUP_TASK_NAME = "pitch_history.tasks.cleanup_versions"
RETENTION_QUEUE = "retention"

log = structlog.get_logger(__name__).bind(component="retention_dispatch")


class CeleryRetentionDispatcher:
    """Délègue la rétention à un worker Celery."""

    def __init__(self, celery_app: Any = None, queue_name: str | None = RETENTION_QUEUE) -> None:
        self._celery_app = celery_app
        self._queue_name = queue_name

    def _app(self) -> Any:
        if self._celery_app is None:
            # import local: l'app Celery dépend du conteneur qui construit ce dispatcher
            from pitch_history.app.celery_app import celery_app

            self._celery_app = celery_app
        return self._celery_app

    def schedule(self, pitch_id: str, owner_id: str) -> None:
        opts: dict[str, Any] = {}
        if self._queue_name:
            opts["queue"] = self._queue_name
        self._app().send_task(CLEANUP_TASK_NAME, args=(pitch_id, owner_id), **opts)
        log.debug("retention_enqueued", pitch_id=pitch_id, owner_id=owner_id)


_STOP = object()


class LocalRetentionDispatcher:
    """File bornée + thread démon exécutant `cleanup(pitch_id, owner_id)`.

    Une file pleine abandonne le job (journalisé): la passe suivante rattrapera l'excédent.
    """

    def __init__(self, cleanup: Callable[[str, str], Any], maxsize: int = 256) -> None:
        self._cleanup = cleanup
        self._queue: queue.Queue = queue.Queue(maxsize=maxsize)
        self._lock = threading.Lock()
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        with self._lock:
            if self._thread is not None and self._thread.is_alive():
                return
            self._thread = threading.Thread(
                target=self._run, name="retention-worker", daemon=True
            )
            self._thread.start()

    def schedule(self, pitch_id: str, owner_id: str) -> None:
        self.start()
        try:
            self._queue.put_nowait((pitch_id, owner_id))
        except queue.Full:
            RETENTION_FAILURES.labels(stage="queue_full").inc()
            log.warning("retention_queue_full", pitch_id=pitch_id, owner_id=owner_id)

    def join(self) -> None:
        """Attend que tous les jobs en file soient traités."""
        self._queue.join()

    def stop(self, timeout: float | None = 5.0) -> None:
        with self._lock:
            thread = self._thread
            self._thread = None
        if thread is None:
            return
        self._queue.put(_STOP)
        thread.join(timeout)

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return
                pitch_id, owner_id = item
                try:
                    self._cleanup(pitch_id, owner_id)
                except Exception:
                    RETENTION_FAILURES.labels(stage="worker").inc()
                    log.exception("retention_worker_failed", pitch_id=pitch_id, owner_id=owner_id)
            finally:
                self._queue.task_done()
