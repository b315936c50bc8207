"""Tests de la tâche Celery de rétention."""

from __future__ import annotations

from unittest.mock import Mock

from pitch_history.core.container import container
from pitch_history.tasks.retention_tasks import cleanup_versions_task


def test_task_is_registered_under_stable_name():
    assert cleanup_versions_task.name == "pitch_history.tasks.cleanup_versions"


def test_task_runs_safe_cleanup(monkeypatch):
    retention = Mock()
    retention.safe_cleanup.return_value = 2
    monkeypatch.setattr(container, "retention", retention)

    assert cleanup_versions_task("p1", "u1") == 2
    retention.safe_cleanup.assert_called_once_with("p1", "u1")
