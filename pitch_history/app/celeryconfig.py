"""Configuration centralisée Celery pour les tâches asynchrones.

Ce module définit la configuration globale de Celery incluant les politiques de retry, timeouts et
limites de connexion au broker.
"""

# ============================================================
# Module : pitch_history/app/celeryconfig.py
# Objet  : Configuration centralisée Celery (retries, timeouts).
# ============================================================

from __future__ import annotations

# Retries & acks
task_acks_late = True
task_reject_on_worker_lost = True
worker_prefetch_multiplier = 1
task_time_limit = 120  # secondes, une passe de rétention est un seul DELETE
broker_pool_limit = 10

# La rétention n'a pas de résultat à conserver
task_ignore_result = True

# Politique de retry par défaut (à spécialiser par tâche)
max_retries = 3
retry_backoff = True
retry_backoff_max = 60  # secondes
