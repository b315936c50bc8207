"""
Repositories pour les pitchs et les utilisateurs.

Ce module fournit les adaptateurs des contrats `PitchStore` et `PlanLookup`, avec des versions en
mémoire (dev/tests) et Redis (JSON sous `pitch:{id}` et `user:{id}`).
"""

import json
import threading
from typing import Any

import redis

from pitch_history.domain.contracts import PitchStore, PlanLookup
from pitch_history.domain.plan_tiers import DEFAULT_PLAN_TIER, normalize_plan_tier


class InMemoryPitchStore(PitchStore):
    """
    Dépôt de pitchs en mémoire (utilisé pour dev/tests).

    Stocke les enregistrements dans un dict local, non persistant.
    """

    def __init__(self):
        """Initialise une base mémoire vide."""
        self._db: dict[str, dict[str, Any]] = {}
        self._lock = threading.Lock()

    def save(self, record: dict[str, Any]) -> dict[str, Any]:
        """Enregistre/écrase un pitch et le renvoie."""
        with self._lock:
            self._db[record["id"]] = dict(record)
        return record

    def get(self, pitch_id: str) -> dict[str, Any] | None:
        with self._lock:
            record = self._db.get(pitch_id)
            return dict(record) if record is not None else None

    def update(self, pitch_id: str, fields: dict[str, Any]) -> None:
        with self._lock:
            if pitch_id not in self._db:
                raise KeyError(pitch_id)
            self._db[pitch_id].update(fields)


class RedisPitchStore(PitchStore):
    """Dépôt de pitchs adossé à Redis (clé: `pitch:{id}`)."""

    def __init__(self, url: str):
        """Crée un client Redis à partir de l'URL fournie."""
        self.client = redis.Redis.from_url(url, decode_responses=True)

    def save(self, record: dict[str, Any]) -> dict[str, Any]:
        """Sérialise en JSON et stocke l'enregistrement sous `pitch:{id}`."""
        self.client.set(f"pitch:{record['id']}", json.dumps(record))
        return record

    def get(self, pitch_id: str) -> dict[str, Any] | None:
        raw = self.client.get(f"pitch:{pitch_id}")
        return json.loads(raw) if raw else None

    def update(self, pitch_id: str, fields: dict[str, Any]) -> None:
        """Fusionne `fields` dans le pitch (WATCH/MULTI pour éviter d'écraser une écriture concurrente)."""
        key = f"pitch:{pitch_id}"
        with self.client.pipeline() as pipe:
            while True:
                try:
                    pipe.watch(key)
                    raw = pipe.get(key)
                    if not raw:
                        raise KeyError(pitch_id)
                    record = json.loads(raw)
                    record.update(fields)
                    pipe.multi()
                    pipe.set(key, json.dumps(record))
                    pipe.execute()
                    return
                except redis.WatchError:
                    continue


class InMemoryUserPlanLookup(PlanLookup):
    """Plans utilisateurs en mémoire (`plan` en chaîne ou `{"tier": ...}`)."""

    def __init__(self, default_tier: str = DEFAULT_PLAN_TIER):
        self._db: dict[str, dict[str, Any]] = {}
        self._default_tier = default_tier

    def save(self, user: dict[str, Any]) -> dict[str, Any]:
        """Sauvegarde un utilisateur."""
        self._db[user["id"]] = user
        return user

    def get_plan_tier(self, owner_id: str) -> str:
        user = self._db.get(owner_id) or {}
        return normalize_plan_tier(user.get("plan"), self._default_tier)


class RedisUserPlanLookup(PlanLookup):
    """Plans utilisateurs via Redis (clé: `user:{id}`)."""

    def __init__(self, url: str, default_tier: str = DEFAULT_PLAN_TIER):
        """Crée un client Redis à partir de l'URL fournie."""
        self.client = redis.Redis.from_url(url, decode_responses=True)
        self._default_tier = default_tier

    def get_plan_tier(self, owner_id: str) -> str:
        raw = self.client.get(f"user:{owner_id}")
        user = json.loads(raw) if raw else {}
        return normalize_plan_tier(user.get("plan"), self._default_tier)
