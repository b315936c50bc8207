"""Tests unitaires des actions post-commit.

Vérifie que les actions enregistrées via `register_action_after_commit` ne sont
exécutées qu'après un commit, jamais après un rollback, et qu'un échec d'action
ne remonte pas à l'appelant.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import create_engine, text
from sqlalchemy.orm import Session

from pitch_history.infra.ops.post_commit import register_action_after_commit


def _make_session() -> Session:
    engine = create_engine("sqlite:///:memory:")
    return Session(bind=engine)


def test_register_action_runs_after_commit():
    """Exécute l'action après commit et pas avant."""
    ran: dict[str, Any] = {"args": None}

    def action(pitch_id: str, owner_id: str) -> None:
        ran["args"] = (pitch_id, owner_id)

    s = _make_session()
    s.execute(text("SELECT 1"))
    register_action_after_commit(s, action, "p1", owner_id="u1")
    assert ran["args"] is None
    s.commit()
    assert ran["args"] == ("p1", "u1")


def test_register_action_cleared_on_rollback():
    """Purge les actions sur rollback et ne les exécute pas ensuite."""
    ran: dict[str, int] = {"x": 0}

    def action() -> None:
        ran["x"] += 1

    s = _make_session()
    register_action_after_commit(s, action)
    s.execute(text("SELECT 1"))
    s.rollback()
    assert ran["x"] == 0
    s.execute(text("SELECT 1"))
    s.commit()
    assert ran["x"] == 0


def test_failing_action_does_not_break_commit_or_others():
    """Une action en échec est journalisée; les suivantes s'exécutent quand même."""
    ran: list[str] = []

    def broken() -> None:
        raise RuntimeError("boom")

    s = _make_session()
    s.execute(text("SELECT 1"))
    register_action_after_commit(s, broken)
    register_action_after_commit(s, ran.append, "second")
    s.commit()
    assert ran == ["second"]


def test_actions_run_once():
    """Les actions sont consommées par le commit qui les déclenche."""
    ran: dict[str, int] = {"x": 0}

    def action() -> None:
        ran["x"] += 1

    s = _make_session()
    s.execute(text("SELECT 1"))
    register_action_after_commit(s, action)
    s.commit()
    s.execute(text("SELECT 1"))
    s.commit()
    assert ran["x"] == 1
