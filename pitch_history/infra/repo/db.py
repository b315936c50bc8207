"""DB utilities for SQLAlchemy sessions/engine.

Uses `DATABASE_URL` env var or falls back to `sqlite+pysqlite:///:memory:` for tests.

SQLite engines open every transaction with `BEGIN IMMEDIATE`: the writer lock is taken before the
version number is read, so concurrent allocations for a pitch are serialized by the database.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

SQLITE_BUSY_TIMEOUT_S = 30


def _enable_sqlite_immediate_transactions(engine: Engine) -> None:
    """Désactive la gestion implicite de pysqlite et émet `BEGIN IMMEDIATE` à chaque transaction."""

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, _record):  # type: ignore[no-untyped-def]
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _on_begin(conn):  # type: ignore[no-untyped-def]
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def get_engine(url: str | None = None) -> Engine:
    """Crée un moteur SQLAlchemy à partir de l'URL de base de données."""
    db_url = url or os.getenv("DATABASE_URL") or "sqlite+pysqlite:///:memory:"
    if not db_url.startswith("sqlite"):
        return create_engine(db_url, future=True, echo=False, pool_pre_ping=True)

    connect_args = {"check_same_thread": False, "timeout": SQLITE_BUSY_TIMEOUT_S}
    if ":memory:" in db_url:
        # une seule connexion partagée, sinon chaque session verrait une base vide
        engine = create_engine(
            db_url, future=True, echo=False, connect_args=connect_args, poolclass=StaticPool
        )
    else:
        engine = create_engine(db_url, future=True, echo=False, connect_args=connect_args)
    _enable_sqlite_immediate_transactions(engine)
    return engine


def get_session_factory(engine: Engine) -> sessionmaker:
    """Crée une factory de sessions SQLAlchemy."""
    return sessionmaker(bind=engine, class_=Session, expire_on_commit=False)


@contextmanager
def session_scope(session_factory: sessionmaker) -> Iterator[Session]:
    """Contexte de session SQLAlchemy avec gestion automatique des transactions.

    Commit en sortie normale, rollback sur exception (propagée), fermeture dans tous les cas.
    """
    session = session_factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
