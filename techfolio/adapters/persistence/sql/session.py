# techfolio/adapters/persistence/sql/session.py

from __future__ import annotations

from contextlib import contextmanager
from typing import Generator

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------


class Base(DeclarativeBase):
    """Declarative base for every ORM row in this package."""


# ---------------------------------------------------------------------------
# Engine / Session factory
# ---------------------------------------------------------------------------


def _is_memory_sqlite(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///:memory:")


def make_engine(url: str, echo: bool = False) -> Engine:
    """
    Creates an engine for `url`.

    SQLite needs `check_same_thread=False` in a threaded web app, a single
    shared connection when it lives in memory, and foreign keys switched on
    per connection.
    """
    kwargs: dict[str, object] = {"echo": echo}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if _is_memory_sqlite(url):
            kwargs["poolclass"] = StaticPool

    engine = create_engine(url, **kwargs)

    if url.startswith("sqlite"):
        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, _record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


def make_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(
        bind=engine,
        autoflush=False,
        expire_on_commit=False,
        class_=Session,
    )


def init_db(engine: Engine) -> None:
    """
    Creates missing tables and the single tree-state row (version 0).
    Safe to call on every startup.
    """
    from techfolio.adapters.persistence.sql import models  # noqa: F401  (registers tables)

    Base.metadata.create_all(bind=engine)

    with Session(engine) as session, session.begin():
        if session.get(models.TreeStateRow, models.TREE_STATE_ID) is None:
            session.add(models.TreeStateRow(id=models.TREE_STATE_ID, version=0))


def bootstrap(url: str, echo: bool = False) -> sessionmaker[Session]:
    """Engine + schema + session factory in one step, for the DI container."""
    engine = make_engine(url, echo=echo)
    init_db(engine)
    return make_session_factory(engine)


@contextmanager
def db_session(factory: sessionmaker[Session]) -> Generator[Session, None, None]:
    """
    Context manager for scripts and maintenance jobs.

        with db_session(factory) as db:
            ...
    """
    db = factory()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


__all__ = ["Base", "bootstrap", "make_engine", "make_session_factory", "init_db", "db_session"]
