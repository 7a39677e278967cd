"""
Module: workshop_kernel.db.engine
Responsibility: The process-wide SQLAlchemy engine, its session factory and
    the commit-or-rollback scope that callers wrap payroll work in.
Architecture position: Kernel > DB.  Imports db/base.py (and models/ lazily
    in create_tables so the metadata is complete).

Invariants enforced:
    - PostgreSQL runs at READ COMMITTED; the PAID transition relies on a
      conditional UPDATE, not on isolation level.
    - SQLite (tests, local tooling) lets SQLAlchemy emit BEGIN, so the
      per-worker SAVEPOINTs of a payroll run behave as they do on
      PostgreSQL.  An in-memory SQLite database uses a single shared
      connection; a file database gets a normal pool.

Failure modes:
    - RuntimeError from any accessor called before init_engine_from_url().
    - RuntimeError from init_engine_from_env() when WORKSHOP_DATABASE_URL is
      unset.
"""

import atexit
import os
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from workshop_kernel.logging_config import get_logger

logger = get_logger("db.engine")

DATABASE_URL_ENV = "WORKSHOP_DATABASE_URL"

_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None

_IN_MEMORY_URLS = frozenset({"sqlite://", "sqlite:///:memory:"})


def _sqlite_engine(url: str, echo: bool) -> Engine:
    if url in _IN_MEMORY_URLS:
        # In-memory databases exist per connection.
        engine = create_engine(
            url,
            echo=echo,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    else:
        engine = create_engine(url, echo=echo)

    @event.listens_for(engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return engine


def build_engine(database_url: str, echo: bool = False, pool_size: int = 5) -> Engine:
    """
    A configured engine that is not registered as the process-wide one.

    ``database_url`` is any SQLAlchemy URL; ``sqlite://`` gives an in-memory
    database.  The PostgreSQL driver is whatever the URL names.
    """
    if database_url.startswith("sqlite"):
        return _sqlite_engine(database_url, echo)
    return create_engine(
        database_url,
        echo=echo,
        pool_size=pool_size,
        pool_pre_ping=True,
        isolation_level="READ COMMITTED",
    )


def init_engine_from_url(database_url: str, echo: bool = False, pool_size: int = 5) -> Engine:
    """Create the process-wide engine and session factory, replacing any previous ones."""
    global _engine, _session_factory
    reset_engine()

    _engine = build_engine(database_url, echo, pool_size)

    _session_factory = sessionmaker(bind=_engine, expire_on_commit=False)
    logger.info("engine_initialized", extra={"dialect": _engine.dialect.name})
    return _engine


def init_engine_from_env(echo: bool = False) -> Engine:
    url = os.environ.get(DATABASE_URL_ENV)
    if not url:
        raise RuntimeError(f"{DATABASE_URL_ENV} is not set")
    return init_engine_from_url(url, echo=echo)


def get_engine() -> Engine:
    if _engine is None:
        raise RuntimeError("Engine not initialized. Call init_engine_from_url() first.")
    return _engine


def get_session() -> Session:
    if _session_factory is None:
        raise RuntimeError("Engine not initialized. Call init_engine_from_url() first.")
    return _session_factory()


@contextmanager
def session_scope() -> Iterator[Session]:
    """
    Commit on normal exit, roll back and re-raise on error, always close.

    Usage::

        with session_scope() as session:
            PayrollService(session).run_payroll(workers, actor_id=admin_id)
    """
    session = get_session()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        logger.warning("transaction_rolled_back", exc_info=True)
        raise
    finally:
        session.close()


def create_tables() -> None:
    from workshop_kernel.db.base import Base
    import workshop_kernel.models  # noqa: F401  registers ORM tables

    Base.metadata.create_all(get_engine())


def drop_tables() -> None:
    from workshop_kernel.db.base import Base

    Base.metadata.drop_all(get_engine())


def reset_engine() -> None:
    """Dispose of the engine and forget the session factory."""
    global _engine, _session_factory
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _session_factory = None


atexit.register(reset_engine)
