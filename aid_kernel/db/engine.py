"""
Module: aid_kernel.db.engine
Responsibility: SQLAlchemy engine initialization and session factory management.
    This is the single point of database connection configuration for the
    consolidation core.
Architecture position: Kernel > DB.  May import from db/base.py.
    MUST NOT import from selectors/, domain/, or outer layers
    (except for create_tables, which imports models).

Invariants enforced:
    - The hosted store is PostgreSQL; SQLite is accepted for local runs and
      tests.  Pool options only apply to server backends.
    - Connection pooling via QueuePool with pre-ping to handle stale
      connections dropped by the hosted service.
    - Sessions are short-lived and never shared across threads: each
      concurrent source fetch opens its own session from the factory.

Failure modes:
    - EngineNotInitializedError if get_engine/get_session/get_session_factory
      is called before init_engine_from_url().
    - Connection pool exhaustion if pool_size + max_overflow is exceeded.
"""

import atexit
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool

from aid_kernel.exceptions import EngineNotInitializedError
from aid_kernel.logging_config import configure_logging, get_logger

logger = get_logger("db.engine")

# Module-level engine and session factory
_engine: Engine | None = None
_SessionFactory: sessionmaker[Session] | None = None


def _engine_options(
    database_url: str,
    pool_size: int,
    max_overflow: int,
    pool_pre_ping: bool,
    pool_timeout: int,
    pool_recycle: int,
) -> dict[str, Any]:
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite":
        # Worker threads read the same file; pysqlite must not pin
        # connections to the creating thread.
        return {"connect_args": {"check_same_thread": False}}
    return {
        "poolclass": QueuePool,
        "pool_size": pool_size,
        "max_overflow": max_overflow,
        "pool_pre_ping": pool_pre_ping,
        "pool_timeout": pool_timeout,
        "pool_recycle": pool_recycle,
    }


def init_engine_from_url(
    database_url: str,
    echo: bool = False,
    pool_size: int = 5,
    max_overflow: int = 5,
    pool_pre_ping: bool = True,
    pool_timeout: int = 30,
    pool_recycle: int = 1800,
) -> Engine:
    """
    Initialize the SQLAlchemy engine from a database URL.

    Preconditions: database_url is a valid SQLAlchemy URL
        (postgresql+psycopg2://... for the hosted store, sqlite:///... locally).
    Postconditions: Module-level _engine and _SessionFactory are initialized.
        A second call replaces the first.

    Args:
        database_url: Connection URL.
        echo: If True, log all SQL statements.
        pool_size: Number of connections to keep in the pool.
        max_overflow: Max connections beyond pool_size.
        pool_pre_ping: If True, test connections before use.
        pool_timeout: Seconds to wait for a pooled connection.
        pool_recycle: Seconds after which a connection is recycled.

    Returns:
        SQLAlchemy Engine instance.
    """
    global _engine, _SessionFactory

    options = _engine_options(
        database_url,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_pre_ping=pool_pre_ping,
        pool_timeout=pool_timeout,
        pool_recycle=pool_recycle,
    )
    _engine = create_engine(database_url, echo=echo, **options)
    _SessionFactory = sessionmaker(bind=_engine, expire_on_commit=False)

    configure_logging()
    logger.info(
        "engine_initialized",
        extra={
            "dialect": _engine.dialect.name,
            "pooled": "poolclass" in options,
            "echo": echo,
        },
    )

    return _engine


def get_engine() -> Engine:
    """
    Get the current engine instance.

    Raises:
        EngineNotInitializedError: If engine has not been initialized.
    """
    if _engine is None:
        raise EngineNotInitializedError()
    return _engine


def get_session() -> Session:
    """
    Get a new session instance.

    Raises:
        EngineNotInitializedError: If engine has not been initialized.
    """
    if _SessionFactory is None:
        raise EngineNotInitializedError()
    return _SessionFactory()


def get_session_factory() -> sessionmaker[Session]:
    """
    Get the session factory for creating sessions.

    Used by the consolidation service: every concurrent fetch runs in a
    worker thread and needs its own session.

    Raises:
        EngineNotInitializedError: If engine has not been initialized.
    """
    if _SessionFactory is None:
        raise EngineNotInitializedError()
    return _SessionFactory


def create_tables() -> None:
    """
    Create all tables defined in the models.

    Intended for local databases and tests; the hosted store's schema is
    owned by its migrations.
    """
    from aid_kernel.db.base import Base
    import aid_kernel.models  # noqa: F401  (registers every table on Base.metadata)

    engine = get_engine()
    Base.metadata.create_all(engine)


def reset_engine() -> None:
    """
    Reset the engine and session factory.

    Useful for test cleanup.
    """
    global _engine, _SessionFactory

    if _engine is not None:
        _engine.dispose()
        _engine = None

    _SessionFactory = None


def _atexit_dispose():
    """Dispose the engine on process exit to release all pooled connections."""
    if _engine is not None:
        _engine.dispose()


atexit.register(_atexit_dispose)
