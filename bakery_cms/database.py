"""
Database plumbing: declarative base, engine, sessions and transactions.
"""

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from .config import BakeryConfig, get_config

logger = logging.getLogger(__name__)

# Session.info key holding the depth of nested transaction() blocks
_TX_DEPTH_KEY = "bakery_cms.tx_depth"


class Base(DeclarativeBase):
    """Declarative base for every bakery table."""


def _enable_sqlite_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(config: Optional[BakeryConfig] = None) -> Engine:
    """
    Create an engine for the configured database.

    SQLite connections get foreign key enforcement switched on so the
    declared ``ON DELETE`` rules apply. In-memory SQLite shares a single
    connection across sessions.

    Args:
        config: Configuration to use; defaults to the global configuration

    Returns:
        SQLAlchemy engine
    """
    config = config or get_config()

    kwargs: dict = {"echo": config.database_echo}
    if config.is_sqlite:
        kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in config.database_url or config.database_url == "sqlite://":
            kwargs["poolclass"] = StaticPool
    else:
        kwargs.update(
            pool_pre_ping=True,
            pool_recycle=300,
            pool_size=config.database_pool_size,
        )

    engine = create_engine(config.database_url, **kwargs)

    if config.is_sqlite:
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)

    logger.debug("Created engine for %s", engine.url.render_as_string(hide_password=True))
    return engine


def get_session_factory(engine: Engine) -> sessionmaker:
    """Return a session factory bound to ``engine``."""
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(engine: Engine) -> None:
    """Create every table known to the declarative base."""
    # Import models so their tables are registered on Base.metadata
    from . import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("Database schema initialised")


@contextmanager
def transaction(session: Session) -> Iterator[Session]:
    """
    Run a unit of work atomically.

    The outermost block commits on success and rolls back on any exception,
    which is then re-raised unchanged. Nested blocks join the outer one.

    Example:
        >>> with transaction(session):
        ...     lifecycle.soft_destroy(order)
    """
    depth = session.info.get(_TX_DEPTH_KEY, 0)
    session.info[_TX_DEPTH_KEY] = depth + 1
    try:
        yield session
        if depth == 0:
            session.commit()
    except Exception:
        if depth == 0:
            logger.debug("Rolling back transaction", exc_info=True)
            session.rollback()
        raise
    finally:
        session.info[_TX_DEPTH_KEY] = depth
