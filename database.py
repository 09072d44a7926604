import logging

from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import create_engine, SQLModel

import config
import models  # noqa: F401  registers the tasks table on SQLModel.metadata

logger = logging.getLogger(__name__)


def open_engine(database_url: str = config.DATABASE_URL, echo: bool = config.SQL_ECHO) -> Engine:
    """
    Create the storage handle for the process

    SQLite connections are shared across the server's worker threads, and
    in-memory URLs are pinned to one connection so every session sees the
    same database.
    """
    kwargs = {"echo": echo}
    if database_url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool

    engine = create_engine(database_url, **kwargs)
    logger.info("Opened database engine url=%s", engine.url.render_as_string(hide_password=True))
    return engine


def create_db_and_tables(engine: Engine) -> None:
    """Create all tables in the database (no-op for tables that exist)"""
    SQLModel.metadata.create_all(engine)


def close_engine(engine: Engine) -> None:
    """Release pooled connections held by the engine"""
    engine.dispose()
    logger.info("Closed database engine")
