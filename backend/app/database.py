from __future__ import annotations

import logging
from collections.abc import Generator
from functools import lru_cache

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from app.config import settings
from app.utils.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


def _unicode_lower(value: str | None) -> str | None:
    return value.lower() if value is not None else None


def register_sqlite_functions(engine: Engine) -> None:
    """Replace SQLite's ASCII-only lower() with Python's on every new connection."""
    if engine.dialect.name != "sqlite":
        return

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record) -> None:
        dbapi_connection.create_function("lower", 1, _unicode_lower, deterministic=True)


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    """Build the process-wide engine on first use and reuse it afterwards."""
    if not settings.database_url:
        raise ConfigurationError("DATABASE_URL is not set")

    connect_args = {}
    if settings.database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False

    engine = create_engine(
        settings.database_url,
        connect_args=connect_args,
        pool_pre_ping=True,
        echo=settings.debug,
    )
    register_sqlite_functions(engine)
    logger.info("Database engine created for %s", engine.url.render_as_string(hide_password=True))
    return engine


@lru_cache(maxsize=1)
def get_session_factory() -> sessionmaker[Session]:
    return sessionmaker(autocommit=False, autoflush=False, bind=get_engine())


def get_db() -> Generator[Session, None, None]:
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()


def create_tables() -> None:
    """Create any missing tables and indexes. Existing tables are left alone."""
    Base.metadata.create_all(bind=get_engine())
    logger.info("Database tables ensured (%d models registered)", len(Base.metadata.tables))


def dispose_engine() -> None:
    """Release pooled connections at shutdown. A later call to get_engine rebuilds it."""
    if get_engine.cache_info().currsize:
        get_engine().dispose()
    get_session_factory.cache_clear()
    get_engine.cache_clear()
