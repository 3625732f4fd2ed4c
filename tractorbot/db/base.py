"""Lazily created async engine shared by the SQL catalog and session stores.

The engine is built from settings on first use. Tests point
``settings.database_path`` at a temporary file and call ``reset_engine``.
"""

from typing import Optional

import structlog
from sqlalchemy.engine import URL, make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

from tractorbot.config.settings import settings

logger = structlog.get_logger()

# Backend name -> async driver
ASYNC_DRIVERS = {
    "postgres": "postgresql+asyncpg",
    "postgresql": "postgresql+asyncpg",
    "sqlite": "sqlite+aiosqlite",
}

_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


class Base(DeclarativeBase):
    """Declarative base for the ``items`` and ``user_sessions`` tables."""


def get_database_url() -> URL:
    """Resolve the configured database to an async driver URL.

    ``DATABASE_URL`` wins when set, with its driver swapped for the async
    one. Otherwise a SQLite file at ``DATABASE_PATH`` is used.
    """
    if settings.database_url:
        url = make_url(settings.database_url)
        backend = url.drivername.split("+", 1)[0]
        return url.set(drivername=ASYNC_DRIVERS.get(backend, url.drivername))

    settings.database_path.parent.mkdir(parents=True, exist_ok=True)
    return URL.create("sqlite+aiosqlite", database=str(settings.database_path))


def get_engine() -> AsyncEngine:
    global _engine

    if _engine is None:
        url = get_database_url()
        backend = url.get_backend_name()
        # Hosted Postgres pools connections on its side
        kwargs = {"poolclass": NullPool} if backend == "postgresql" else {}
        _engine = create_async_engine(url, **kwargs)
        logger.debug("Database engine created", backend=backend)

    return _engine


def get_async_session_factory() -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the shared engine."""
    global _session_factory

    if _session_factory is None:
        _session_factory = async_sessionmaker(get_engine(), expire_on_commit=False)

    return _session_factory


async def init_db() -> None:
    """Create the catalog and session tables if they do not exist."""
    from . import models  # noqa: F401

    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


def reset_engine() -> None:
    """Forget the engine so the next use reads settings again."""
    global _engine, _session_factory
    _engine = None
    _session_factory = None
