"""Database configuration and session management.

This module constructs an asynchronous SQLAlchemy engine and session
factory for the relational receipt store.  The connection string comes
from ``settings.DATABASE_URL``.  Plain ``sqlite://`` and ``postgresql://``
URLs are upgraded to their async drivers (``aiosqlite`` and ``psycopg``)
so that operators can paste a conventional DSN into the environment.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.engine.url import make_url
from sqlalchemy.orm import declarative_base

from receipt_points.core.config import settings

logger = logging.getLogger(__name__)

_POSTGRES_DRIVERS = {"postgresql", "postgres", "postgresql+psycopg2", "postgresql+asyncpg"}


def normalise_database_url(url: str) -> str:
    """Return ``url`` rewritten to use an async driver."""
    url_obj = make_url(url)
    driver = url_obj.drivername or ""
    if driver == "sqlite":
        url_obj = url_obj.set(drivername="sqlite+aiosqlite")
    elif driver in _POSTGRES_DRIVERS:
        url_obj = url_obj.set(drivername="postgresql+psycopg")
    return url_obj.render_as_string(hide_password=False)


def create_engine_for(url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine for ``url`` after normalising its driver."""
    db_url = normalise_database_url(url)
    engine_kwargs: dict[str, Any] = dict(echo=echo)
    if not db_url.startswith("sqlite"):
        engine_kwargs["pool_pre_ping"] = True
    return create_async_engine(db_url, **engine_kwargs)


def create_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


engine = create_engine_for(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)

# Declarative base
Base = declarative_base()


async def init_db(bind: AsyncEngine | None = None) -> None:
    """Create the receipt tables if they do not exist yet.

    Typically called during application startup when the database store
    backend is selected.
    """
    target = bind or engine
    async with target.begin() as conn:
        # Import all models to ensure metadata is populated
        from receipt_points.models import tables  # noqa: F401
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ready on %s", target.url.render_as_string(hide_password=True))
