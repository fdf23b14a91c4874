"""Async SQLAlchemy engine and session factory."""

from __future__ import annotations

from typing import Any

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from authp.db.models import Base
from authp_service.settings import settings

log = structlog.get_logger(__name__)

_engine = None
_session_factory = None


async def init_db() -> None:
    global _engine, _session_factory
    engine_kwargs: dict[str, Any] = {}
    if not settings.database_url.startswith("sqlite"):
        engine_kwargs["pool_size"] = 10
    _engine = create_async_engine(settings.database_url, echo=False, **engine_kwargs)
    _session_factory = async_sessionmaker(_engine, class_=AsyncSession, expire_on_commit=False)

    if settings.create_schema:
        async with _engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    log.info("db_initialized", create_schema=settings.create_schema)


async def close_db() -> None:
    global _engine
    if _engine:
        await _engine.dispose()


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    if _session_factory is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")
    return _session_factory
