"""Shared test fixtures: a throwaway SQLite authorization store per test."""

from __future__ import annotations

import sys
from collections.abc import AsyncIterator
from pathlib import Path

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

# Make _helpers importable from test files
sys.path.insert(0, str(Path(__file__).parent))

from _helpers import seed_roles, seed_tenants  # noqa: E402

from authp.config import AuthPermissionsOptions, TenantType  # noqa: E402
from authp.db.models import Base  # noqa: E402
from authp.sync.reader import InMemoryIdentityReader  # noqa: E402


@pytest_asyncio.fixture
async def engine(tmp_path: Path) -> AsyncIterator[AsyncEngine]:
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'authp.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def session(session_factory: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncSession]:
    """Session over a store seeded with Role1-3, Viewer and three tenants."""
    async with session_factory() as session:
        await seed_roles(session)
        await seed_tenants(session)
        yield session


@pytest.fixture
def reader() -> InMemoryIdentityReader:
    return InMemoryIdentityReader()


@pytest.fixture
def tenant_options() -> AuthPermissionsOptions:
    return AuthPermissionsOptions(tenant_type=TenantType.HIERARCHICAL)
