"""FastAPI dependency injection for database sessions and admin services."""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from authp.admin.users import AuthUsersAdminService
from authp.sync.reader import SyncAuthenticationUsers
from authp_service.db.engine import get_session_factory
from authp_service.readers import build_identity_reader
from authp_service.settings import settings


async def get_session() -> AsyncIterator[AsyncSession]:
    """Yield an async DB session, auto-closing on exit."""
    factory = get_session_factory()
    async with factory() as session:
        yield session


SessionDep = Annotated[AsyncSession, Depends(get_session)]


def get_identity_reader() -> SyncAuthenticationUsers | None:
    return build_identity_reader(settings.authp_identity_source_path)


IdentityReaderDep = Annotated[SyncAuthenticationUsers | None, Depends(get_identity_reader)]


def get_admin_service(session: SessionDep, reader: IdentityReaderDep) -> AuthUsersAdminService:
    return AuthUsersAdminService(session, reader, settings.auth_options())


AdminServiceDep = Annotated[AuthUsersAdminService, Depends(get_admin_service)]
