"""Service test fixtures with an in-memory fake admin service."""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine

from authp.errors import AuthPermissionsError
from authp.status import Status
from authp.sync.changes import SyncAuthUserWithChange
from authp_service.db.deps import get_admin_service, get_session
from authp_service.rest.routes.health import router as health_router
from authp_service.rest.routes.sync import router as sync_router
from authp_service.rest.routes.users import router as users_router


class FakeAdminService:
    """In-memory stand-in for AuthUsersAdminService."""

    def __init__(self) -> None:
        self.users: dict[str, Any] = {}
        self.pending_changes: list[SyncAuthUserWithChange] = []
        self.applied: list[SyncAuthUserWithChange] | None = None
        self.reader_registered = True

    async def iter_auth_users(self, data_key: str | None = None) -> AsyncIterator[Any]:
        for user_id in sorted(self.users):
            user = self.users[user_id]
            if data_key is None or (user.tenant is not None and user.tenant.data_key.startswith(data_key)):
                yield user

    async def find_auth_user_by_user_id(self, user_id: str):
        return self.users.get(user_id)

    async def change_user_name(self, user, user_name: str) -> Status:
        status = Status()
        if not user_name:
            return status.add_error("The user name cannot be null or an empty string.")
        status.message = f"Successfully changed the UserName from {user.user_name} to {user_name}."
        user.user_name = user_name
        return status

    async def change_email(self, user, email: str) -> Status:
        status = Status()
        if "@" not in email:
            return status.add_error(f"The email '{email}' is not a valid email.")
        status.message = f"Successfully changed the email from {user.email} to {email}."
        user.email = email
        return status

    async def add_role_to_user(self, user, role_name: str) -> Status:
        status = Status()
        if role_name not in ("Role1", "Role2"):
            return status.add_error(f"Could not find the role {role_name}")
        user.role_names.append(role_name)
        status.message = f"Successfully added the role {role_name} to auth user {user.user_name}."
        return status

    async def remove_role_from_user(self, user, role_name: str) -> Status:
        status = Status()
        user.role_names.remove(role_name)
        status.message = f"Successfully removed the role {role_name} from auth user {user.user_name}."
        return status

    async def change_tenant_to_user(self, user, tenant_full_name: str) -> Status:
        return Status().add_error("You have not configured the tenant_type option to use tenants.")

    async def sync_and_show_changes(self) -> list[SyncAuthUserWithChange]:
        if not self.reader_registered:
            raise AuthPermissionsError("You must register a SyncAuthenticationUsers reader")
        return list(self.pending_changes)

    async def apply_sync_changes(self, changes) -> Status:
        self.applied = list(changes)
        status = Status()
        status.message = f"Sync successful: {len(self.applied)} changes"
        return status


async def _in_memory_session() -> AsyncIterator[AsyncSession]:
    engine = create_async_engine("sqlite+aiosqlite://")
    async with AsyncSession(engine) as session:
        yield session
    await engine.dispose()


@pytest.fixture
def admin_service() -> FakeAdminService:
    return FakeAdminService()


@pytest.fixture
def client(admin_service: FakeAdminService) -> TestClient:
    """Create a test client over the fake admin service and an in-memory SQLite session."""
    app = FastAPI(title="AuthP Admin API (test)")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health_router, tags=["health"])
    app.include_router(users_router, prefix="/api/v1", tags=["users"])
    app.include_router(sync_router, prefix="/api/v1", tags=["sync"])

    app.dependency_overrides[get_admin_service] = lambda: admin_service
    app.dependency_overrides[get_session] = _in_memory_session

    return TestClient(app)
