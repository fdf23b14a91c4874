"""Seed the authorization store's users from a list of definitions."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from authp.config import AuthPermissionsOptions
from authp.db.models import AuthUser, RoleToPermissions, Tenant
from authp.db.unit_of_work import save_changes_with_unique_check
from authp.status import Status
from authp.sync.reader import FindUserIdService

log = structlog.get_logger(__name__)


@dataclass
class DefineUserWithRolesTenant:
    """One user to create; roles are given as ``"Role1, Role2"``."""

    email: str
    user_name: str | None
    role_names_comma_delimited: str
    user_id: str | None = None
    tenant_name: str | None = None

    @property
    def display_name(self) -> str:
        return self.user_name or self.email


def split_role_names(role_names_comma_delimited: str) -> Iterator[tuple[str, int]]:
    """Yield ``(role_name, char_offset)`` for each non-blank name in the list."""
    offset = 0
    for part in role_names_comma_delimited.split(","):
        name = part.strip()
        if name:
            yield name, offset + len(part) - len(part.lstrip())
        offset += len(part) + 1


class BulkLoadUsersService:
    """Creates the initial users, but only when the store has none yet."""

    def __init__(
        self,
        session: AsyncSession,
        find_user_id_service: FindUserIdService | None = None,
        options: AuthPermissionsOptions | None = None,
    ) -> None:
        self._session = session
        self._find_user_id_service = find_user_id_service
        self._options = options or AuthPermissionsOptions()

    async def add_users_roles_to_database_if_empty(
        self, user_definitions: Sequence[DefineUserWithRolesTenant]
    ) -> Status:
        """Add every defined user, or none of them if any definition is bad."""
        status = Status()
        if not user_definitions:
            return status

        existing = await self._session.scalar(select(func.count()).select_from(AuthUser))
        if existing:
            log.info("bulk_load_skipped", existing_users=existing)
            status.message = "The auth database already has users, so no users were added."
            return status

        with self._session.no_autoflush:
            for index, definition in enumerate(user_definitions):
                status.combine(await self._stage_user(index, definition))

        if status.has_errors:
            await self._session.rollback()
            log.warning("bulk_load_failed", errors=status.errors)
            return status

        status.combine(await save_changes_with_unique_check(self._session))
        status.message = f"Added {len(user_definitions)} new users to the auth database."
        log.info("bulk_load_complete", users=len(user_definitions), valid=status.is_valid)
        return status

    async def _stage_user(self, index: int, definition: DefineUserWithRolesTenant) -> Status:
        status = Status()
        prefix = f"Line/index {index}"

        user_id = definition.user_id
        if not user_id:
            if self._find_user_id_service is None:
                return status.add_error(
                    f"{prefix}: The user {definition.display_name} didn't have a userId and "
                    "the FindUserIdService wasn't available."
                )
            user_id = await self._find_user_id_service.find_user_id(definition.email)
            if not user_id:
                return status.add_error(
                    f"{prefix}: The FindUserIdService couldn't find a userId for the user "
                    f"{definition.display_name}."
                )

        role_names = list(split_role_names(definition.role_names_comma_delimited or ""))
        if not role_names:
            return status.add_error(f"{prefix}: The user {definition.display_name} didn't have any roles.")

        roles: list[RoleToPermissions] = []
        for role_name, char_offset in role_names:
            role = await self._session.get(RoleToPermissions, role_name)
            if role is None:
                status.add_error(
                    f"{prefix}, char: {char_offset}: The role {role_name} wasn't found in the auth database."
                )
            else:
                roles.append(role)

        tenant = await self._resolve_tenant(prefix, definition, status)
        if status.has_errors:
            return status

        self._session.add(AuthUser(user_id, definition.email, definition.user_name, roles, tenant))
        return status

    async def _resolve_tenant(
        self, prefix: str, definition: DefineUserWithRolesTenant, status: Status
    ) -> Tenant | None:
        if not self._options.uses_tenants:
            if definition.tenant_name:
                status.add_error(
                    f"{prefix}: The user {definition.display_name} has a tenant name, but "
                    "the tenant_type option is not set to use tenants."
                )
            return None

        if not definition.tenant_name:
            status.add_error(
                f"{prefix}: You have defined this is a multi-tenant application, but user "
                f"{definition.display_name} has no tenant name"
            )
            return None

        result = await self._session.execute(
            select(Tenant).where(Tenant.tenant_full_name == definition.tenant_name)
        )
        tenant = result.scalars().first()
        if tenant is None:
            status.add_error(
                f"{prefix}: The user {definition.display_name} has a tenant name of "
                f"{definition.tenant_name} which wasn't found in the auth database."
            )
        return tenant
