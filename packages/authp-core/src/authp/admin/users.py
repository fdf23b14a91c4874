"""Admin operations on the authorization store's users.

Covers lookups and tenant-scoped queries, the two-step sync with the
authentication provider (compute the change-set, then apply the
admin-confirmed change-set) and the single-user mutations used by admin
screens. Recoverable problems come back in a :class:`Status`; only setup
and invariant failures raise.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import AsyncIterator, Sequence

import structlog
from sqlalchemy import Select, inspect, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from authp.config import AuthPermissionsOptions
from authp.db.constants import AuthDbConstants
from authp.db.models import AuthUser, RoleToPermissions, Tenant
from authp.db.unit_of_work import save_changes_with_unique_check
from authp.errors import AuthPermissionsBadDataError, AuthPermissionsError
from authp.status import Status
from authp.sync.changes import SyncAuthUserChanges, SyncAuthUserWithChange
from authp.sync.reader import SyncAuthenticationUsers
from authp.validation import is_valid_email

log = structlog.get_logger(__name__)


def _with_associations(query: Select) -> Select:
    return query.options(selectinload(AuthUser.roles), selectinload(AuthUser.tenant))


class AuthUsersAdminService:
    """User admin and sync over one async session.

    ``sync_reader`` may be None; only :meth:`sync_and_show_changes` needs it.
    """

    def __init__(
        self,
        session: AsyncSession,
        sync_reader: SyncAuthenticationUsers | None = None,
        options: AuthPermissionsOptions | None = None,
    ) -> None:
        self._session = session
        self._sync_reader = sync_reader
        self._options = options or AuthPermissionsOptions()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def query_auth_users(self, data_key: str | None = None) -> Select:
        """Composable query over the users, optionally limited to a tenant data key.

        With a data key only users whose tenant's data key starts with it are
        selected, i.e. that tenant and all of its child tenants.
        """
        query = select(AuthUser).order_by(AuthUser.user_id)
        if data_key is None:
            return query
        return query.join(AuthUser.tenant).where(
            Tenant.data_key.startswith(data_key, autoescape=True)
        )

    async def iter_auth_users(self, data_key: str | None = None) -> AsyncIterator[AuthUser]:
        """Stream users (roles and tenant loaded) from :meth:`query_auth_users`."""
        result = await self._session.stream_scalars(_with_associations(self.query_auth_users(data_key)))
        async for auth_user in result:
            yield auth_user

    async def find_auth_user_by_user_id(self, user_id: str) -> AuthUser | None:
        result = await self._session.execute(
            _with_associations(select(AuthUser).where(AuthUser.user_id == user_id))
        )
        return result.scalars().first()

    async def find_auth_user_by_email(self, email: str) -> AuthUser | None:
        result = await self._session.execute(
            _with_associations(select(AuthUser).where(AuthUser.email == email))
        )
        return result.scalars().first()

    # ------------------------------------------------------------------
    # Sync with the authentication provider
    # ------------------------------------------------------------------

    async def sync_and_show_changes(self) -> list[SyncAuthUserWithChange]:
        """Diff the provider's active users against the stored users.

        Returns the records that need attention, never ``NO_CHANGE`` ones:
        updates and adds in provider order, then removes in user id order.
        """
        if self._sync_reader is None:
            raise AuthPermissionsError(
                "You must register a SyncAuthenticationUsers reader to sync users "
                "with the authentication provider."
            )

        authentication_users = await self._sync_reader.get_all_active_user_info()
        result = await self._session.execute(
            _with_associations(select(AuthUser).order_by(AuthUser.user_id))
        )
        auth_users = {auth_user.user_id: auth_user for auth_user in result.scalars()}

        changes: list[SyncAuthUserWithChange] = []
        for authentication_user in authentication_users:
            auth_user = auth_users.pop(authentication_user.user_id, None)
            change = SyncAuthUserWithChange.compare(authentication_user, auth_user)
            if change.provider_change != SyncAuthUserChanges.NO_CHANGE:
                changes.append(change)

        # Whatever is left is no longer known to the provider
        changes.extend(SyncAuthUserWithChange.compare(None, auth_user) for auth_user in auth_users.values())

        counts = Counter(change.provider_change.value for change in changes)
        log.info(
            "sync_changes_computed",
            provider_users=len(authentication_users),
            **{name.lower(): count for name, count in counts.items()},
        )
        return changes

    async def apply_sync_changes(self, changes_to_apply: Sequence[SyncAuthUserWithChange]) -> Status:
        """Apply the admin-confirmed changes in one transaction.

        A record whose roles or tenant can't be resolved is skipped and its
        error reported; the other records still commit. If the commit itself
        fails nothing is stored. Removes are written before Adds and Updates,
        so a user can take over the email of a user removed in the same sync.
        If anything raises, the session is rolled back before re-raising.
        """
        status = Status()

        try:
            with self._session.no_autoflush:
                for change in changes_to_apply:
                    if change.confirm_change == SyncAuthUserChanges.REMOVE:
                        auth_user = await self._load_for_sync(change.user_id)
                        await self._session.delete(auth_user)
                await self._session.flush()

                for change in changes_to_apply:
                    if change.confirm_change in (SyncAuthUserChanges.NO_CHANGE, SyncAuthUserChanges.REMOVE):
                        continue
                    if change.confirm_change == SyncAuthUserChanges.ADD:
                        status.combine(await self._add_update_auth_user(change, update=False))
                    elif change.confirm_change == SyncAuthUserChanges.UPDATE:
                        status.combine(await self._add_update_auth_user(change, update=True))
                    else:
                        raise ValueError(f"Unknown sync change {change.confirm_change!r}")
        except BaseException:
            await self._session.rollback()
            raise

        if status.has_errors:
            log.warning("sync_changes_skipped", errors=status.errors)

        status.combine(await save_changes_with_unique_check(self._session))

        counts = {
            kind.value: sum(1 for change in changes_to_apply if change.confirm_change == kind)
            for kind in SyncAuthUserChanges
        }
        status.message = "Sync successful: " + ", ".join(
            f"{name} = {count}" for name, count in counts.items()
        )
        log.info("sync_changes_applied", valid=status.is_valid, **counts)
        return status

    async def _load_for_sync(self, user_id: str) -> AuthUser:
        auth_user = await self.find_auth_user_by_user_id(user_id)
        if auth_user is None:
            raise AuthPermissionsError(
                f"This should have loaded an AuthUser with the userId of {user_id}"
            )
        return auth_user

    async def _add_update_auth_user(self, change: SyncAuthUserWithChange, update: bool) -> Status:
        status = Status()

        roles: list[RoleToPermissions] = []
        if change.role_names:
            roles = await self._find_roles(change.role_names)
            found = {role.role_name for role in roles}
            missing = [name for name in change.role_names if name not in found]
            if missing:
                return status.add_error(
                    f"The following role names were not found: {', '.join(missing)}"
                )

        tenant: Tenant | None = None
        if change.tenant_name is not None:
            if not self._options.uses_tenants:
                return status.add_error(
                    f"The user {change.user_name or change.email} has a tenant, but the "
                    "tenant_type option is not set to use tenants."
                )
            tenant = await self._find_tenant(change.tenant_name)
            if tenant is None:
                return status.add_error(f"Could not find the tenant {change.tenant_name}")

        if not update:
            self._session.add(
                AuthUser(change.user_id, change.email, change.user_name, roles, tenant)
            )
            return status

        auth_user = await self._load_for_sync(change.user_id)
        auth_user.change_email(change.email)
        auth_user.change_user_name(change.user_name)
        auth_user.update_user_tenant(tenant)
        # None means "leave the roles alone"
        if change.role_names is not None and sorted(set(change.role_names)) != sorted(auth_user.role_names):
            auth_user.replace_all_roles(roles)
        return status

    # ------------------------------------------------------------------
    # Single-user mutations
    # ------------------------------------------------------------------

    async def change_user_name(self, auth_user: AuthUser, user_name: str) -> Status:
        status = Status()
        if not user_name:
            return status.add_error("The user name cannot be null or an empty string.")
        if len(user_name) > AuthDbConstants.USER_NAME_SIZE:
            return status.add_error(
                f"The user name must be {AuthDbConstants.USER_NAME_SIZE} characters or less."
            )

        status.message = f"Successfully changed the UserName from {auth_user.user_name} to {user_name}."
        auth_user.change_user_name(user_name)
        return status.combine(await save_changes_with_unique_check(self._session))

    async def change_email(self, auth_user: AuthUser, email: str) -> Status:
        status = Status()
        if not email:
            return status.add_error("The email cannot be null or an empty string.")
        if len(email) > AuthDbConstants.EMAIL_SIZE or not is_valid_email(email):
            return status.add_error(f"The email '{email}' is not a valid email.")

        status.message = f"Successfully changed the email from {auth_user.email} to {email}."
        auth_user.change_email(email)
        return status.combine(await save_changes_with_unique_check(self._session))

    async def add_role_to_user(self, auth_user: AuthUser, role_name: str) -> Status:
        _ensure_roles_loaded(auth_user)
        status = Status()
        if not role_name:
            return status.add_error("The role name cannot be null or an empty string.")

        role = await self._find_role(role_name)
        if role is None:
            return status.add_error(f"Could not find the role {role_name}")

        display_name = auth_user.display_name
        added = auth_user.add_role_to_user(role)
        status.combine(await save_changes_with_unique_check(self._session))
        status.message = (
            f"Successfully added the role {role_name} to auth user {display_name}."
            if added
            else f"The auth user {display_name} already had the role {role_name}"
        )
        return status

    async def remove_role_from_user(self, auth_user: AuthUser, role_name: str) -> Status:
        _ensure_roles_loaded(auth_user)
        status = Status()
        if not role_name:
            return status.add_error("The role name cannot be null or an empty string.")

        role = await self._find_role(role_name)
        if role is None:
            return status.add_error(f"Could not find the role {role_name}")

        display_name = auth_user.display_name
        removed = auth_user.remove_role_from_user(role)
        status.combine(await save_changes_with_unique_check(self._session))
        status.message = (
            f"Successfully removed the role {role_name} from auth user {display_name}."
            if removed
            else f"The auth user {display_name} didn't have the role {role_name}"
        )
        return status

    async def change_tenant_to_user(self, auth_user: AuthUser, tenant_full_name: str) -> Status:
        """Set the user's tenant. Needs a ``tenant_type`` that uses tenants."""
        status = Status()
        if not tenant_full_name:
            return status.add_error("The tenant name cannot be null or an empty string.")
        if not self._options.uses_tenants:
            return status.add_error("You have not configured the tenant_type option to use tenants.")

        tenant = await self._find_tenant(tenant_full_name)
        if tenant is None:
            return status.add_error(f"Could not find the tenant {tenant_full_name}")

        status.message = f"Changed the tenant to {tenant_full_name} on auth user {auth_user.display_name}."
        auth_user.update_user_tenant(tenant)
        return status.combine(await save_changes_with_unique_check(self._session))

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _find_role(self, role_name: str) -> RoleToPermissions | None:
        return await self._session.get(RoleToPermissions, role_name)

    async def _find_roles(self, role_names: Sequence[str]) -> list[RoleToPermissions]:
        result = await self._session.execute(
            select(RoleToPermissions).where(RoleToPermissions.role_name.in_(set(role_names)))
        )
        return list(result.scalars())

    async def _find_tenant(self, tenant_full_name: str) -> Tenant | None:
        result = await self._session.execute(
            select(Tenant).where(Tenant.tenant_full_name == tenant_full_name)
        )
        return result.scalars().first()


def _ensure_roles_loaded(auth_user: AuthUser) -> None:
    if "roles" in inspect(auth_user).unloaded:
        raise AuthPermissionsBadDataError("The AuthUser's roles must be loaded", "auth_user")
