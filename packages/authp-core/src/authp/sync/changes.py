"""Comparison records produced by the authentication-provider sync."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from authp.db.models import AuthUser


class SyncAuthUserChanges(str, Enum):
    """What a sync record does to the stored users. Declaration order is the summary order."""
    NO_CHANGE = "NoChange"
    ADD = "Add"
    UPDATE = "Update"
    REMOVE = "Remove"


@dataclass(frozen=True)
class SyncAuthenticationUser:
    """One active identity as reported by the authentication provider."""

    user_id: str
    email: str
    user_name: str | None = None


@dataclass
class SyncAuthUserWithChange:
    """A pending change for one user, shown to an admin before it is applied.

    ``confirm_change`` starts out equal to ``provider_change``; the admin may
    downgrade it (e.g. to ``NO_CHANGE``) and fill in ``role_names`` and
    ``tenant_name`` for new users.
    """

    user_id: str
    email: str
    user_name: str | None = None
    old_email: str | None = None
    old_user_name: str | None = None
    provider_change: SyncAuthUserChanges = SyncAuthUserChanges.NO_CHANGE
    confirm_change: SyncAuthUserChanges | None = None
    role_names: list[str] | None = None
    tenant_name: str | None = None

    def __post_init__(self) -> None:
        if self.confirm_change is None:
            self.confirm_change = self.provider_change

    @classmethod
    def compare(
        cls,
        authentication_user: SyncAuthenticationUser | None,
        auth_user: AuthUser | None,
    ) -> SyncAuthUserWithChange:
        """Build the record for a provider identity and/or a stored user.

        The stored user, when given, must have its roles and tenant loaded.
        """
        if authentication_user is None and auth_user is None:
            raise ValueError("A sync change needs an authentication user, a stored user, or both")

        if auth_user is None:
            return cls(
                user_id=authentication_user.user_id,
                email=authentication_user.email,
                user_name=authentication_user.user_name,
                provider_change=SyncAuthUserChanges.ADD,
            )

        role_names = auth_user.role_names
        tenant_name = auth_user.tenant.tenant_full_name if auth_user.tenant is not None else None

        if authentication_user is None:
            return cls(
                user_id=auth_user.user_id,
                email=auth_user.email,
                user_name=auth_user.user_name,
                old_email=auth_user.email,
                old_user_name=auth_user.user_name,
                provider_change=SyncAuthUserChanges.REMOVE,
                role_names=role_names,
                tenant_name=tenant_name,
            )

        differs = (
            authentication_user.email != auth_user.email
            or authentication_user.user_name != auth_user.user_name
        )
        return cls(
            user_id=authentication_user.user_id,
            email=authentication_user.email,
            user_name=authentication_user.user_name,
            old_email=auth_user.email,
            old_user_name=auth_user.user_name,
            provider_change=SyncAuthUserChanges.UPDATE if differs else SyncAuthUserChanges.NO_CHANGE,
            role_names=role_names,
            tenant_name=tenant_name,
        )
