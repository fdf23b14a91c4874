"""Authorization store: ORM entities and commit helpers."""

from __future__ import annotations

from authp.db.constants import AuthDbConstants
from authp.db.models import AuthUser, Base, RoleToPermissions, Tenant, user_to_roles
from authp.db.unit_of_work import save_changes_with_unique_check

__all__ = [
    "AuthDbConstants",
    "AuthUser",
    "Base",
    "RoleToPermissions",
    "Tenant",
    "save_changes_with_unique_check",
    "user_to_roles",
]
