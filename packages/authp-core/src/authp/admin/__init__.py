"""Admin services over the authorization store."""

from __future__ import annotations

from authp.admin.bulk_load import BulkLoadUsersService, DefineUserWithRolesTenant
from authp.admin.users import AuthUsersAdminService

__all__ = ["AuthUsersAdminService", "BulkLoadUsersService", "DefineUserWithRolesTenant"]
