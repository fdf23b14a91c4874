"""Options shared by the authp admin services."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class TenantType(str, Enum):
    """How (and whether) the application partitions users into tenants."""
    NOT_USING_TENANTS = "not_using_tenants"
    SINGLE_LEVEL = "single_level"
    HIERARCHICAL = "hierarchical"


class AuthPermissionsOptions(BaseModel):
    """Top-level options for the authorization admin services."""
    tenant_type: TenantType = Field(
        default=TenantType.NOT_USING_TENANTS,
        description="Tenant support; users only get a tenant when this is enabled",
    )

    model_config = {"populate_by_name": True}

    @property
    def uses_tenants(self) -> bool:
        return self.tenant_type != TenantType.NOT_USING_TENANTS
