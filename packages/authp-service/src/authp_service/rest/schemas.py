"""Pydantic request/response models for REST API."""

from __future__ import annotations

from pydantic import BaseModel, Field

from authp.sync.changes import SyncAuthUserChanges


class StatusSchema(BaseModel):
    is_valid: bool
    message: str
    errors: list[str] = Field(default_factory=list)


class AuthUserSchema(BaseModel):
    user_id: str
    email: str
    user_name: str | None = None
    role_names: list[str] = Field(default_factory=list)
    tenant_name: str | None = None
    tenant_data_key: str | None = None


class ChangeUserNameRequest(BaseModel):
    user_name: str


class ChangeEmailRequest(BaseModel):
    email: str


class AddRoleRequest(BaseModel):
    role_name: str


class ChangeTenantRequest(BaseModel):
    tenant_name: str


class SyncChangeSchema(BaseModel):
    user_id: str
    email: str
    user_name: str | None = None
    old_email: str | None = None
    old_user_name: str | None = None
    provider_change: SyncAuthUserChanges
    confirm_change: SyncAuthUserChanges | None = None
    role_names: list[str] | None = None
    tenant_name: str | None = None

    model_config = {"from_attributes": True}


class ApplySyncChangesRequest(BaseModel):
    changes: list[SyncChangeSchema]
