"""Auth user admin endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException
from fastapi.responses import JSONResponse

from authp.admin.users import AuthUsersAdminService
from authp.db.models import AuthUser
from authp.status import Status
from authp_service.db.deps import AdminServiceDep
from authp_service.rest.schemas import (
    AddRoleRequest,
    AuthUserSchema,
    ChangeEmailRequest,
    ChangeTenantRequest,
    ChangeUserNameRequest,
    StatusSchema,
)

router = APIRouter()


def _user_to_schema(user: AuthUser) -> AuthUserSchema:
    """Convert an ORM AuthUser (roles and tenant loaded) to the REST schema."""
    tenant = user.tenant
    return AuthUserSchema(
        user_id=user.user_id,
        email=user.email,
        user_name=user.user_name,
        role_names=user.role_names,
        tenant_name=tenant.tenant_full_name if tenant is not None else None,
        tenant_data_key=tenant.data_key if tenant is not None else None,
    )


def status_response(status: Status) -> StatusSchema | JSONResponse:
    """Invalid statuses go back as 400 with the same body shape."""
    body = StatusSchema(is_valid=status.is_valid, message=status.message, errors=status.errors)
    if not status.is_valid:
        return JSONResponse(status_code=400, content=body.model_dump())
    return body


async def _get_user_or_404(service: AuthUsersAdminService, user_id: str) -> AuthUser:
    user = await service.find_auth_user_by_user_id(user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="Auth user not found")
    return user


@router.get("/users", response_model=list[AuthUserSchema])
async def list_users(service: AdminServiceDep, data_key: str | None = None) -> list[AuthUserSchema]:
    return [_user_to_schema(u) async for u in service.iter_auth_users(data_key)]


@router.get("/users/{user_id}", response_model=AuthUserSchema)
async def get_user(user_id: str, service: AdminServiceDep) -> AuthUserSchema:
    return _user_to_schema(await _get_user_or_404(service, user_id))


@router.put("/users/{user_id}/user-name", response_model=StatusSchema)
async def change_user_name(user_id: str, request: ChangeUserNameRequest, service: AdminServiceDep):
    user = await _get_user_or_404(service, user_id)
    return status_response(await service.change_user_name(user, request.user_name))


@router.put("/users/{user_id}/email", response_model=StatusSchema)
async def change_email(user_id: str, request: ChangeEmailRequest, service: AdminServiceDep):
    user = await _get_user_or_404(service, user_id)
    return status_response(await service.change_email(user, request.email))


@router.post("/users/{user_id}/roles", response_model=StatusSchema)
async def add_role(user_id: str, request: AddRoleRequest, service: AdminServiceDep):
    user = await _get_user_or_404(service, user_id)
    return status_response(await service.add_role_to_user(user, request.role_name))


@router.delete("/users/{user_id}/roles/{role_name}", response_model=StatusSchema)
async def remove_role(user_id: str, role_name: str, service: AdminServiceDep):
    user = await _get_user_or_404(service, user_id)
    return status_response(await service.remove_role_from_user(user, role_name))


@router.put("/users/{user_id}/tenant", response_model=StatusSchema)
async def change_tenant(user_id: str, request: ChangeTenantRequest, service: AdminServiceDep):
    user = await _get_user_or_404(service, user_id)
    return status_response(await service.change_tenant_to_user(user, request.tenant_name))
