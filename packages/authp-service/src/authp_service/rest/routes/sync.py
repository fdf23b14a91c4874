"""Authentication-provider sync endpoints: review then apply."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, HTTPException

from authp.errors import AuthPermissionsError
from authp.sync.changes import SyncAuthUserWithChange
from authp_service.db.deps import AdminServiceDep
from authp_service.rest.routes.users import status_response
from authp_service.rest.schemas import ApplySyncChangesRequest, StatusSchema, SyncChangeSchema

log = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/sync/changes", response_model=list[SyncChangeSchema])
async def sync_changes(service: AdminServiceDep) -> list[SyncChangeSchema]:
    try:
        changes = await service.sync_and_show_changes()
    except AuthPermissionsError as exc:
        log.error("sync_not_configured", error=str(exc))
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    return [SyncChangeSchema.model_validate(change) for change in changes]


@router.post("/sync/apply", response_model=StatusSchema)
async def apply_sync_changes(request: ApplySyncChangesRequest, service: AdminServiceDep):
    changes = [SyncAuthUserWithChange(**change.model_dump()) for change in request.changes]
    return status_response(await service.apply_sync_changes(changes))
