"""FastAPI application factory."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from authp.errors import AuthPermissionsError
from authp_service.db.engine import close_db, init_db
from authp_service.rest.routes.health import router as health_router
from authp_service.rest.routes.sync import router as sync_router
from authp_service.rest.routes.users import router as users_router

log = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    await init_db()
    yield
    await close_db()


async def _auth_permissions_error_handler(request: Request, exc: AuthPermissionsError) -> JSONResponse:
    log.error("auth_permissions_error", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=500, content={"detail": str(exc)})


def create_app() -> FastAPI:
    app = FastAPI(
        title="AuthP Admin API",
        description="Authorization users admin and authentication-provider sync",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(AuthPermissionsError, _auth_permissions_error_handler)

    app.include_router(health_router, tags=["health"])
    app.include_router(users_router, prefix="/api/v1", tags=["users"])
    app.include_router(sync_router, prefix="/api/v1", tags=["sync"])

    return app
