"""HTTP surface exposing the user table to authenticated automation clients."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict

from fastapi import Depends, FastAPI, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import Settings
from .database import CredentialStore, DatabaseError
from .errors import (
    ErrorKind,
    ServiceError,
    http_exception_handler,
    service_error_handler,
    unhandled_exception_handler,
)
from .models import (
    ChangePasswordRequest,
    ChangePasswordResponse,
    HealthResponse,
    UserListResponse,
    UserResponse,
)
from .security import APIKeyAuth
from .users import PasswordChangeService, UserQueryService

logger = logging.getLogger("n8n_user_manager.service")


async def _read_change_password_request(request: Request) -> ChangePasswordRequest:
    try:
        payload: Any = await request.json()
    except ValueError:
        payload = None

    if not isinstance(payload, dict):
        payload = {}

    try:
        return ChangePasswordRequest.model_validate(payload)
    except ValidationError as exc:
        raise ServiceError(ErrorKind.VALIDATION, "Email and newPassword must be strings") from exc


def register_api_routes(
    app: FastAPI,
    store: CredentialStore,
    *,
    auth: APIKeyAuth,
) -> None:
    """Expose the health check and the authenticated user endpoints."""

    queries = UserQueryService(store)
    passwords = PasswordChangeService(store)

    @app.get("/health", response_model=HealthResponse)
    async def healthcheck():
        try:
            await store.ping()
        except DatabaseError as exc:
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={"status": "unhealthy", "database": "disconnected", "error": str(exc)},
            )
        return HealthResponse(status="healthy", database="connected")

    @app.get("/api/users", response_model=UserListResponse, dependencies=[Depends(auth)])
    @app.get("/api/users/", response_model=UserListResponse, dependencies=[Depends(auth)])
    async def list_users() -> UserListResponse:
        return await queries.list_users()

    @app.post(
        "/api/users/change-password",
        response_model=ChangePasswordResponse,
        dependencies=[Depends(auth)],
    )
    async def change_password(request: Request) -> ChangePasswordResponse:
        body = await _read_change_password_request(request)
        return await passwords.change_password(body.email, body.new_password)

    @app.get("/api/users/{email}", response_model=UserResponse, dependencies=[Depends(auth)])
    async def get_user(email: str) -> UserResponse:
        return await queries.get_user(email)


def create_app(
    *,
    settings: Settings | None = None,
    store: CredentialStore | None = None,
) -> FastAPI:
    """Instantiate the FastAPI application.

    ``settings`` defaults to :meth:`Settings.from_env`; ``store`` defaults to a
    PostgreSQL pool built from those settings. The store is closed when the
    application shuts down.
    """

    config = settings or Settings.from_env()
    credential_store = store or CredentialStore.from_settings(config)

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        logger.info("User manager API ready")
        yield
        logger.info("Shutdown requested, draining connections")
        await credential_store.close()

    app = FastAPI(
        title="n8n User Manager",
        version="0.1.0",
        description="Read users and change passwords in an n8n user table.",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        redirect_slashes=False,
        lifespan=lifespan,
    )
    app.state.settings = config
    app.state.store = credential_store

    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    register_api_routes(app, credential_store, auth=APIKeyAuth(config.api_key))

    return app


def describe_endpoints() -> Dict[str, str]:
    """Route summary printed by the CLI at startup."""

    return {
        "GET  /health": "Health check (no auth)",
        "GET  /api/users": "List all users (auth required)",
        "GET  /api/users/:email": "Get user by email (auth required)",
        "POST /api/users/change-password": "Change user password (auth required)",
    }


__all__ = ["create_app", "describe_endpoints", "register_api_routes"]
