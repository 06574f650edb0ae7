from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Optional
from uuid import uuid4

from fastapi import APIRouter, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from category_api.api.routes.categories import (
    supplier_categories_router,
    user_categories_router,
)
from category_api.core.errors import (
    CategoryError,
    NotFoundError,
    StorageError,
    ValidationError,
    VersionConflictError,
)
from category_api.core.logging import configure_logging, correlation_id_var
from category_api.core.settings import AppSettings, get_app_settings
from category_api.db.run_migrations import main as run_alembic
from category_api.db.session import Database
from category_api.schemas.common import ErrorInfo, ErrorResponse, MessageResponse

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "Health", "description": "Liveness probe."},
    {"name": "User Categories", "description": "Categories assigned to users."},
    {"name": "Supplier Categories", "description": "Categories assigned to suppliers."},
]

_STATUS_BY_ERROR = {
    NotFoundError: 404,
    VersionConflictError: 409,
    ValidationError: 400,
    StorageError: 500,
}


def _build_error_response(
    request: Request,
    status_code: int,
    error_type: str,
    message: str,
    details: Any | None = None,
) -> JSONResponse:
    """Build a standardized ErrorResponse JSONResponse."""
    correlation_id = getattr(request.state, "correlation_id", None)
    err = ErrorResponse(
        status=status_code,
        error=ErrorInfo(type=error_type, message=message, details=details),
        correlation_id=correlation_id,
        path=request.url.path,
        method=request.method,
        timestamp=datetime.now(tz=timezone.utc),
    )
    response = JSONResponse(status_code=status_code, content=err.model_dump(mode="json"))
    # The catch-all handler answers outside request_context_middleware.
    if correlation_id:
        response.headers["X-Correlation-ID"] = correlation_id
    return response


async def request_context_middleware(request: Request, call_next):
    """
    Bind a correlation id to the request for logging and error responses.
    Adds 'X-Correlation-ID' to every response.
    """
    corr = request.headers.get("X-Correlation-ID") or request.headers.get("X-Request-ID") or str(uuid4())
    token = correlation_id_var.set(corr)
    request.state.correlation_id = corr

    logger.info("Incoming request %s %s", request.method, request.url.path)
    try:
        response = await call_next(request)
    finally:
        correlation_id_var.reset(token)
    response.headers["X-Correlation-ID"] = corr
    return response


async def http_exception_handler(request: Request, exc: HTTPException):
    """Global handler for HTTPException to produce a standardized error envelope."""
    detail = exc.detail if isinstance(exc.detail, str) else "HTTP Error"
    return _build_error_response(
        request=request,
        status_code=exc.status_code,
        error_type="http_error",
        message=str(detail),
        details=None if isinstance(exc.detail, str) else exc.detail,
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Global handler for request validation errors with a standard structure."""
    return _build_error_response(
        request=request,
        status_code=422,
        error_type="validation_error",
        message="Request validation failed",
        details=jsonable_errors(exc),
    )


def jsonable_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    # pydantic error contexts may hold exception instances
    return [{k: v for k, v in e.items() if k != "ctx"} for e in exc.errors()]


async def category_exception_handler(request: Request, exc: CategoryError):
    """
    Map domain errors to HTTP outcomes.

    Storage faults keep their cause in the log only; clients get a generic message.
    """
    status_code = next(
        (code for cls, code in _STATUS_BY_ERROR.items() if isinstance(exc, cls)), 500
    )
    if isinstance(exc, StorageError):
        logger.error("Storage failure: %s", exc.message, exc_info=exc.cause or exc)
    return _build_error_response(
        request=request,
        status_code=status_code,
        error_type=exc.error_type,
        message=exc.message,
        details=exc.details(),
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    """Catch-all handler to avoid leaking stack traces and to return a structured error."""
    logger.exception("Unhandled error processing request")
    return _build_error_response(
        request=request,
        status_code=500,
        error_type="internal_error",
        message="An unexpected error occurred",
        details=None,
    )


def _build_lifespan(settings: AppSettings):
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """
        Run migrations on startup when enabled; dispose the database engine on shutdown.
        """
        if settings.RUN_MIGRATIONS_ON_STARTUP:
            try:
                logger.info("Running Alembic migrations: upgrade head")
                # env.py drives its own event loop, so keep it off ours.
                await asyncio.to_thread(run_alembic, ["upgrade", "head"])
                logger.info("Migrations completed.")
            except Exception as exc:
                logger.exception("Migration step failed: %s", exc)
        try:
            yield
        finally:
            await app.state.database.dispose()

    return lifespan


# PUBLIC_INTERFACE
def create_app(
    settings: Optional[AppSettings] = None,
    database: Optional[Database] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Parameters:
        settings: application settings; read from the environment when omitted.
        database: Database capability; built from category_api.db.config when omitted.
    """
    settings = settings or get_app_settings()
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title=settings.APP_NAME,
        description=settings.APP_DESCRIPTION,
        version=settings.APP_VERSION,
        openapi_tags=openapi_tags,
        lifespan=_build_lifespan(settings),
    )
    app.state.database = database or Database.from_settings()
    app.state.environment = settings.ENVIRONMENT
    logger.info(
        "Configured %s %s (environment=%s)",
        settings.APP_NAME, settings.APP_VERSION, settings.ENVIRONMENT or "unset",
    )

    # CORS - avoid wildcard with credentials
    cors_allow_credentials = settings.CORS_ALLOW_CREDENTIALS
    if settings.CORS_ORIGINS == ["*"] and cors_allow_credentials:
        logger.warning("CORS_ALLOW_CREDENTIALS=True with '*' origins is not permitted; disabling credentials.")
        cors_allow_credentials = False

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=cors_allow_credentials,
        allow_methods=settings.CORS_ALLOW_METHODS,
        allow_headers=settings.CORS_ALLOW_HEADERS,
    )
    app.middleware("http")(request_context_middleware)

    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(CategoryError, category_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    api_v1 = APIRouter(prefix="/api/v1")

    # PUBLIC_INTERFACE
    @api_v1.get(
        "/health",
        response_model=MessageResponse,
        summary="Health Check",
        tags=["Health"],
    )
    def health_check() -> MessageResponse:
        """Basic liveness health check endpoint."""
        return MessageResponse(message="Healthy")

    api_v1.include_router(user_categories_router)
    api_v1.include_router(supplier_categories_router)
    app.include_router(api_v1)
    return app
