"""
Daygrid Backend - FastAPI Application Factory
===============================================

What:  Builds the FastAPI app: middleware, exception handlers, routers, lifespan.
Who:   uvicorn (`uvicorn daygrid.main:app`) and the test suite (`create_app()`).

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware: CORS → RequestID → AccessLog → GZip    │
    │              → RateLimit (429 handled in place)     │
    │                                                     │
    │  Routers: auth, profile, tasks, grid, posts,        │
    │           likes & comments, media, health           │
    │                                                     │
    │  Exception Handlers:                                │
    │    Validation→400  Authentication→401               │
    │    PermissionDenied→403  NotFound→404               │
    │    Conflict→409  Storage/DB→500                     │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging, configuration check, storage directory
    Shutdown: dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from daygrid import __version__
from daygrid.config import settings
from daygrid.database import dispose_engine
from daygrid.exceptions import (
    AuthenticationError,
    ConflictError,
    DatabaseError,
    DaygridError,
    FileStorageError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from daygrid.middleware.logging import RequestLoggingMiddleware
from daygrid.middleware.rate_limit import RateLimitMiddleware
from daygrid.middleware.request_id import REQUEST_ID_HEADER, RequestIDMiddleware, request_id_var
from daygrid.routes import auth, grid, health, interactions, media, posts, profile, tasks

logger = logging.getLogger(__name__)


def setup_logging() -> None:
    """
    Configure the root logger once at startup.

    Format: 2024-01-15T12:00:00 [INFO] daygrid.access: GET /api/grid 200 4.2ms [a1b2c3d4] ...
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Per-query and per-connection chatter
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("=" * 60)
    logger.info("Daygrid Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving so /health can report the problem
        logger.error("Configuration error: %s", str(e))

    storage = Path(settings.storage_root)
    storage.mkdir(parents=True, exist_ok=True)
    logger.info("Storage directory: %s", storage.resolve())
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("Daygrid Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


def _error_response(
    status_code: int,
    error: str,
    exc: DaygridError,
    include_details: bool = True,
    headers: dict | None = None,
) -> JSONResponse:
    content = {
        "error": error,
        "message": exc.message,
        "request_id": request_id_var.get(""),
    }
    if include_details and exc.context:
        content["details"] = exc.context
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map the DaygridError hierarchy to HTTP responses.

    Every body follows ErrorResponse: error code, message, optional details
    and the request ID. Storage, database and unexpected errors return a
    generic message; their context is logged only.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return _error_response(400, "validation_error", exc)

    @app.exception_handler(AuthenticationError)
    async def handle_authentication_error(request: Request, exc: AuthenticationError):
        return _error_response(
            401,
            "authentication_error",
            exc,
            include_details=False,
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(PermissionDeniedError)
    async def handle_permission_denied(request: Request, exc: PermissionDeniedError):
        logger.warning("[%s] Permission denied: %s", request_id_var.get(""), exc.message)
        return _error_response(403, "permission_denied", exc, include_details=False)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error_response(404, "not_found", exc, include_details=False)

    @app.exception_handler(ConflictError)
    async def handle_conflict(request: Request, exc: ConflictError):
        return _error_response(409, "conflict", exc)

    @app.exception_handler(FileStorageError)
    async def handle_file_storage_error(request: Request, exc: FileStorageError):
        logger.error(
            "[%s] File storage error: %s | Context: %s",
            request_id_var.get(""), exc.message, exc.context,
        )
        return _error_response(500, "server_error", exc, include_details=False)

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        rid = request_id_var.get("")
        logger.error("[%s] Database error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content={
                "error": "server_error",
                "message": "An internal error occurred. Please try again later.",
                "request_id": rid,
            },
        )

    @app.exception_handler(DaygridError)
    async def handle_daygrid_error(request: Request, exc: DaygridError):
        logger.error("[%s] Unhandled application error: %s", request_id_var.get(""), exc.message)
        return _error_response(500, "server_error", exc, include_details=False)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred. Please try again or contact support.",
                "request_id": rid,
            },
        )


def create_app() -> FastAPI:
    app = FastAPI(
        title="Daygrid API",
        description=(
            "Daily task photo grids: keep up to nine tasks, fill a grid with one photo "
            "per task, publish it, and like or comment on other people's grids."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Last added is outermost; rate limiting runs inside the request ID and CORS layers
    app.add_middleware(RateLimitMiddleware)
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER, "Retry-After"],
    )

    register_exception_handlers(app)

    app.include_router(auth.router)
    app.include_router(profile.router)
    app.include_router(tasks.router)
    app.include_router(grid.router)
    app.include_router(posts.router)
    app.include_router(interactions.router)
    app.include_router(media.router)
    app.include_router(health.router)

    return app


app = create_app()
