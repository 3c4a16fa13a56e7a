"""
TravelStory Backend - FastAPI Application Factory
===================================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes middleware registration, route mounting, static files,
       exception handling and lifecycle management in one place.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn (uvicorn travelstory.main:app) and by the tests.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                       FastAPI App                        │
    │                                                          │
    │  Middleware: RateLimit → RequestID → Logging → GZip → CORS│
    │                                                          │
    │  Routes:                                                 │
    │   /create-account /login            (public)             │
    │   /image-upload /delete-image       (public)             │
    │   /get-user + all story routes      (bearer token)       │
    │   /health                                                │
    │                                                          │
    │  Static: /{UPLOADS_PATH} /{ASSETS_PATH} (read-only)      │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging → config check → storage directories
    Shutdown: dispose database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from travelstory import __version__
from travelstory.config import settings
from travelstory.database import dispose_engine
from travelstory.exceptions import (
    AuthenticationError,
    ConflictError,
    FileStorageError,
    InvalidCredentialsError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from travelstory.middleware.logging import RequestLoggingMiddleware
from travelstory.middleware.rate_limit import RateLimitMiddleware
from travelstory.middleware.request_id import RequestIDMiddleware, request_id_var
from travelstory.routes import auth, health, images, stories

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Called once during app startup, before any other initialization.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def ensure_storage_dirs() -> None:
    """Create the uploads/assets directories the static mounts serve from."""
    for directory in (settings.uploads_dir, settings.assets_dir):
        Path(directory).mkdir(parents=True, exist_ok=True)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("TravelStory Backend starting up...")

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Not fatal: local development runs with the default secret
        logger.error("Configuration error: %s", str(e))

    ensure_storage_dirs()
    placeholder = Path(settings.assets_dir) / "placeholder.jpg"
    if not placeholder.exists():
        logger.warning("Placeholder image missing at %s", placeholder.resolve())

    logger.info("Uploads directory: %s", Path(settings.uploads_dir).resolve())
    logger.info("Public base URL: %s", settings.base_url)
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("TravelStory Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_response(
    status_code: int,
    error: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    content: Dict[str, Any] = {
        "error": error,
        "message": message,
        "request_id": request_id_var.get(""),
    }
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map application exceptions to HTTP responses.

    Handler hierarchy:
        ValidationError           → 400 validation_error
        RequestValidationError    → 400 validation_error (malformed body/params)
        ConflictError             → 400 conflict
        InvalidCredentialsError   → 400 invalid_credentials
        AuthenticationError       → 401 unauthenticated
        NotFoundError             → 404 not_found
        StorageError              → 500 storage_error
        FileStorageError          → 500 server_error
        Exception (fallback)      → 500 internal_server_error
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return _error_response(400, "validation_error", exc.message, exc.context)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        errors = [
            {"field": ".".join(str(part) for part in err.get("loc", ())), "message": err.get("msg")}
            for err in exc.errors()
        ]
        return _error_response(400, "validation_error", "Invalid request", {"errors": errors})

    @app.exception_handler(ConflictError)
    async def handle_conflict(request: Request, exc: ConflictError):
        return _error_response(400, "conflict", exc.message)

    @app.exception_handler(InvalidCredentialsError)
    async def handle_invalid_credentials(request: Request, exc: InvalidCredentialsError):
        return _error_response(400, "invalid_credentials", exc.message)

    @app.exception_handler(AuthenticationError)
    async def handle_authentication_error(request: Request, exc: AuthenticationError):
        return _error_response(
            401,
            "unauthenticated",
            exc.message,
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error_response(404, "not_found", exc.message)

    @app.exception_handler(StorageError)
    async def handle_storage_error(request: Request, exc: StorageError):
        logger.error(
            "[%s] Storage error: %s | Context: %s",
            request_id_var.get(""), exc.message, exc.context,
        )
        return _error_response(500, "storage_error", exc.message)

    @app.exception_handler(FileStorageError)
    async def handle_file_storage_error(request: Request, exc: FileStorageError):
        logger.error(
            "[%s] File storage error: %s | Context: %s",
            request_id_var.get(""), exc.message, exc.context,
        )
        return _error_response(500, "server_error", exc.message)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Catch-all: stack trace goes to the log, never to the client."""
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            str(exc),
            exc_info=True,
        )
        return _error_response(
            500,
            "internal_server_error",
            "An unexpected error occurred. Please try again or contact support.",
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="TravelStory API",
        description=(
            "Personal travel journal: register, log in, and keep dated travel "
            "stories with an uploaded image. Stories are private to their owner."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Executes in REVERSE order of addition (last added = first to run)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=False,     # Bearer tokens travel in headers, not cookies
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(RateLimitMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(auth.router)
    app.include_router(stories.router)
    app.include_router(images.router)
    app.include_router(health.router)

    # ── Static Files ──────────────────────────────────────────────────────
    # StaticFiles checks its directory at construction time
    ensure_storage_dirs()
    app.mount(
        f"/{settings.uploads_path}",
        StaticFiles(directory=settings.uploads_dir),
        name="uploads",
    )
    app.mount(
        f"/{settings.assets_path}",
        StaticFiles(directory=settings.assets_dir),
        name="assets",
    )

    return app


# uvicorn expects `travelstory.main:app` to be importable
app = create_app()
