"""
StickyShare Backend — FastAPI Application Factory
==================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn stickyshare.main:app).

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                       FastAPI App                        │
    │                                                          │
    │  Middleware Chain:                                       │
    │  ┌──────────┐ ┌──────────┐ ┌──────┐ ┌──────┐             │
    │  │ Req ID   │→│ Logging  │→│ GZip │→│ CORS │             │
    │  └──────────┘ └──────────┘ └──────┘ └──────┘             │
    │                                                          │
    │  Routes:                                                 │
    │  ┌────────────┐ ┌─────────────┐ ┌───────────────┐        │
    │  │ Pages (/)  │ │ /api/notes  │ │ GET /health   │        │
    │  └────────────┘ └─────────────┘ └───────────────┘        │
    │                                                          │
    │  Exception Handlers:                                     │
    │  Validation→400 │ NotFound→404 │ Conflict→409 │ Gateway→502 │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Validate configuration (logged, not fatal)
    3. Create the storage gateway client

    Shutdown:
    1. Close the gateway's HTTP connection pool
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from stickyshare import __version__
from stickyshare.config import settings
from stickyshare.dependencies import create_gateway
from stickyshare.exceptions import (
    ComposerStateError,
    NotFoundError,
    RepositoryError,
    StickyShareError,
    UploadError,
    ValidationError,
)
from stickyshare.middleware.logging import RequestLoggingMiddleware
from stickyshare.middleware.request_id import RequestIDMiddleware, request_id_var
from stickyshare.routes import health, notes, pages

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: 2024-06-10T14:03:11 [INFO] stickyshare.access: GET / 200 12.3ms ...
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Our access middleware already logs every request
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Create the gateway client on startup and close it on shutdown.

    A gateway already present on app.state (tests) is used as-is and left
    open for its owner to close.
    """
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("StickyShare starting up...")

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))
        logger.error("Fix the configuration and restart the server.")
        # Keep serving: /health reports the gateway as disconnected

    owns_gateway = getattr(app.state, "gateway", None) is None
    if owns_gateway:
        app.state.gateway = create_gateway()
    logger.info("Storage gateway: %s", settings.gateway_url)
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("StickyShare shutting down...")
    if owns_gateway:
        await app.state.gateway.aclose()
        app.state.gateway = None
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_response(status_code: int, error: str, message: str, details=None) -> JSONResponse:
    content = {"error": error, "message": message, "request_id": request_id_var.get("")}
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map the StickyShare exception taxonomy onto HTTP responses.

    Handler hierarchy:
        ValidationError     → 400 Bad Request
        NotFoundError       → 404 Not Found
        ComposerStateError  → 409 Conflict
        RepositoryError     → 502 Bad Gateway (generic message)
        UploadError         → 502 Bad Gateway
        StickyShareError    → 500 Internal Server Error
        Exception           → 500 Internal Server Error

    Gateway status codes and bodies are logged, never returned.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return _error_response(400, "validation_error", exc.message, {"title": exc.title, **exc.context})

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error_response(404, "not_found", exc.message)

    @app.exception_handler(ComposerStateError)
    async def handle_composer_state(request: Request, exc: ComposerStateError):
        return _error_response(409, "conflict", exc.message)

    @app.exception_handler(RepositoryError)
    async def handle_repository_error(request: Request, exc: RepositoryError):
        rid = request_id_var.get("")
        logger.error("[%s] Repository error: %s | Context: %s", rid, exc.message, exc.context)
        return _error_response(502, "repository_error", exc.message)

    @app.exception_handler(UploadError)
    async def handle_upload_error(request: Request, exc: UploadError):
        rid = request_id_var.get("")
        logger.error("[%s] Upload error: %s | Context: %s", rid, exc.message, exc.context)
        return _error_response(502, "upload_error", exc.message)

    @app.exception_handler(StickyShareError)
    async def handle_application_error(request: Request, exc: StickyShareError):
        rid = request_id_var.get("")
        logger.error("[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context)
        return _error_response(500, "server_error", "An internal error occurred. Please try again later.")

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("[%s] Unexpected error: %s", request_id_var.get(""), str(exc), exc_info=True)
        return _error_response(
            500,
            "internal_server_error",
            "An unexpected error occurred. Please try again.",
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """
    Assemble middleware, exception handlers and routers.

    Middleware executes in reverse order of addition:
    RequestID → Logging → GZip → CORS.
    """
    app = FastAPI(
        title="StickyShare",
        description=(
            "Sticky notes with text and images in eight colors. "
            "Create, browse, delete and share notes by link."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Total-Count"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(pages.router)
    app.include_router(notes.router)
    app.include_router(health.router)

    return app


app = create_app()
