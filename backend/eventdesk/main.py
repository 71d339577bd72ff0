"""
EventDesk Backend — FastAPI Application Factory
=================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn eventdesk.main:app), by
       the `eventdesk` console script, and by tests with an in-memory store.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌─────────────────┐ ┌──────────────┐  │
    │  │ Req ID   │→│  Logging        │→│  CORS        │  │
    │  └──────────┘ └─────────────────┘ └──────────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  ┌────────────────────────────┐ ┌─────────────────┐ │
    │  │ {base}/events (CRUD)       │ │ GET /health     │ │
    │  └────────────────────────────┘ └─────────────────┘ │
    │                                                     │
    │  Exception Handlers (all render the JSON envelope): │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ Validation→400 │ NotFound→404 │ Store→500    │   │
    │  │ Unknown route→404 │ Unexpected→500           │   │
    │  └──────────────────────────────────────────────┘   │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Validate configuration (logged, not fatal)
    3. Connect the MongoDB store: ping + schedule index (fatal on failure)
    4. Log base URL and health URL

    Shutdown:
    1. Close the store connection
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from eventdesk import __version__
from eventdesk.config import settings
from eventdesk.database import MongoEventStore
from eventdesk.exceptions import EventDeskError, StartupError, StoreError
from eventdesk.middleware.logging import RequestLoggingMiddleware
from eventdesk.middleware.request_id import RequestIDMiddleware, request_id_var
from eventdesk.responses import error_body, error_response
from eventdesk.routes import events, health
from eventdesk.services.store_base import EventStore

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

    # Third-party libraries that log every operation at DEBUG/INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("pymongo").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Connect the event store on startup and close it on shutdown.

    A store passed to create_app() is used as-is and left open at shutdown;
    otherwise a MongoEventStore is built from settings and owned by the app.
    A failed connection raises StartupError, which aborts server startup.
    """
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("EventDesk Backend starting up (environment=%s)...", settings.environment)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))

    owned_store: Optional[MongoEventStore] = None
    if getattr(app.state, "event_store", None) is None:
        owned_store = MongoEventStore.from_settings(settings)
        try:
            await owned_store.connect()
        except StartupError as e:
            logger.critical("Failed to start server: %s (%s)", e.message, e.detail)
            raise
        app.state.event_store = owned_store

    base = f"http://{settings.backend_host}:{settings.backend_port}"
    logger.info("Server ready at %s", base)
    logger.info("API Base URL: %s%s", base, settings.api_base_path)
    logger.info("Health Check: %s/health", base)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("EventDesk Backend shutting down...")
    if owned_store is not None:
        await owned_store.close()
        app.state.event_store = None
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map everything that escapes a route onto the JSON envelope.

    Handler hierarchy:
        EventDeskError          → its own status_code (400/404/500)
        RequestValidationError  → 400 (malformed JSON or non-object body)
        HTTPException 404/405   → 404 "Route not found"
        HTTPException (other)   → its status with the detail as message
        Exception (fallback)    → 500 "Internal server error"
    """

    @app.exception_handler(EventDeskError)
    async def handle_app_error(request: Request, exc: EventDeskError):
        rid = request_id_var.get("")
        if exc.status_code >= 500:
            logger.error("[%s] %s | Context: %s", rid, exc.message, exc.context)
        else:
            logger.warning("[%s] %s", rid, exc.message)
        return error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        rid = request_id_var.get("")
        errors = exc.errors()
        first = errors[0] if errors else {}
        if first.get("type") == "json_invalid":
            message = "Malformed JSON body"
        else:
            message = "Request body must be a JSON object"
        logger.warning("[%s] Request validation error: %s", rid, errors)
        return JSONResponse(status_code=400, content={"success": False, "message": message})

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        if exc.status_code in (404, 405):
            return JSONResponse(
                status_code=404,
                content={"success": False, "message": "Route not found"},
            )
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Catch-all for truly unexpected errors; stack trace stays server-side."""
        rid = request_id_var.get("")
        logger.error("[%s] Unhandled error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content=error_body(StoreError(detail=str(exc))),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(event_store: Optional[EventStore] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        event_store: Store to serve requests from. When omitted, the lifespan
            handler connects a MongoEventStore built from settings.
    """
    app = FastAPI(
        title="EventDesk API",
        description="CRUD API for event records stored in MongoDB, with paginated listing.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.event_store = event_store

    # ── Register Middleware ───────────────────────────────────────────────
    # Executes in reverse order of addition: RequestID → Logging → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(events.router, prefix=settings.api_base_path)
    app.include_router(health.router)

    return app


def run() -> None:
    """Console entry point: serve the app with uvicorn on the configured host/port."""
    import uvicorn

    uvicorn.run(
        "eventdesk.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        log_level=settings.log_level.lower(),
    )


# uvicorn expects `eventdesk.main:app` to be importable
app = create_app()
