"""
ResilienceHub Backend — FastAPI Application Factory
===================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn resilience_hub.main:app).

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware Chain:                                       │
    │  ┌──────────────┐ ┌──────────┐ ┌─────────────────┐       │
    │  │  Rate Limit  │→│ Req ID   │→│  Logging        │       │
    │  └──────────────┘ └──────────┘ └─────────────────┘       │
    │                                                          │
    │  Per-route dependency chain:                             │
    │  Authenticator → Role Gates → Access-Scope Resolver      │
    │        ↑                                                 │
    │  app.state.session_cache (SessionCache | None)           │
    │                                                          │
    │  Exception Handlers:                                     │
    │  401 (clears cookie) │ 403 │ 404 │ 400 │ 409 │ 429 │ 500  │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Purge expired session rows
    3. Start the session cache sweeper

    Shutdown:
    1. Stop the sweeper and drop cached principals
    2. Dispose database engine (close all connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from resilience_hub import __version__
from resilience_hub.auth.cookies import clear_session_cookie
from resilience_hub.config import settings
from resilience_hub.database import async_session_factory, dispose_engine
from resilience_hub.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DatabaseError,
    NotFoundError,
    ResilienceHubError,
    ValidationError,
)
from resilience_hub.middleware.logging import RequestLoggingMiddleware
from resilience_hub.middleware.rate_limit import RateLimitMiddleware
from resilience_hub.middleware.request_id import RequestIDMiddleware, request_id_var
from resilience_hub.routes import (
    actions,
    auth,
    emotions,
    goals,
    health,
    journal,
    library,
    resources,
    subscription_plans,
    thoughts,
    users,
)
from resilience_hub.services.session_cache import SessionCache
from resilience_hub.services.session_store import SessionStore

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error"


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s

    Called once during startup, before anything else logs.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),  # Docker captures stdout
        ],
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.WARNING)


async def purge_expired_sessions() -> int:
    """Delete session rows that expired while the server was down."""
    async with async_session_factory() as db:
        return await SessionStore(db).purge_expired()


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("ResilienceHub Backend starting up...")

    try:
        await purge_expired_sessions()
    except DatabaseError as e:
        # Expired rows are still rejected (and deleted) on first use
        logger.warning("Expired session purge skipped: %s", e.message)

    cache: Optional[SessionCache] = app.state.session_cache
    if cache is not None:
        await cache.start()
    else:
        logger.info("Session cache disabled; every request hits the session store")

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield  # Application runs here

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("ResilienceHub Backend shutting down...")

    if cache is not None:
        await cache.stop()

    await dispose_engine()

    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP status codes.

    Handler hierarchy:
        AuthenticationError     → 401 (+ cookie cleared when the token was rejected)
        AuthorizationError      → 403
        NotFoundError           → 404
        ValidationError         → 400
        RequestValidationError  → 400 "Invalid data"
        ConflictError           → 409
        DatabaseError           → 500
        ResilienceHubError      → its own status_code
        Exception (fallback)    → 500

    Every body carries a "message" key. `context` is logged, never returned.
    """

    @app.exception_handler(AuthenticationError)
    async def handle_authentication_error(request: Request, exc: AuthenticationError):
        # Expected client condition, not an application error
        logger.debug("[%s] Unauthenticated: %s", request_id_var.get(""), exc.message)
        response = JSONResponse(status_code=401, content={"message": exc.message})
        if exc.clear_cookie:
            clear_session_cookie(response)
        return response

    @app.exception_handler(AuthorizationError)
    async def handle_authorization_error(request: Request, exc: AuthorizationError):
        return JSONResponse(status_code=403, content={"message": exc.message})

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content={"message": exc.message})

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.info("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        content = {"message": exc.message}
        if exc.context:
            content["details"] = exc.context
        return JSONResponse(status_code=400, content=content)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        errors = [
            {
                "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
                "message": err.get("msg", ""),
            }
            for err in exc.errors()
        ]
        return JSONResponse(
            status_code=400,
            content={"message": "Invalid data", "errors": errors},
        )

    @app.exception_handler(ConflictError)
    async def handle_conflict(request: Request, exc: ConflictError):
        return JSONResponse(status_code=409, content={"message": exc.message})

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        rid = request_id_var.get("")
        logger.error("[%s] Database error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(status_code=500, content={"message": INTERNAL_ERROR_MESSAGE})

    @app.exception_handler(ResilienceHubError)
    async def handle_app_error(request: Request, exc: ResilienceHubError):
        rid = request_id_var.get("")
        logger.error("[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context)
        message = exc.message if exc.status_code < 500 else INTERNAL_ERROR_MESSAGE
        return JSONResponse(status_code=exc.status_code, content={"message": message})

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(status_code=500, content={"message": INTERNAL_ERROR_MESSAGE})


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Each app owns its SessionCache (or None when disabled), exposed on
    `app.state.session_cache` for the authentication dependency.
    """
    app = FastAPI(
        title="ResilienceHub API",
        description=(
            "CBT self-tracking backend: emotion and thought records, goals, "
            "journals and resources shared between clients and their therapists."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.state.session_cache = (
        SessionCache(
            ttl_seconds=settings.session_cache_ttl_seconds,
            sweep_interval_seconds=settings.session_cache_sweep_interval_seconds,
        )
        if settings.session_cache_enabled
        else None
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added executes first: RateLimit → RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,  # session cookie
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
    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(users.router)
    app.include_router(emotions.router)
    app.include_router(thoughts.router)
    app.include_router(library.router)
    app.include_router(goals.router)
    app.include_router(actions.router)
    app.include_router(journal.router)
    app.include_router(resources.router)
    app.include_router(subscription_plans.router)

    return app


# ── Application Instance ─────────────────────────────────────────────────
app = create_app()
