"""
Storefront Backend — FastAPI Application Factory
==================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app(settings) builds the AppContext, registers middleware,
       exception handlers and routers, and mounts the uploads directory.
Who:   uvicorn (`uvicorn storefront.main:app`) and the test suite, which
       calls create_app() with its own Settings.

Application Layout:
    ┌──────────────────────────────────────────────────────────────┐
    │                        FastAPI App                           │
    │                                                              │
    │  Middleware Chain:                                           │
    │  ┌──────────┐ ┌─────────┐ ┌────────────────┐ ┌──────┐       │
    │  │ Req ID   │→│ Logging │→│ Auth RateLimit │→│ CORS │       │
    │  └──────────┘ └─────────┘ └────────────────┘ └──────┘       │
    │                                                              │
    │  Routes:                                                     │
    │   /api/auth/*   /api/admin/{blog,products,orders}            │
    │   /api/products /api/orders /api/upload   /health            │
    │   /uploads/*  (StaticFiles)                                  │
    │                                                              │
    │  Exception Handlers:                                         │
    │   Validation→400 │ Auth→401 │ NotFound→404 │ RateLimit→429    │
    │   OrderItem→500  │ Upload→500 │ Database/unexpected→500       │
    └──────────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging → configuration warnings → uploads directory
    Shutdown: dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from storefront import __version__
from storefront.config import Settings
from storefront.context import AppContext
from storefront.exceptions import (
    AuthenticationError,
    DatabaseError,
    FileStorageError,
    NotFoundError,
    OrderItemResolutionError,
    RateLimitExceededError,
    StorefrontError,
    ValidationError,
)
from storefront.middleware.logging import RequestLoggingMiddleware
from storefront.middleware.rate_limit import AuthRateLimitMiddleware
from storefront.middleware.request_id import RequestIDMiddleware, request_id_var
from storefront.routes import (
    admin_blog,
    admin_orders,
    admin_products,
    auth,
    health,
    orders,
    products,
    upload,
)

logger = logging.getLogger(__name__)

GENERIC_SERVER_ERROR = "An internal error occurred. Please try again later."


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(settings: Settings) -> None:
    """
    Configure the root logger once: stdout, ISO timestamps, level from settings.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Per-query and per-request chatter
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("PIL").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    context: AppContext = app.state.context
    settings = context.settings

    setup_logging(settings)
    logger.info("=" * 60)
    logger.info("%s backend starting up...", settings.store_name)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving; the warning is the signal
        logger.warning("Configuration warning: %s", str(e))

    upload_root = context.upload_service.ensure_directory()
    logger.info("Upload directory: %s", upload_root)
    if not context.email_service.enabled:
        logger.info("SMTP_HOST not set; order emails will be logged, not sent")

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("Shutting down...")
    await context.aclose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def error_body(error: str, message: str, details: Any = None) -> dict:
    body = {"error": error, "message": message, "request_id": request_id_var.get("")}
    if details is not None:
        body["details"] = details
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map every exception class to one status code and a structured body.

    Handler table:
        ValidationError           → 400 (details: field-level errors)
        RequestValidationError    → 400 (query/path parameters)
        AuthenticationError       → 401
        NotFoundError             → 404
        RateLimitExceededError    → 429 + Retry-After
        OrderItemResolutionError  → 500, message returned as-is
        FileStorageError          → 500, "Upload failed"
        DatabaseError             → 500, generic message
        StorefrontError / other   → 500, generic message

    Stack traces and SQL never reach the response; they are logged.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(
            status_code=400,
            content=error_body("validation_error", exc.message, exc.errors),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        errors = [
            {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
            for err in exc.errors()
        ]
        logger.warning("[%s] Invalid request parameters: %s", request_id_var.get(""), errors)
        return JSONResponse(
            status_code=400,
            content=error_body("validation_error", "Invalid input", errors),
        )

    @app.exception_handler(AuthenticationError)
    async def handle_authentication_error(request: Request, exc: AuthenticationError):
        return JSONResponse(status_code=401, content=error_body("unauthorized", exc.message))

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content=error_body("not_found", exc.message))

    @app.exception_handler(RateLimitExceededError)
    async def handle_rate_limit(request: Request, exc: RateLimitExceededError):
        return JSONResponse(
            status_code=429,
            content=error_body("rate_limit_exceeded", exc.message, exc.context),
            headers={"Retry-After": str(exc.retry_after)},
        )

    @app.exception_handler(OrderItemResolutionError)
    async def handle_order_item_error(request: Request, exc: OrderItemResolutionError):
        logger.error("[%s] Order rejected: %s", request_id_var.get(""), exc.message)
        return JSONResponse(status_code=500, content=error_body("order_failed", exc.message))

    @app.exception_handler(FileStorageError)
    async def handle_file_storage_error(request: Request, exc: FileStorageError):
        logger.error(
            "[%s] File storage error: %s | Context: %s",
            request_id_var.get(""), exc.message, exc.context,
        )
        return JSONResponse(status_code=500, content=error_body("upload_failed", exc.message))

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error(
            "[%s] Database error: %s | Context: %s",
            request_id_var.get(""), exc.message, exc.context,
        )
        return JSONResponse(status_code=500, content=error_body("server_error", GENERIC_SERVER_ERROR))

    @app.exception_handler(StorefrontError)
    async def handle_storefront_error(request: Request, exc: StorefrontError):
        logger.error(
            "[%s] Unhandled %s: %s | Context: %s",
            request_id_var.get(""), type(exc).__name__, exc.message, exc.context,
        )
        return JSONResponse(status_code=500, content=error_body("server_error", GENERIC_SERVER_ERROR))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("[%s] Unexpected error: %s", request_id_var.get(""), str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content=error_body(
                "internal_server_error",
                "An unexpected error occurred. Please try again or contact support.",
            ),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Assemble the application around one AppContext.

    Args:
        settings: configuration to run with; read from the environment
                  when omitted.
    """
    settings = settings or Settings()
    context = AppContext.from_settings(settings)

    app = FastAPI(
        title=f"{settings.store_name} API",
        description="Storefront backend: accounts, catalogue, checkout and admin tooling.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.context = context

    # ── Middleware (last added runs first) ────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Total-Count", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    # Inside RequestID so a 429 carries the request id and is access-logged
    app.add_middleware(
        AuthRateLimitMiddleware,
        max_requests=settings.auth_rate_limit_requests,
        window_seconds=settings.auth_rate_limit_window,
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    # ── Routes ────────────────────────────────────────────────────────────
    app.include_router(auth.router)
    app.include_router(admin_blog.router)
    app.include_router(admin_products.router)
    app.include_router(admin_orders.router)
    app.include_router(products.router)
    app.include_router(orders.router)
    app.include_router(upload.router)
    app.include_router(health.router)

    # StaticFiles checks the directory at mount time
    upload_root = context.upload_service.ensure_directory()
    app.mount(context.upload_service.url_prefix, StaticFiles(directory=upload_root), name="uploads")

    return app


app = create_app()
