"""
ParcelBD Backend — FastAPI Application Factory
===============================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() wires the database, payment gateway,
       middleware, exception handlers and routers, and returns the app.
Who:   uvicorn (`uvicorn parcelbd.main:app --port 4000`) and the test suite,
       which passes its own Database and PaymentGateway.

Application Architecture:
    ┌──────────────────────────────────────────────────────┐
    │                    FastAPI App                       │
    │                                                      │
    │  app.state.database         ← Database (engine+pool) │
    │  app.state.payment_gateway  ← StripePaymentGateway   │
    │                                                      │
    │  Middleware:  Request ID → Logging → GZip → CORS     │
    │                                                      │
    │  Routes:  /parcels  /payments  /create-payment-intent│
    │           /  /health                                 │
    │                                                      │
    │  Exception Handlers:                                 │
    │    ValidationError→400  NotFound→404  others→500     │
    └──────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, validate settings, ensure tables exist
    Shutdown: dispose the database engine (close pooled connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from parcelbd import __version__
from parcelbd.config import settings
from parcelbd.database import Database
from parcelbd.exceptions import ParcelBDError
from parcelbd.middleware.logging import RequestLoggingMiddleware
from parcelbd.middleware.request_id import RequestIDMiddleware, request_id_var
from parcelbd.routes import health, parcels, payments
from parcelbd.services.payment_base import PaymentGateway
from parcelbd.services.stripe_service import StripePaymentGateway

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure application-wide logging.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s, to stdout.
    Called once at startup, before any other initialization.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("stripe").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup and shutdown of the resources stored on app.state.

    Startup sequence:
        1. Setup logging
        2. Validate critical configuration (logged, never fatal)
        3. Create missing tables when DB_CREATE_ALL is enabled

    Shutdown sequence:
        1. Dispose the database engine
    """
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("ParcelBD Server starting up...")

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Not fatal: parcel CRUD works without a payment key.
        logger.error("Configuration error: %s", str(e))

    database: Database = app.state.database
    if settings.db_create_all:
        await database.create_all()
    logger.info("Database connected")

    logger.info("Server running on port %d", settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("ParcelBD Server shutting down...")
    await database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_body(error: str, message: str, details: Optional[dict] = None) -> dict:
    body = {"error": error, "message": message, "request_id": request_id_var.get("")}
    if details:
        body["details"] = details
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to JSON error responses.

    ParcelBDError subclasses declare their own status_code and error_code
    (400 validation, 404 not found, 500 database / payment gateway).
    Request bodies FastAPI cannot parse into the declared shape (a JSON array
    where an object is expected, malformed JSON) are 400 validation_error too.
    Anything else falls through to a 500 carrying the raw message.
    """

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        message = "Invalid request"
        if errors:
            first = errors[0]
            location = ".".join(str(part) for part in first.get("loc", ()))
            message = f"Invalid request: {location}: {first.get('msg', 'invalid value')}"
        logger.warning("[%s] %s", request_id_var.get(""), message)
        return JSONResponse(
            status_code=400,
            content=_error_body(
                "validation_error", message, {"errors": jsonable_encoder(errors)}
            ),
        )

    @app.exception_handler(ParcelBDError)
    async def handle_app_error(request: Request, exc: ParcelBDError):
        rid = request_id_var.get("")
        if exc.status_code >= 500:
            logger.error("[%s] %s: %s | Context: %s",
                         rid, type(exc).__name__, exc.message, exc.context)
        else:
            logger.warning("[%s] %s: %s", rid, type(exc).__name__, exc.message)

        details = exc.context if exc.expose_context else None
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.error_code, exc.message, details),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            str(exc),
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content=_error_body("internal_server_error", str(exc) or type(exc).__name__),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    database: Optional[Database] = None,
    payment_gateway: Optional[PaymentGateway] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        database: Database to serve from; built from DATABASE_URL when omitted.
        payment_gateway: Gateway for payment intents; Stripe when omitted.

    Both are stored on app.state and reach handlers through dependencies,
    so tests can supply an in-memory database and a fake gateway.
    """
    app = FastAPI(
        title="ParcelBD API",
        description=(
            "Parcel delivery tracking backend: parcel CRUD, payment history, "
            "and Stripe payment intents."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.state.database = database or Database()
    app.state.payment_gateway = payment_gateway or StripePaymentGateway()

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added executes first: RequestID → Logging → GZip → CORS.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(health.router)
    app.include_router(parcels.router)
    app.include_router(payments.router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.backend_host, port=settings.backend_port)
