"""
Response Showcase — FastAPI Application Factory
=================================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes configuration, middleware, contract registration, route
       mounting and lifecycle management in one place.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn showcase.main:app).
When:  Once at server startup; the returned app handles all subsequent requests.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌──────────┐ ┌──────┐ ┌────────────┐  │
    │  │  Req ID  │→│ Logging  │→│ GZip │→│    CORS    │  │
    │  └──────────┘ └──────────┘ └──────┘ └────────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────┐ ┌─────────────┐ ┌──────────────┐  │
    │  │ GET /part-0x │ │ POST 05, 06 │ │ /doc /docs   │  │
    │  └──────────────┘ └─────────────┘ └──────────────┘  │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌───────────────────────────────────────────────┐  │
    │  │ Validation→400 │ NotFound→404 │ Contract→500  │  │
    │  └───────────────────────────────────────────────┘  │
    └─────────────────────────────────────────────────────┘

Startup ordering:
    The contract registry is built and frozen INSIDE create_app(), before the
    app object exists for uvicorn. A bad contract (duplicate route, missing
    400 response, ...) therefore raises at import time and the server never
    binds its port.
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Iterable

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from showcase.config import settings
from showcase.exceptions import (
    ContractViolationError,
    PayloadTooLargeError,
    RouteNotFoundError,
    ShowcaseError,
    ValidationError,
)
from showcase.middleware.logging import RequestLoggingMiddleware
from showcase.middleware.request_id import RequestIDMiddleware, request_id_var
from showcase.routes import docs, health, samples, upload, validated
from showcase.routes.dispatch import mount_contracts
from showcase.schemas.envelope import ErrorDetails, ErrorEnvelope, ErrorResponse
from showcase.schemas.validation import ViolationCode, flatten_violations
from showcase.services.doc_exporter import DocumentationExporter
from showcase.services.registry import ContractRegistry, ContractRouter

logger = logging.getLogger(__name__)

NO_FILE_MESSAGE = "ファイルが指定されていません"

CONTRACT_ROUTERS = (validated.router, upload.router)


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

    # uvicorn's access log duplicates RequestLoggingMiddleware
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("python_multipart").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("%s %s starting up...", settings.app_title, settings.app_version)
    for contract in app.state.registry:
        logger.info("Contract route: %s", contract.label)
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("API docs: http://%s:%d%s", settings.backend_host, settings.backend_port, docs.VIEWER_PATH)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def build_error_envelope(exc: ValidationError) -> ErrorEnvelope:
    """
    Map a ValidationError to the 400 envelope.

    A request whose only problem is a missing upload gets the short
    "no file" message without details.
    """
    violations = exc.violations
    if violations and all(v.code is ViolationCode.NO_FILE_PROVIDED for v in violations):
        return ErrorEnvelope(error=NO_FILE_MESSAGE)
    return ErrorEnvelope(
        error=exc.message,
        details=ErrorDetails.model_validate(flatten_violations(violations)),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register global exception handlers for consistent error responses.

    Handler hierarchy:
        ValidationError         → 400 error envelope
        PayloadTooLargeError    → 413
        RouteNotFoundError      → 404
        ContractViolationError  → 500 (handler broke its own contract)
        ShowcaseError (base)    → 500
        Exception (fallback)    → 500

    Security: internal details (contract context, stack traces) are logged
    server-side only, never returned in a response body.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        rid = request_id_var.get("")
        logger.warning(
            "[%s] Validation failed for %s %s: %s",
            rid,
            request.method,
            request.url.path,
            ", ".join(f"{v.path or '<body>'}={v.code.value}" for v in exc.violations),
        )
        envelope = build_error_envelope(exc)
        return JSONResponse(status_code=400, content=envelope.model_dump(exclude_none=True))

    @app.exception_handler(PayloadTooLargeError)
    async def handle_payload_too_large(request: Request, exc: PayloadTooLargeError):
        rid = request_id_var.get("")
        logger.warning(
            "[%s] Rejected %s %s: body of %d bytes over the %d byte limit",
            rid,
            request.method,
            request.url.path,
            exc.received,
            exc.limit,
        )
        return JSONResponse(
            status_code=413,
            content=ErrorResponse(error="payload_too_large", message=exc.message, request_id=rid).model_dump(),
        )

    @app.exception_handler(RouteNotFoundError)
    async def handle_not_found(request: Request, exc: RouteNotFoundError):
        rid = request_id_var.get("")
        return JSONResponse(
            status_code=404,
            content=ErrorResponse(error="not_found", message=exc.message, request_id=rid).model_dump(),
        )

    @app.exception_handler(ContractViolationError)
    async def handle_contract_violation(request: Request, exc: ContractViolationError):
        rid = request_id_var.get("")
        logger.error("[%s] Contract violation: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(
                error="server_error",
                message="An internal error occurred. Please try again later.",
                request_id=rid,
            ).model_dump(),
        )

    @app.exception_handler(ShowcaseError)
    async def handle_showcase_error(request: Request, exc: ShowcaseError):
        rid = request_id_var.get("")
        logger.error("[%s] Application error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(
                error="server_error",
                message="An internal error occurred. Please try again later.",
                request_id=rid,
            ).model_dump(),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(
                error="internal_server_error",
                message="An unexpected error occurred. Please try again or contact support.",
                request_id=rid,
            ).model_dump(),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def build_registry(routers: Iterable[ContractRouter]) -> ContractRegistry:
    """
    Include every contract router into a fresh registry.

    Raises:
        ContractConfigurationError (incl. DuplicateRouteRegistrationError)
    """
    registry = ContractRegistry()
    for router in routers:
        registry.include(router)
    return registry


def create_app(extra_contract_routers: Iterable[ContractRouter] = ()) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        extra_contract_routers: Additional contract routers to include after
            the built-in ones (used by tests and by extensions).

    Raises:
        ContractConfigurationError: the contracts are inconsistent. The app
            is never returned, so no request can be served.
    """
    registry = build_registry((*CONTRACT_ROUTERS, *extra_contract_routers))

    app = FastAPI(
        title=settings.app_title,
        description=settings.app_description,
        version=settings.app_version,
        # /doc and /docs are served from the contract registry (routes/docs.py)
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
    )
    app.state.registry = registry
    app.state.exporter = DocumentationExporter(
        registry,
        title=settings.app_title,
        version=settings.app_version,
        description=settings.app_description,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added = first to execute: RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
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
    app.include_router(samples.router)
    app.include_router(docs.router)
    app.include_router(health.router)
    mount_contracts(app, registry)

    return app


# uvicorn expects `showcase.main:app` to be importable
app = create_app()
