"""
StudySpark Backend — FastAPI Application Factory
===================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() wires middleware, exception handlers, routers and the two
       process-wide collaborators (storage backend, AI Gateway) onto app.state.
Who:   uvicorn (`uvicorn studyspark.main:app`) and the test-suite, which passes
       its own storage and gateway.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware: Request ID → Access log → GZip → CORS  │
    │                                                     │
    │  Routes: /api/subjects  /api/notes  /api/summaries  │
    │          /api/flashcards  /api/questions            │
    │          /api/study-plans  /api/dashboard  /api/ai  │
    │          /health                                    │
    │                                                     │
    │  app.state.storage     → StorageRepository          │
    │  app.state.ai_gateway  → AIGateway(GeminiService)   │
    │                                                     │
    │  Exception Handlers:                                │
    │   Validation→400 │ NotFound→404 │ LLM/DB/File→500   │
    └─────────────────────────────────────────────────────┘
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

from studyspark import __version__
from studyspark.config import settings
from studyspark.exceptions import (
    DatabaseError,
    FileStorageError,
    LLMServiceError,
    NotFoundError,
    StudySparkError,
    ValidationError,
)
from studyspark.middleware.logging import RequestLoggingMiddleware
from studyspark.middleware.request_id import RequestIDLogFilter, RequestIDMiddleware, request_id_var
from studyspark.routes import (
    ai,
    dashboard,
    flashcards,
    health,
    notes,
    questions,
    study_plans,
    subjects,
    summaries,
)
from studyspark.services.ai_service import AIGateway
from studyspark.storage import StorageRepository, build_storage

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s [%(request_id)s]: %(message)s

    The request_id field is filled by RequestIDLogFilter from the current
    request's ContextVar ("-" outside a request).
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestIDLogFilter())

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s [%(request_id)s]: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[handler],
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("StudySpark Backend %s starting up (storage=%s)", __version__, app.state.storage.backend_name)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving: CRUD and /health work without an API key
        logger.error("Configuration error: %s", str(e))

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)

    yield

    logger.info("StudySpark Backend shutting down...")
    await app.state.storage.close()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error(
    request: Request,
    status_code: int,
    error: str,
    message: str,
    details: Optional[dict] = None,
) -> JSONResponse:
    # The catch-all handler runs outside RequestIDMiddleware, after the
    # ContextVar is reset; request.state still holds the id
    request_id = getattr(request.state, "request_id", None) or request_id_var.get("")
    content = {"error": error, "message": message, "request_id": request_id}
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=jsonable_encoder(content))


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP status codes and one error body format.

    Handler hierarchy:
        RequestValidationError  → 400 (FastAPI's default 422 is not used)
        ValidationError         → 400
        NotFoundError           → 404
        LLMServiceError         → 500, generic "Failed to generate ..." message
        DatabaseError           → 500
        FileStorageError        → 500
        StudySparkError (base)  → 500
        Exception (fallback)    → 500

    500 responses never carry exception context; it is logged server-side.
    """

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        errors = [
            {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
            for err in exc.errors()
        ]
        logger.warning("Request validation failed on %s: %s", request.url.path, errors)
        return _error(request, 400, "validation_error", "Invalid request data", {"errors": errors})

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("Validation error: %s", exc.message)
        return _error(request, 400, "validation_error", exc.message, exc.context or None)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error(request, 404, "not_found", exc.message)

    @app.exception_handler(LLMServiceError)
    async def handle_llm_error(request: Request, exc: LLMServiceError):
        logger.error("LLM service error: %s | Context: %s", exc.message, exc.context)
        return _error(request, 500, "llm_service_error", exc.public_message)

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error("Database error: %s | Context: %s", exc.message, exc.context)
        return _error(request, 500, "server_error", "An internal error occurred. Please try again later.")

    @app.exception_handler(FileStorageError)
    async def handle_file_storage_error(request: Request, exc: FileStorageError):
        logger.error("File storage error: %s | Context: %s", exc.message, exc.context)
        return _error(request, 500, "server_error", exc.message)

    @app.exception_handler(StudySparkError)
    async def handle_app_error(request: Request, exc: StudySparkError):
        logger.error("Unhandled application error: %s | Context: %s", exc.message, exc.context)
        return _error(request, 500, "server_error", "An internal error occurred. Please try again later.")

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("Unexpected error: %s", str(exc), exc_info=True)
        return _error(
            request,
            500,
            "internal_server_error",
            "An unexpected error occurred. Please try again or contact support.",
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    storage: Optional[StorageRepository] = None,
    ai_gateway: Optional[AIGateway] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        storage:    Repository to serve from. Default: build_storage(settings).
        ai_gateway: Gateway for /api/ai/* and uploads. Default: AIGateway over GeminiService.

    Both are attached to app.state here, not in the lifespan, so that clients
    which skip lifespan events (httpx ASGITransport) still find them.
    """
    app = FastAPI(
        title="StudySpark API",
        description=(
            "Study-aid backend: upload notes and let the AI generate summaries, "
            "flashcards, practice questions and study plans."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    if ai_gateway is None:
        from studyspark.services.gemini_service import GeminiService
        ai_gateway = AIGateway(GeminiService())
    app.state.storage = storage or build_storage(settings)
    app.state.ai_gateway = ai_gateway

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID, then Logging, GZip, CORS, routes
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

    register_exception_handlers(app)

    for module in (subjects, notes, summaries, flashcards, questions, study_plans, dashboard, ai, health):
        app.include_router(module.router)

    return app


# ── Application Instance ──────────────────────────────────────────────────
# uvicorn expects `studyspark.main:app` to be importable
app = create_app()
