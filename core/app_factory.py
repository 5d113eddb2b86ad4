"""
FastAPI application factory and lifecycle wiring.

Keeps app assembly separate from route/business modules for easier maintenance.
"""

# Standard library
import logging
import os
import time
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone

# Third-party
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response

from core import config
from core.errors import (
    AppError,
    app_error_handler,
    http_exception_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)
from core.providers import (
    DeepLClient,
    deepl_plan,
    get_translation_client,
)

logger = logging.getLogger(__name__)

_DEFAULT_ORIGINS = ["*"]
_ALLOWED_METHODS = ["GET", "POST", "OPTIONS"]
_EXPOSE_HEADERS = ["Content-Disposition", "Content-Length", "X-Request-Id"]

_STARTED_AT = time.monotonic()


def _configure_logging() -> None:
    """Configure application logging and key environment visibility."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger.info(
        "DEEPL_API_KEY: %s",
        f"Set (length: {len(config.DEEPL_API_KEY)})" if config.DEEPL_API_KEY else "Not set",
    )
    logger.info("API Plan: %s", deepl_plan(config.DEEPL_API_KEY))
    logger.info("TEST_MODE / USE_FAKE_PROVIDERS: %s", config.use_fake_providers())


def _get_cors_origins() -> list[str]:
    """Return CORS origins from env or permissive defaults."""
    raw_origins = os.getenv("CORS_ORIGINS", "")
    if raw_origins:
        origins = [origin.strip() for origin in raw_origins.split(",") if origin.strip()]
        if origins:
            logger.info("CORS: Using env origins: %s", origins)
            return origins
        logger.warning("CORS_ORIGINS is set but empty after parsing; using defaults")

    logger.info("CORS: Allowing all origins (set CORS_ORIGINS for production)")
    return list(_DEFAULT_ORIGINS)


def _configure_cors(app: FastAPI) -> None:
    """Attach CORS middleware."""
    origins = _get_cors_origins()
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        # Browsers reject credentials with a wildcard origin
        allow_credentials="*" not in origins,
        allow_methods=list(_ALLOWED_METHODS),
        allow_headers=["Content-Type", "Authorization"],
        expose_headers=list(_EXPOSE_HEADERS),  # For file downloads
    )


def _register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers."""
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)


def _register_middlewares(app: FastAPI) -> None:
    """Register middleware components."""

    @app.middleware("http")
    async def request_id_middleware(
        request: Request, call_next
    ) -> Response:
        request_id = request.headers.get("X-Request-Id", str(uuid.uuid4()))
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers["X-Request-Id"] = request_id
        return response


def _register_routers(app: FastAPI) -> None:
    """Register all API routers under /api."""
    from audit.router import router as audit_router
    from pdfservice.router import router as pdfservice_router

    app.include_router(pdfservice_router, prefix="/api", tags=["PDF Translation"])
    app.include_router(audit_router, prefix="/api", tags=["Audit Logs"])


@asynccontextmanager
async def app_lifespan(_: FastAPI) -> AsyncIterator[None]:
    """FastAPI lifespan hook for startup initialization."""
    logger.info("=== Application Startup ===")
    client = get_translation_client()
    if isinstance(client, DeepLClient):
        logger.info("API Endpoint: %s", client.base_url)
        if not client.is_configured():
            logger.warning("DEEPL_API_KEY missing; translation requests will fail")
    font_path = config.FONT_CACHE_PATH
    logger.info(
        "Font cache: %s (%s)",
        font_path,
        "present" if os.path.exists(font_path) else "downloads on first PDF job",
    )
    logger.info("=== All components ready ===")
    yield


async def health_check(request: Request) -> dict:
    """Health check endpoint."""
    client = get_translation_client()
    endpoint = client.base_url if isinstance(client, DeepLClient) else "fake"
    logger.info("Health check from: %s", request.client.host if request.client else None)
    return {
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "apiKeyConfigured": bool(config.DEEPL_API_KEY),
        "apiEndpoint": endpoint,
        "apiPlan": deepl_plan(config.DEEPL_API_KEY),
        "uptime": time.monotonic() - _STARTED_AT,
    }


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    _configure_logging()

    app = FastAPI(
        title="PDF Translator API",
        description="Chunked DeepL translation of PDF documents with layout reflow",
        version="1.0.0",
        lifespan=app_lifespan,
    )
    _configure_cors(app)
    _register_middlewares(app)
    _register_error_handlers(app)
    _register_routers(app)
    app.add_api_route("/api/health", health_check, methods=["GET"])
    return app
