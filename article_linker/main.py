"""FastAPI application entry point.

Deployment Requirements:
- Binds to PORT from environment variable
- Health endpoint at /health for health checks
- All logs to stdout

Error Logging Requirements:
- Log all incoming requests with method, path, request_id
- Log request body at DEBUG level (long strings truncated)
- Log content length and list sizes of /api/v1/links requests
- Log response status and timing for every request
- Return structured error responses: {"error": str, "code": str, "request_id": str}
- Log 4xx errors at WARNING, 5xx at ERROR
"""

import json
import logging
import time
import uuid
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from article_linker.api.v1 import router as api_v1_router
from article_linker.core.config import get_settings
from article_linker.core.logging import get_logger, setup_logging

# Set up logging before anything else
setup_logging()
logger = get_logger(__name__)

# Request bodies carry whole articles; only log this much of each string
MAX_LOGGED_STRING = 200

# Requests under this prefix get their payload sizes in the request log
LINKS_PATH_PREFIX = "/api/v1/links/"


def truncate_body(body: Any) -> Any:
    """Shorten long strings in a JSON body for logging."""
    if isinstance(body, dict):
        return {key: truncate_body(value) for key, value in body.items()}
    if isinstance(body, list):
        return [truncate_body(item) for item in body]
    if isinstance(body, str) and len(body) > MAX_LOGGED_STRING:
        return body[:MAX_LOGGED_STRING] + "..."
    return body


def summarize_link_payload(body: Any) -> dict[str, int]:
    """Payload sizes of a /links request: content length and list counts."""
    if not isinstance(body, dict):
        return {}
    summary: dict[str, int] = {}
    content = body.get("content")
    if isinstance(content, str):
        summary["content_length"] = len(content)
    for key in ("related_articles", "article_ids"):
        value = body.get(key)
        if isinstance(value, list):
            summary[f"{key}_count"] = len(value)
    return summary


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs every request with timing and request_id.

    Link requests also log their content length and list sizes.
    """

    async def dispatch(self, request: Request, call_next: Any) -> Any:
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        start_time = time.monotonic()
        method = request.method
        path = request.url.path
        is_link_request = path.startswith(LINKS_PATH_PREFIX)

        body_json: Any = None
        if method not in ("GET", "HEAD", "OPTIONS") and (
            is_link_request or logger.isEnabledFor(logging.DEBUG)
        ):
            body = await request.body()
            if body:
                try:
                    body_json = json.loads(body)
                except json.JSONDecodeError:
                    logger.debug(
                        "Request body (non-JSON)",
                        extra={"request_id": request_id, "body_length": len(body)},
                    )

        payload = summarize_link_payload(body_json) if is_link_request else {}

        logger.info(
            "Request started",
            extra={
                "request_id": request_id,
                "method": method,
                "path": path,
                **payload,
            },
        )
        if body_json is not None:
            logger.debug(
                "Request body",
                extra={"request_id": request_id, "body": truncate_body(body_json)},
            )

        response = await call_next(request)

        duration_ms = (time.monotonic() - start_time) * 1000
        status_code = response.status_code

        response.headers["X-Request-ID"] = request_id

        log_extra = {
            "request_id": request_id,
            "method": method,
            "path": path,
            "status_code": status_code,
            "duration_ms": round(duration_ms, 2),
            **payload,
        }

        if status_code >= 500:
            logger.error("Request failed", extra=log_extra)
        elif status_code >= 400:
            logger.warning("Request error", extra=log_extra)
        else:
            logger.info("Request completed", extra=log_extra)

        return response


@asynccontextmanager
async def lifespan(app: FastAPI) -> Any:
    """Application lifespan manager for startup/shutdown logging."""
    settings = get_settings()
    logger.info(
        "Starting application",
        extra={
            "app_name": settings.app_name,
            "version": settings.app_version,
            "environment": settings.environment,
            "default_locale": settings.default_locale,
            "max_links_per_article": settings.max_links_per_article,
        },
    )

    yield

    logger.info("Application shutdown complete")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    # Request logging middleware (added first, runs last)
    app.add_middleware(RequestLoggingMiddleware)

    # CORS middleware - use FRONTEND_URL for production, allow all origins otherwise
    cors_origins: list[str] = ["*"]
    if settings.frontend_url:
        cors_origins = [settings.frontend_url]
        logger.info(
            "CORS configured for production",
            extra={"allowed_origins": cors_origins},
        )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Handle validation errors with structured response."""
        request_id = getattr(request.state, "request_id", "unknown")
        errors = exc.errors()
        error_msg = "; ".join(
            f"{'.'.join(str(loc) for loc in e['loc'])}: {e['msg']}" for e in errors
        )
        logger.warning(
            "Validation error",
            extra={
                "request_id": request_id,
                "error": error_msg,
            },
        )
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "error": error_msg,
                "code": "VALIDATION_ERROR",
                "request_id": request_id,
            },
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Handle unexpected errors with structured response."""
        request_id = getattr(request.state, "request_id", "unknown")
        logger.error(
            "Unhandled exception",
            extra={
                "request_id": request_id,
                "error_type": type(exc).__name__,
                "error_message": str(exc),
            },
            exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "An internal error occurred. Please try again later.",
                "code": "INTERNAL_ERROR",
                "request_id": request_id,
            },
        )

    @app.get("/health", tags=["Health"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint.

        Returns {"status": "ok"} if the service is running.
        """
        return {"status": "ok"}

    # Include API routers
    app.include_router(api_v1_router, prefix="/api/v1")

    return app


# Create the application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "article_linker.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
