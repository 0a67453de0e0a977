"""RCM Admin API - FastAPI Application Entry Point."""

import logging
import time
import uuid
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from rcm_api import __version__
from rcm_api.config.env import get_cors_origins, get_log_level, json_logs_enabled
from rcm_api.context import request_id_var, tenant_var
from rcm_api.errors import AdminAPIError
from rcm_api.routers import health, mappings, profiles, users
from rcm_api.utils import configure_json_logging

logger = logging.getLogger(__name__)


def _error_body(error: str, details: Any = None, extra: dict[str, Any] | None = None) -> dict[str, Any]:
    body: dict[str, Any] = {"error": error}
    if details is not None:
        body["details"] = details
    if extra:
        body.update(extra)
    request_id = request_id_var.get()
    if request_id:
        body["request_id"] = request_id
    return jsonable_encoder(body)


def create_app() -> FastAPI:
    """Build the application: logging, CORS, middlewares, routers and error handlers."""
    # Set RCM_JSON_LOGS=false to disable (defaults to true)
    if json_logs_enabled():
        configure_json_logging(log_level=get_log_level())
        logger.info("Structured JSON logging enabled")

    app = FastAPI(
        title="RCM Admin API",
        description="Tenant profile, mapping and identity administration over Supabase.",
        version=__version__,
    )

    # Credentials mode cannot use wildcard origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_cors_origins(),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
        expose_headers=["X-Request-ID"],
    )

    # ========================================================================
    # HTTP Request Completion Logging Middleware
    # ========================================================================

    @app.middleware("http")
    async def http_completion_logging_middleware(request: Request, call_next):
        """Log every HTTP request completion.

        - Every HTTP request emits "http.request.completed"
        - Fields: method, path, status_code, duration_ms
        - Logs even on exceptions (status_code=500)
        - Clears the tenant context var at start and end
        """
        tenant_var.set("")
        start_time = time.perf_counter()
        status_code = 500

        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.info(
                "http.request.completed",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": status_code,
                    "duration_ms": round(duration_ms, 2),
                },
            )
            tenant_var.set("")

    # ========================================================================
    # Request ID Middleware (MUST BE OUTERMOST, i.e. registered last)
    # ========================================================================

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        """Accept X-Request-ID from the client or generate one; echo it back."""
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request_id_var.set(request_id)

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

    # ========================================================================
    # Exception Handlers
    # ========================================================================

    @app.exception_handler(AdminAPIError)
    async def admin_api_error_handler(request: Request, exc: AdminAPIError) -> JSONResponse:
        """Render handler errors as {error, details?, request_id}."""
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.error, exc.details, exc.extra),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        """Render routing errors (unknown path, wrong method) as {error}."""
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """Unparseable or mistyped body: 400 with the first offending field."""
        first_error = exc.errors()[0] if exc.errors() else {}
        field = ".".join(str(loc) for loc in first_error.get("loc", []))
        msg = first_error.get("msg", "Validation error")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_error_body("Invalid request body", f"Invalid field '{field}': {msg}"),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Uncaught exceptions: logged with traceback, rendered without internals."""
        logger.error(
            "http.request.unhandled_exception",
            exc_info=exc,
            extra={"method": request.method, "path": request.url.path},
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body("Internal server error"),
        )

    app.include_router(health.router)
    app.include_router(users.router)
    app.include_router(profiles.router)
    app.include_router(mappings.router)

    return app


app = create_app()
