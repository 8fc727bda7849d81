"""Unshared Labs API - FastAPI Application Entry Point."""

import logging
import time
import uuid
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from unshared_api import __version__
from unshared_api.config.env import (
    get_cors_allowed_origins,
    get_log_level,
    is_production_env,
    json_logs_enabled,
)
from unshared_api.context import company_id_var, request_id_var, user_id_var
from unshared_api.errors import AppError
from unshared_api.routers import (
    admin,
    auth,
    companies,
    company_data,
    contact,
    health,
    invites,
    logo,
    members,
    verification,
)
from unshared_api.utils import configure_json_logging

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Unshared Labs API",
    description="Multi-tenant account-sharing detection platform: companies, members, invitations, onboarding and dashboard data.",
    version=__version__,
    docs_url="/api-docs",
    redoc_url="/redoc",
)

# Set JSON_LOGS=false to disable (defaults to true for production)
if json_logs_enabled():
    configure_json_logging(log_level=get_log_level())
    logger.info("Structured JSON logging enabled")

# Credentials mode cannot use wildcard origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_cors_allowed_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "X-API-Key", "X-Request-ID"],
    expose_headers=["X-Request-ID"],
)


# ============================================================================
# HTTP Request Completion Logging Middleware
# ============================================================================


@app.middleware("http")
async def http_completion_logging_middleware(request: Request, call_next):
    """Log every HTTP request completion.

    - Every HTTP request emits "http.request.completed"
    - Fields: method, path, status_code, duration_ms (+ request_id, user_id,
      company_id from context through JSONFormatter)
    - Logs even on exceptions (status_code=500)

    Per-request contextvars are cleared at start and end so values never
    leak between requests that share an async task.
    """
    user_id_var.set("")
    company_id_var.set("")

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
        user_id_var.set("")
        company_id_var.set("")


# ============================================================================
# Request ID Middleware (MUST BE OUTERMOST)
# ============================================================================


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    """Generate and propagate request_id.

    - Accepts X-Request-ID header from client (optional)
    - Generates new UUID if not provided
    - Returns X-Request-ID in response headers

    Registered last so it wraps every other middleware and the id is set in
    the parent async context.
    """
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    request_id_var.set(request_id)

    response = await call_next(request)

    response.headers["X-Request-ID"] = request_id
    return response


# ============================================================================
# Error envelope
# ============================================================================


def error_response(status_code: int, message: str, details: Any = None) -> JSONResponse:
    """{"success": false, "error": message} (+ details outside production)."""
    content: dict[str, Any] = {"success": False, "error": message}
    if details is not None and not is_production_env():
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "request.failed",
            extra={
                "path": request.url.path,
                "status_code": exc.status_code,
                "error_type": type(exc).__name__,
                "error": exc.message,
            },
        )
    else:
        logger.info(
            "request.rejected",
            extra={
                "path": request.url.path,
                "status_code": exc.status_code,
                "error_type": type(exc).__name__,
            },
        )
    return error_response(exc.status_code, exc.message, exc.details)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """404/405 from routing and any HTTPException raised by FastAPI itself."""
    message = exc.detail if isinstance(exc.detail, str) else _get_title_for_status(exc.status_code)
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": message},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies and parameters are client errors (400)."""
    errors = [
        {"loc": [str(part) for part in error.get("loc", [])], "msg": error.get("msg", "")}
        for error in exc.errors()
    ]
    return error_response(status.HTTP_400_BAD_REQUEST, "Invalid request body", errors)


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Uncaught exceptions: generic 500, full traceback in the log only."""
    logger.error(
        "request.unhandled_exception",
        extra={"path": request.url.path, "error_type": type(exc).__name__},
        exc_info=True,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "error": "Internal server error"},
    )


def _get_title_for_status(status_code: int) -> str:
    """Get human-readable title for HTTP status code."""
    titles = {
        400: "Bad Request",
        401: "Unauthorized",
        403: "Forbidden",
        404: "Not Found",
        405: "Method Not Allowed",
        500: "Internal Server Error",
        503: "Service Unavailable",
    }
    return titles.get(status_code, f"HTTP {status_code}")


# Include routers
# members must precede companies: /api/companies/members vs /api/companies/{company_id}
app.include_router(health.router)
app.include_router(auth.router)
app.include_router(members.router)
app.include_router(companies.router)
app.include_router(company_data.router)
app.include_router(logo.router)
app.include_router(verification.router)
app.include_router(invites.router)
app.include_router(admin.router)
app.include_router(contact.router)
