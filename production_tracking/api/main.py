from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from fastapi import APIRouter, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from production_tracking.core.errors import EngineError
from production_tracking.core.logging import configure_logging, correlation_id_var, operation_var
from production_tracking.core.settings import get_app_settings
from production_tracking.schemas.common import ErrorInfo, ErrorResponse, MessageResponse

# Routers
from production_tracking.api.routes.parcels import router as parcels_router
from production_tracking.api.routes.pp_meetings import router as pp_meetings_router
from production_tracking.api.routes.sampling import router as sampling_router
from production_tracking.api.routes.views import router as views_router
from production_tracking.api.routes.work_orders import router as work_orders_router

settings = get_app_settings()

# Configure structured logging once at import
configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "Health", "description": "Liveness probe."},
    {"name": "Views", "description": "Read-only tracker projections computed from a snapshot."},
    {"name": "Parcels", "description": "Parcel dispatch, receipt and tracking."},
    {"name": "Sampling", "description": "Feedback, reminders, WIP stages and development samples."},
    {"name": "Work Orders", "description": "Work-order issuance from outstanding demand."},
    {"name": "PP Meetings", "description": "Pre-production meeting notes."},
]

app = FastAPI(
    title=settings.APP_NAME,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    openapi_tags=openapi_tags,
)

# CORS - avoid wildcard with credentials
cors_allow_credentials = settings.CORS_ALLOW_CREDENTIALS
if settings.CORS_ORIGINS == ["*"] and cors_allow_credentials:
    logger.warning("CORS_ALLOW_CREDENTIALS=True with '*' origins is not permitted; disabling credentials.")
    cors_allow_credentials = False

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=cors_allow_credentials,
    allow_methods=settings.CORS_ALLOW_METHODS,
    allow_headers=settings.CORS_ALLOW_HEADERS,
)


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    """
    Enrich request context with correlation_id and the operation for logging and error responses.
    Adds 'X-Correlation-ID' to every response.
    """
    corr = request.headers.get("X-Correlation-ID") or request.headers.get("X-Request-ID") or str(uuid4())
    # Set context vars for this request lifecycle
    token_corr = correlation_id_var.set(corr)
    token_op = operation_var.set(f"{request.method} {request.url.path}")
    request.state.correlation_id = corr

    logger.info("Incoming request %s %s", request.method, request.url.path)
    try:
        response = await call_next(request)
    finally:
        # Restore previous context
        correlation_id_var.reset(token_corr)
        operation_var.reset(token_op)

    response.headers["X-Correlation-ID"] = corr
    return response


def _build_error_response(
    request: Request,
    status_code: int,
    error_type: str,
    message: str,
    details: Any | None = None,
    operation: str | None = None,
) -> JSONResponse:
    """Build a standardized ErrorResponse JSONResponse."""
    ts = datetime.now(tz=timezone.utc)
    corr = getattr(request.state, "correlation_id", None)
    err = ErrorResponse(
        status=status_code,
        error=ErrorInfo(type=error_type, message=message, details=details),
        correlation_id=corr,
        operation=operation,
        path=request.url.path,
        method=request.method,
        timestamp=ts,
    )
    response = JSONResponse(status_code=status_code, content=err.model_dump(mode="json"))
    if corr:
        response.headers["X-Correlation-ID"] = corr
    return response


def _jsonable_errors(exc: RequestValidationError) -> list:
    """Validation issues without the raw input or exception objects pydantic may attach."""
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """
    Global handler for HTTPException to produce a standardized error envelope.
    """
    detail = exc.detail if isinstance(exc.detail, str) else "HTTP Error"
    return _build_error_response(
        request=request,
        status_code=exc.status_code,
        error_type="http_error",
        message=str(detail),
        details=None if isinstance(exc.detail, str) else exc.detail,
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Global handler for request validation errors with a standard structure.
    """
    return _build_error_response(
        request=request,
        status_code=422,
        error_type="validation_error",
        message="Request validation failed",
        details=_jsonable_errors(exc),
    )


@app.exception_handler(EngineError)
async def engine_exception_handler(request: Request, exc: EngineError):
    """
    Translate engine errors (rejected commands, unknown rows) into the error envelope.
    """
    logger.warning("Engine rejected request: %s (%s)", exc.message, exc.error_type)
    return _build_error_response(
        request=request,
        status_code=exc.status_code,
        error_type=exc.error_type,
        message=exc.message,
        details=exc.details,
        operation=exc.operation,
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """
    Catch-all handler to avoid leaking stack traces and to return a structured error.
    """
    logger.exception("Unhandled error processing request")
    return _build_error_response(
        request=request,
        status_code=500,
        error_type="internal_error",
        message="An unexpected error occurred",
        details=None,
    )


# Build API v1 router and include sub-routers
api_v1 = APIRouter(prefix="/api/v1")


# PUBLIC_INTERFACE
@api_v1.get(
    "/health",
    response_model=MessageResponse,
    summary="Health Check",
    tags=["Health"],
)
def health_check() -> MessageResponse:
    """
    Basic liveness health check endpoint.

    Returns:
        MessageResponse: Simple confirmation that the service is running.
    """
    return MessageResponse(message="Healthy", details={"version": settings.APP_VERSION})


# Include all routers under /api/v1
api_v1.include_router(views_router)
api_v1.include_router(parcels_router)
api_v1.include_router(sampling_router)
api_v1.include_router(work_orders_router)
api_v1.include_router(pp_meetings_router)

# Attach api_v1 to app
app.include_router(api_v1)
