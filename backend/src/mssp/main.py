"""FastAPI application entry point."""
import traceback
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app
from sqlalchemy.exc import SQLAlchemyError

from mssp.api.v1 import audit, clients, entities, health
from mssp.config import settings
from mssp.middleware.logging import LoggingMiddleware, setup_logging
from mssp.middleware.metrics import MetricsMiddleware
from mssp.schemas.error import PYDANTIC_ERROR_CODES, REMEDIATION_HINTS, ErrorCode, ErrorDetail, ErrorResponse
from mssp.utils.audit import log_system_event

# Setup structured logging
setup_logging()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager for startup and shutdown events."""
    logger.info("application_starting", env=settings.app_env)
    await log_system_event(
        event_type="application_start",
        source="api",
        severity="info",
        category="lifecycle",
        description=f"API started in {settings.app_env}",
    )
    yield
    logger.info("application_shutting_down")


app = FastAPI(
    title="MSSP Client Manager",
    description="Client, contract and compliance records with entity relationships and a full audit trail",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(MetricsMiddleware)
app.add_middleware(LoggingMiddleware)

# Mount Prometheus metrics endpoint
app.mount("/metrics", make_asgi_app())


def _request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None) or request.headers.get("x-request-id")


def _error_response(status_code: int, body: ErrorResponse, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(body.model_dump(exclude_none=True)),
        headers=headers,
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 422 with field-level validation errors."""
    details = [
        ErrorDetail(
            code=PYDANTIC_ERROR_CODES.get(error["type"], ErrorCode.VALIDATION_ERROR),
            message=error["msg"],
            field=".".join(str(loc) for loc in error["loc"]),
            value=error.get("input"),
        )
        for error in exc.errors()
    ]

    logger.warning(
        "validation_error",
        path=request.url.path,
        method=request.method,
        error_count=len(details),
    )

    return _error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        ErrorResponse(
            error="ValidationError",
            message="Request validation failed",
            details=details,
            remediation="Check the API documentation for correct request format at /docs",
            request_id=_request_id(request),
            documentation_url=f"{request.base_url}docs",
        ),
    )


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Return 503 for database failures."""
    logger.error(
        "database_error",
        path=request.url.path,
        method=request.method,
        error_type=type(exc).__name__,
        error_message=str(exc),
    )

    # Don't expose internal database details in production
    error_message = "Database temporarily unavailable" if settings.app_env == "production" else str(exc)

    return _error_response(
        status.HTTP_503_SERVICE_UNAVAILABLE,
        ErrorResponse(
            error="DatabaseError",
            message="A database error occurred",
            details=[ErrorDetail(code=ErrorCode.DATABASE_ERROR, message=error_message)],
            remediation=REMEDIATION_HINTS.get(ErrorCode.DATABASE_ERROR),
            request_id=_request_id(request),
        ),
        headers={"Retry-After": "30"},
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return 500 for anything unhandled, logging the full stack trace."""
    logger.exception(
        "unhandled_exception",
        path=request.url.path,
        method=request.method,
        exception_type=type(exc).__name__,
        exception_message=str(exc),
        stack_trace=traceback.format_exc(),
    )

    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        ErrorResponse(
            error="InternalServerError",
            message="An unexpected error occurred",
            details=[
                ErrorDetail(
                    code=ErrorCode.INTERNAL_ERROR,
                    message=str(exc) if settings.debug else "Internal server error",
                )
            ],
            remediation="Please contact support with the request ID",
            request_id=_request_id(request),
            documentation_url=f"{request.base_url}docs",
        ),
    )


@app.get("/", tags=["Root"])
async def root() -> dict[str, str]:
    """Root endpoint with API information."""
    return {
        "service": "MSSP Client Manager",
        "version": "0.1.0",
        "status": "operational",
        "docs": "/docs",
    }


app.include_router(health.router, tags=["Health"])
app.include_router(entities.router, prefix="/v1")
app.include_router(clients.router, prefix="/v1")
app.include_router(audit.router, prefix="/v1")
