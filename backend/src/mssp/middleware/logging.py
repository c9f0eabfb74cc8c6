"""Structured logging setup and request logging middleware."""
import logging
import sys
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from mssp.config import settings

REQUEST_ID_HEADER = "X-Request-ID"


def setup_logging() -> None:
    """Configure structlog once for the whole process."""
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    # JSON lines in production, colored console otherwise
    if settings.app_env == "production":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Bind request context for every log line emitted while serving a request.

    An incoming ``X-Request-ID`` header is reused; otherwise a UUID is minted.
    The id is stored on ``request.state`` so audit rows and error bodies can
    carry it, and echoed back in the response headers.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            path=request.url.path,
            method=request.method,
            client_host=request.client.host if request.client else None,
        )

        logger = structlog.get_logger(__name__)
        logger.info("request_started", query_params=dict(request.query_params))

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.exception("request_failed", exc_info=exc)
            raise

        logger.info("request_completed", status_code=response.status_code)
        response.headers[REQUEST_ID_HEADER] = request_id

        return response
