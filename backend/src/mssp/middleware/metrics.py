"""Prometheus metrics middleware for API monitoring."""
import time

from prometheus_client import Counter, Histogram
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

api_request_duration_seconds = Histogram(
    "api_request_duration_seconds",
    "API request duration in seconds",
    labelnames=["method", "path", "status_code"],
    buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

api_requests_total = Counter(
    "api_requests_total",
    "Total API requests",
    labelnames=["method", "path", "status_code"],
)

api_errors_total = Counter(
    "api_errors_total",
    "Total API errors",
    labelnames=["method", "path", "error_type"],
)


def route_template(request: Request) -> str:
    """
    Path label for a request.

    Uses the matched route template (``/v1/entities/{entity_type}/{entity_id}``)
    so entity ids do not explode label cardinality. Falls back to the raw path
    when no route matched.

    Depending on the framework version the matched route carries either the
    full path or only the part below its router prefix; the prefix segments
    missing from the template are taken from the request path.
    """
    route = request.scope.get("route")
    template = getattr(route, "path_format", None) or getattr(route, "path", None)
    if not template:
        return request.url.path

    segments = [part for part in request.url.path.split("/") if part]
    template_segments = [part for part in template.split("/") if part]
    prefix = segments[: max(len(segments) - len(template_segments), 0)]
    return "/" + "/".join(prefix + template_segments)


class MetricsMiddleware(BaseHTTPMiddleware):
    """
    Middleware for collecting Prometheus metrics on API requests.

    Tracks:
    - Request duration histogram (api_request_duration_seconds)
    - Request counter (api_requests_total)
    - Error counter (api_errors_total)
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        # Skip the scrape endpoint itself
        if request.url.path.startswith("/metrics"):
            return await call_next(request)

        start_time = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as exc:
            api_errors_total.labels(
                method=request.method,
                path=route_template(request),
                error_type=type(exc).__name__,
            ).inc()
            raise

        # Route is resolved by the router during call_next
        path = route_template(request)
        duration = time.perf_counter() - start_time

        api_request_duration_seconds.labels(
            method=request.method,
            path=path,
            status_code=response.status_code,
        ).observe(duration)

        api_requests_total.labels(
            method=request.method,
            path=path,
            status_code=response.status_code,
        ).inc()

        return response
