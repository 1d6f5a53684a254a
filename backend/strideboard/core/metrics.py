"""
Prometheus metrics configuration for monitoring.
"""
import time

from fastapi import Request, Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    Counter,
    Histogram,
    Info,
    generate_latest,
)
from starlette.middleware.base import BaseHTTPMiddleware

from strideboard.core.config import settings

# Application info
app_info = Info("app_info", "Application information")
app_info.info({
    "version": settings.app_version,
    "name": settings.app_name,
})

# Request metrics
request_count = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"]
)

request_duration = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"]
)

# Domain metrics
authorization_denials = Counter(
    "authorization_denials_total",
    "Requests rejected by the membership authority",
    ["reason"]
)

invites_created = Counter(
    "workspace_invites_total",
    "Workspace invite notifications created"
)

work_item_events = Counter(
    "work_item_events_total",
    "Work item change events published",
    ["kind"]
)

position_rebalances = Counter(
    "work_item_position_rebalances_total",
    "Full renumbering passes of a project's work item positions"
)


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Middleware to collect Prometheus metrics."""

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.url.path == "/metrics":
            return await call_next(request)

        start_time = time.time()
        status_code = 500

        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            endpoint = self._get_endpoint_name(request)
            request_count.labels(
                method=request.method,
                endpoint=endpoint,
                status_code=status_code
            ).inc()
            request_duration.labels(
                method=request.method,
                endpoint=endpoint
            ).observe(time.time() - start_time)

    def _get_endpoint_name(self, request: Request) -> str:
        """Use the route template so ids do not explode label cardinality."""
        route = request.scope.get("route")
        if route is not None and hasattr(route, "path"):
            return route.path
        return "unmatched"


def metrics_endpoint() -> Response:
    """Render all registered metrics in the Prometheus text format."""
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


def record_authorization_denial(reason: str) -> None:
    """Count a Forbidden decision."""
    authorization_denials.labels(reason=reason).inc()


def record_invites(count: int) -> None:
    """Count created invites."""
    if count:
        invites_created.inc(count)


def record_work_item_event(kind: str) -> None:
    """Count a published work item change event."""
    work_item_events.labels(kind=kind).inc()


def record_position_rebalance() -> None:
    """Count a position renumbering pass."""
    position_rebalances.inc()
