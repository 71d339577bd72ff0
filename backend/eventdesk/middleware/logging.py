"""
EventDesk Backend — Request Logging Middleware
================================================

What:  One access-log line per HTTP request, keyed by the matched route.
Why:   Event IDs live in the URL path, so raw paths are unique per document.
       Logging the route template ("/api/v3/app/events/{event_id}") keeps the
       lines groupable per operation, with the ID carried as its own field.
How:   Starlette fills `scope["route"]` and `scope["path_params"]` while
       routing; they are read after the response comes back. Unmatched
       requests (the "Route not found" 404s) log the raw path instead.
Who:   Added in create_app(); writes to the `eventdesk.access` logger.
When:  Runs inside RequestIDMiddleware so the request ID is already set.

Log line:
    GET /api/v3/app/events/{event_id} 200 3.2ms [a1b2c3d4] event_id=65a4... from 10.0.0.7

Extra fields on the record:
    request_id, method, route, route_name, path, query, event_id, status,
    duration_ms, client_ip

What we log vs what we DON'T log:
    ✅ Log: method, route, query string (limit/page/id), status, duration, IP
    ❌ Don't log: request bodies (event payloads), headers

Log levels follow the status class: 5xx → ERROR, 4xx → WARNING, else INFO.
"""

import logging
import time
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from eventdesk.middleware.request_id import request_id_var

logger = logging.getLogger("eventdesk.access")

RESPONSE_TIME_HEADER = "X-Response-Time"


def _level_for(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs the matched route, status and duration of each request, and reports
    the duration back to the client in `X-Response-Time`.
    """

    # Polled by monitors every few seconds
    SKIPPED_PATHS = {"/health"}

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in self.SKIPPED_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000
        response.headers[RESPONSE_TIME_HEADER] = f"{duration_ms:.1f}ms"

        route = request.scope.get("route")
        route_path: str = getattr(route, "path", None) or request.url.path
        route_name: Optional[str] = getattr(route, "name", None)
        event_id = request.path_params.get("event_id") or request.query_params.get("id")
        client_ip = request.client.host if request.client else "unknown"
        rid = request_id_var.get("")
        status = response.status_code

        logger.log(
            _level_for(status),
            "%s %s %d %.1fms [%s]%s from %s",
            request.method,
            route_path,
            status,
            duration_ms,
            rid,
            f" event_id={event_id}" if event_id else "",
            client_ip,
            extra={
                "request_id": rid,
                "method": request.method,
                "route": route_path,
                "route_name": route_name,
                "path": request.url.path,
                "query": request.url.query,
                "event_id": event_id,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )

        return response
