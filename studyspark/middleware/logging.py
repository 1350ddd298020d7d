"""
StudySpark Backend — Access Log Middleware
============================================

What:  One log line per HTTP request: method, path, status, duration, client.
How:   Level follows the status class (5xx ERROR, 4xx WARNING, else INFO) so
       failed AI calls and bad requests stand out in the `studyspark.access` log.
       /health is skipped; load balancers poll it constantly.

Request bodies are never logged (notes may contain personal material).
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from studyspark.middleware.request_id import request_id_var

logger = logging.getLogger("studyspark.access")

SKIP_PATHS = {"/health"}


class RequestLoggingMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in SKIP_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        client_ip = request.client.host if request.client else "unknown"
        logger.log(
            log_level,
            "%s %s %d %.1fms from %s",
            request.method,
            path,
            status,
            duration_ms,
            client_ip,
            extra={
                "request_id": request_id_var.get(""),
                "status": status,
                "duration_ms": round(duration_ms, 2),
            },
        )
        return response
