"""Request logging middleware with per-request ids."""

import time
import uuid
from collections.abc import Awaitable, Callable

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = structlog.get_logger()

REQUEST_ID_HEADER = "X-Request-ID"
HEALTH_PATH_PREFIX = "/api/v1/health/"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Tags every log line of a request with its id and logs the outcome.

    The id is taken from the X-Request-ID header when the caller sends
    one, generated otherwise, and echoed on the response. It stays bound
    while refresh and resync run in worker threads, so store and
    synchronizer events carry it too. Health probes are not logged.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        if request.url.path.startswith(HEALTH_PATH_PREFIX):
            return await call_next(request)

        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        with structlog.contextvars.bound_contextvars(request_id=request_id):
            start = time.perf_counter()
            response = await call_next(request)
            duration_ms = (time.perf_counter() - start) * 1000

            logger.info(
                "http_request",
                method=request.method,
                path=request.url.path,
                status=response.status_code,
                duration_ms=round(duration_ms, 2),
            )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
