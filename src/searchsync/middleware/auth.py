"""API key authentication for the admin and document endpoints."""

import secrets
from collections.abc import Awaitable, Callable

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

logger = structlog.get_logger()

PUBLIC_PATH_PREFIXES = ("/api/v1/health/",)


class APIKeyMiddleware(BaseHTTPMiddleware):
    """Requires a matching X-API-Key header outside the health probes.

    Rejections are answered with a FastAPI-style {"detail": ...} body and
    logged without the offending key.
    """

    def __init__(self, app: Callable[..., Awaitable[Response]], api_key: str) -> None:
        super().__init__(app)  # type: ignore[arg-type]
        self._api_key = api_key

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        if request.url.path.startswith(PUBLIC_PATH_PREFIXES):
            return await call_next(request)

        provided_key = request.headers.get("X-API-Key", "")
        if not provided_key:
            return self._reject(request, "Missing X-API-Key header")
        if not secrets.compare_digest(provided_key, self._api_key):
            return self._reject(request, "Invalid API key")

        return await call_next(request)

    @staticmethod
    def _reject(request: Request, reason: str) -> JSONResponse:
        logger.warning(
            "api_key_rejected",
            method=request.method,
            path=request.url.path,
            reason=reason,
        )
        return JSONResponse(status_code=401, content={"detail": reason})
