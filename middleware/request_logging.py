"""
Access log for the API: one line per request with method, path, status
and duration. Query strings and bodies are not logged.

The request id comes from the caller's X-Request-ID header when present,
is bound to ``request_id_var`` for every log line emitted while the
request runs, and is echoed back on the response.
"""
import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from config.logging_config import request_id_var

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


def _level_for(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = (request.headers.get(REQUEST_ID_HEADER) or "").strip()[:64] or uuid.uuid4().hex[:16]
        token = request_id_var.set(request_id)
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "request.failed method=%s path=%s elapsed_ms=%.1f",
                request.method, request.url.path, (time.perf_counter() - started) * 1000,
            )
            raise
        finally:
            request_id_var.reset(token)

        response.headers[REQUEST_ID_HEADER] = request_id
        logger.log(
            _level_for(response.status_code),
            "request.done method=%s path=%s status=%s elapsed_ms=%.1f",
            request.method, request.url.path, response.status_code, (time.perf_counter() - started) * 1000,
            extra={"request_id": request_id},
        )
        return response
