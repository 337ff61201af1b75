# 📄 File: app/api/middleware/logging.py
# 🧭 Purpose (Layman Explanation):
# Keeps a diary of every request made to the plant scanner: what was asked for, how long it took,
# and whether it went wrong, tagged with an id so one scan can be followed through the logs.
# 🧪 Purpose (Technical Summary):
# Request logging middleware with request-id correlation. Binds the request id to the logging context
# vars for the duration of the request and echoes it in the X-Request-ID response header.
# 🔗 Dependencies:
# Starlette BaseHTTPMiddleware, app.shared.utils.logging
# 🔄 Connected Modules / Calls From:
# app.main.py (middleware registration)

import time
import uuid

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from app.shared.utils.logging import get_logger, log_context

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
EXCLUDED_PATHS = {"/health", "/api/v1/health", "/favicon.ico"}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs one line per request and one per response, with timing."""

    def __init__(self, app: ASGIApp, excluded_paths=None):
        super().__init__(app)
        self.excluded_paths = set(excluded_paths or EXCLUDED_PATHS)

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.url.path in self.excluded_paths:
            return await call_next(request)

        request_id = self._get_or_create_request_id(request)
        start_time = time.monotonic()

        with log_context(request_id=request_id):
            logger.info(
                f"{request.method} {request.url.path}",
                event_type="http_request",
                method=request.method,
                path=request.url.path,
                client_ip=request.client.host if request.client else None,
            )

            try:
                response = await call_next(request)
            except Exception as e:
                logger.error(
                    f"{request.method} {request.url.path} failed: {e}",
                    event_type="http_error",
                    duration_ms=round((time.monotonic() - start_time) * 1000, 2),
                    exc_info=True,
                )
                raise

            logger.info(
                f"{request.method} {request.url.path} - {response.status_code}",
                event_type="http_response",
                status_code=response.status_code,
                duration_ms=round((time.monotonic() - start_time) * 1000, 2),
            )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    @staticmethod
    def _get_or_create_request_id(request: Request) -> str:
        request_id = request.headers.get(REQUEST_ID_HEADER.lower()) or str(uuid.uuid4())
        request.state.request_id = request_id
        return request_id
