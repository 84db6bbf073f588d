"""Request ID and access logging middleware."""

import logging
import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from .metrics import http_request_duration_seconds
from .request_id import generate_request_id, reset_request_id, set_request_id

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Bind a request ID to each request and echo it in the response.

    A client-supplied X-Request-ID is reused; otherwise a new one is generated.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or generate_request_id()
        token = set_request_id(request_id)
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                f"{request.method} {request.url.path} failed: {e}",
                extra={"error_type": type(e).__name__},
                exc_info=True
            )
            raise
        else:
            duration = time.perf_counter() - start_time
            http_request_duration_seconds.labels(
                method=request.method, status=str(response.status_code)
            ).observe(duration)
            logger.info(
                f"{request.method} {request.url.path} {response.status_code}",
                extra={
                    "status_code": response.status_code,
                    "duration_ms": round(duration * 1000, 2),
                }
            )
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            reset_request_id(token)
