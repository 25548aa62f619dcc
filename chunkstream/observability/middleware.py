"""
FastAPI middleware for request observability.

Tags every request with a request id (taken from X-Request-ID or generated),
echoes it on the response and logs start, status and latency. Ingestion
endpoints stream, so the logged latency is time-to-headers; the run summary
is logged separately by the pipeline when its workers finish.

Dependencies: fastapi, starlette
System role: Request/response observability injection
"""

import logging
import time
import uuid

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from chunkstream.observability.log_utils import log_exception_with_context, log_with_context

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log each request with a request id and its time to response headers."""

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id
        route = f"{request.method} {request.url.path}"
        started = time.perf_counter()

        log_with_context(
            logger,
            logging.INFO,
            f"{__name__}:dispatch - {route}",
            request_id=request_id,
            client_host=request.client.host if request.client else None,
        )

        try:
            response = await call_next(request)
        except Exception as e:
            log_exception_with_context(
                logger,
                f"{__name__}:dispatch - {route} raised",
                e,
                request_id=request_id,
                elapsed_ms=round((time.perf_counter() - started) * 1000, 2),
            )
            raise

        response.headers[REQUEST_ID_HEADER] = request_id
        log_with_context(
            logger,
            logging.INFO,
            f"{__name__}:dispatch - {route} -> {response.status_code}",
            request_id=request_id,
            status_code=response.status_code,
            elapsed_ms=round((time.perf_counter() - started) * 1000, 2),
        )
        return response
