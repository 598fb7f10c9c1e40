"""
Request logging middleware.

Binds a correlation id to every log line of a request and echoes it back.
"""

import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from shared.logging import clear_log_context, log_context, logger

CORRELATION_HEADER = "X-Correlation-ID"


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())
        request.state.correlation_id = correlation_id

        log_context(
            correlation_id=correlation_id,
            method=request.method,
            path=request.url.path,
        )
        logger.info("Request started", query_params=str(request.query_params))
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
            duration_ms = int((time.perf_counter() - start_time) * 1000)
            logger.info(
                "Request completed",
                status_code=response.status_code,
                duration_ms=duration_ms,
            )
            response.headers[CORRELATION_HEADER] = correlation_id
            return response
        except Exception as e:
            duration_ms = int((time.perf_counter() - start_time) * 1000)
            logger.error("Request failed", error=str(e), duration_ms=duration_ms)
            raise
        finally:
            clear_log_context()
