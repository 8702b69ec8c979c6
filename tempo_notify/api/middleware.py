# Copyright (c) 2026 TempoOS Contributors. All Rights Reserved.

"""
API Middleware — Trace ID propagation and request timing.
"""

from __future__ import annotations

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from tempo_notify.core.logging import log_context

logger = logging.getLogger("tempo.notify.api")

TRACE_HEADER = "X-Trace-Id"


class TraceMiddleware(BaseHTTPMiddleware):
    """
    Generates or propagates X-Trace-Id for every HTTP request and logs
    its duration. WebSocket traffic passes through untouched.
    """

    async def dispatch(self, request: Request, call_next):
        trace_id = request.headers.get(TRACE_HEADER) or uuid.uuid4().hex
        request.state.trace_id = trace_id

        start = time.monotonic()
        response: Response = await call_next(request)
        elapsed = (time.monotonic() - start) * 1000

        response.headers[TRACE_HEADER] = trace_id
        logger.info(
            "%s %s -> %d (%.0fms)",
            request.method, request.url.path, response.status_code, elapsed,
            extra=log_context(trace_id=trace_id),
        )
        return response
