from __future__ import annotations

import logging
import time
from typing import Callable, Optional
from uuid import uuid4

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

log = logging.getLogger("recnorm.api")

REQUEST_ID_HEADER = "X-Request-ID"
DURATION_HEADER = "X-Normalize-Duration-Ms"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Correlate and log every request.

    Response headers:
      - X-Request-ID: echoed from the client when short, generated otherwise
      - X-Normalize-Duration-Ms: wall time spent handling the request

    One "api_request" log line per request; bodies are never logged.

    """

    def __init__(self, app, *, max_request_id_len: int = 128):
        super().__init__(app)
        self._max_len = max_request_id_len

    def _request_id(self, request: Request) -> str:
        rid = request.headers.get(REQUEST_ID_HEADER)
        if not rid or len(rid) > self._max_len:
            return uuid4().hex
        return rid

    async def dispatch(self, request: Request, call_next: Callable):
        request.state.request_id = rid = self._request_id(request)
        start = time.monotonic()
        response: Optional[Response] = None
        try:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = rid
            response.headers[DURATION_HEADER] = str(int((time.monotonic() - start) * 1000))
            return response
        finally:
            log.info(
                "api_request",
                extra={
                    "request_id": rid,
                    "record_name": getattr(request.state, "record_name", None),
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": getattr(response, "status_code", None),
                    "duration_ms": int((time.monotonic() - start) * 1000),
                },
            )
