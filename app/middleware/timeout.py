"""Per-request time budget.

When a handler exceeds the budget the client gets a 504 and the wait is
abandoned; work already running in the threadpool is not cancelled.
"""
import asyncio
import logging

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

logger = logging.getLogger("app.timeout")


class TimeoutMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, timeout_seconds: float = 30.0):
        super().__init__(app)
        self.timeout_seconds = timeout_seconds

    async def dispatch(self, request: Request, call_next):
        try:
            return await asyncio.wait_for(call_next(request), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            correlation_id = getattr(request.state, "correlation_id", "unknown")
            logger.warning(
                f"[{correlation_id}] {request.method} {request.url.path} exceeded {self.timeout_seconds}s"
            )
            return JSONResponse(
                status_code=504,
                content={
                    "detail": "Request timed out. Please try again.",
                    "retryable": True,
                    "correlation_id": correlation_id,
                },
            )
