"""In-memory fixed-window rate limiting per client address.

Good enough for a single instance; counts are not shared between workers.
"""
import logging
import threading
import time
from typing import Dict, Tuple

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

logger = logging.getLogger("app.rate_limit")

EXEMPT_PREFIXES = ("/health",)
WINDOW_SECONDS = 60


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, calls_per_minute: int = 60):
        super().__init__(app)
        self.calls_per_minute = calls_per_minute
        self._windows: Dict[str, Tuple[int, int]] = {}
        self._lock = threading.Lock()

    def _client_key(self, request: Request) -> str:
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            return forwarded.split(",")[0].strip()
        return request.client.host if request.client else "unknown"

    def _hit(self, key: str) -> int:
        window = int(time.time() // WINDOW_SECONDS)
        with self._lock:
            if len(self._windows) > 10_000:
                self._windows = {k: v for k, v in self._windows.items() if v[0] == window}
            current_window, count = self._windows.get(key, (window, 0))
            if current_window != window:
                count = 0
            count += 1
            self._windows[key] = (window, count)
        return count

    async def dispatch(self, request: Request, call_next):
        if request.method == "OPTIONS" or request.url.path.startswith(EXEMPT_PREFIXES):
            return await call_next(request)

        key = self._client_key(request)
        if self._hit(key) > self.calls_per_minute:
            logger.warning(f"Rate limit exceeded for client={key} path={request.url.path}")
            return JSONResponse(
                status_code=429,
                content={"detail": "Too many requests", "retry_after_seconds": WINDOW_SECONDS},
                headers={"Retry-After": str(WINDOW_SECONDS)},
            )
        return await call_next(request)
