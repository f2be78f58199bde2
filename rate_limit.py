"""Fixed-window, in-memory rate limiter for the public form endpoints."""

import logging
import threading
import time
from typing import Callable, Dict, Optional, Tuple

from fastapi import HTTPException, Request

logger = logging.getLogger("readiness.rate_limit")

TOO_MANY_REQUESTS = "Too many requests. Please try again later."


def client_ip(request: Request, trusted_proxy_hops: int = 0) -> Optional[str]:
    """
    Address of the client that sent the request.

    X-Forwarded-For is client-controlled, so it is only read when the app sits
    behind `trusted_proxy_hops` proxies that each append the peer they saw.
    The client is then the entry that many places from the right.
    """
    peer = request.client.host if request.client else None
    if trusted_proxy_hops <= 0:
        return peer
    forwarded = request.headers.get("X-Forwarded-For")
    if not forwarded:
        return peer
    hops = [h.strip() for h in forwarded.split(",") if h.strip()]
    if not hops:
        return peer
    return hops[-min(trusted_proxy_hops, len(hops))]


class RateLimiter:
    """
    Allows `max_requests` per key in each `window_seconds` window.

    State is per process; multiple workers each keep their own windows.
    """

    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        trusted_proxy_hops: int = 0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.trusted_proxy_hops = trusted_proxy_hops
        self._clock = clock
        self._lock = threading.Lock()
        # key -> (window_start, count)
        self._windows: Dict[str, Tuple[float, int]] = {}

    def hit(self, key: str) -> Tuple[bool, int]:
        """Record one request. Returns (allowed, retry_after_seconds)."""
        now = self._clock()
        with self._lock:
            start, count = self._windows.get(key, (now, 0))
            if now - start >= self.window_seconds:
                start, count = now, 0
            if count >= self.max_requests:
                retry_after = int(self.window_seconds - (now - start)) + 1
                return False, retry_after
            self._windows[key] = (start, count + 1)
            self._prune(now)
            return True, 0

    def _prune(self, now: float) -> None:
        if len(self._windows) < 1024:
            return
        expired = [k for k, (start, _) in self._windows.items() if now - start >= self.window_seconds]
        for k in expired:
            del self._windows[k]

    def reset(self, key: Optional[str] = None) -> None:
        with self._lock:
            if key is None:
                self._windows.clear()
            else:
                self._windows.pop(key, None)

    def __call__(self, request: Request) -> None:
        """FastAPI dependency: raises 429 when the client is over its limit."""
        key = client_ip(request, self.trusted_proxy_hops) or "unknown"
        allowed, retry_after = self.hit(key)
        if not allowed:
            logger.warning("Rate limit exceeded: ip=%s path=%s", key, request.url.path)
            raise HTTPException(
                status_code=429,
                detail=TOO_MANY_REQUESTS,
                headers={"Retry-After": str(retry_after)},
            )
