"""Rate Limiter — per-client-IP token buckets and the HTTP middleware that enforces them.

Invariants:
    - Each client IP owns one bucket: capacity `burst`, refilled at `rps` tokens/second
    - A request spends one token; an empty bucket → 429 in the {"error": {...}} envelope
    - A disabled limiter never rejects and never records
    - Buckets idle longer than STALE_AFTER_SECONDS are dropped on the next sweep

Design Decisions:
    - In-memory, process-local: counts reset on restart and are not shared across workers
    - The sweep runs inline (at most once per SWEEP_INTERVAL_SECONDS) instead of a background task
"""

import logging
import time
from threading import Lock

from fastapi import Request
from fastapi.responses import JSONResponse

from dotareplays.core.errors import RateLimitExceededError

logger = logging.getLogger(__name__)

SWEEP_INTERVAL_SECONDS = 60.0
STALE_AFTER_SECONDS = 180.0


class _Bucket:
    __slots__ = ("tokens", "updated_at")

    def __init__(self, tokens: float, now: float):
        self.tokens = tokens
        self.updated_at = now


class RateLimiter:
    """Token-bucket limiter keyed by client IP."""

    def __init__(self, rps: float = 2.0, burst: int = 4, enabled: bool = True):
        self.rps = rps
        self.burst = burst
        self.enabled = enabled
        self._buckets: dict[str, _Bucket] = {}
        self._lock = Lock()
        self._last_sweep = time.monotonic()

    def allow(self, client_ip: str, now: float | None = None) -> bool:
        """Spend one token for client_ip; False when its bucket is empty."""
        if not self.enabled:
            return True
        now = time.monotonic() if now is None else now
        with self._lock:
            if now - self._last_sweep >= SWEEP_INTERVAL_SECONDS:
                self._sweep(now)
            bucket = self._buckets.get(client_ip)
            if bucket is None:
                bucket = self._buckets[client_ip] = _Bucket(float(self.burst), now)
            else:
                elapsed = max(0.0, now - bucket.updated_at)
                bucket.tokens = min(float(self.burst), bucket.tokens + elapsed * self.rps)
                bucket.updated_at = now
            if bucket.tokens < 1.0:
                return False
            bucket.tokens -= 1.0
            return True

    def tracked_clients(self) -> int:
        with self._lock:
            return len(self._buckets)

    def _sweep(self, now: float) -> None:
        cutoff = now - STALE_AFTER_SECONDS
        for ip in [ip for ip, b in self._buckets.items() if b.updated_at < cutoff]:
            del self._buckets[ip]
        self._last_sweep = now


async def rate_limit(request: Request, call_next):
    """HTTP middleware: reject with 429 once the caller's bucket runs dry."""
    limiter: RateLimiter | None = getattr(request.app.state, "rate_limiter", None)
    client_ip = request.client.host if request.client else "unknown"
    if limiter is not None and not limiter.allow(client_ip):
        exc = RateLimitExceededError()
        logger.info(
            exc.message,
            extra={"error_code": exc.code, "path": request.url.path, "method": request.method},
        )
        return JSONResponse(status_code=exc.http_status, content=exc.to_response())
    return await call_next(request)
