"""
Sliding-window throttling for the interest write routes.

The limiter instance belongs to one application: ``create_app`` builds it and
keeps it on ``app.state.rate_limiter``, and the route dependency looks it up
from the request. Separate apps never share counters.
"""
import logging
import threading
import time
from collections import defaultdict, deque
from dataclasses import dataclass
from typing import Callable

from fastapi import Depends, HTTPException, Request

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateDecision:
    allowed: bool
    retry_after_seconds: int = 0


class SlidingWindowLimiter:
    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._hits: dict[str, deque[float]] = defaultdict(deque)
        self._lock = threading.Lock()

    def hit(self, key: str, limit: int, window_seconds: int) -> RateDecision:
        """Record one request for ``key`` unless it is already over ``limit``."""
        now = self._clock()
        with self._lock:
            hits = self._hits[key]
            while hits and now - hits[0] >= window_seconds:
                hits.popleft()
            if len(hits) < limit:
                hits.append(now)
                return RateDecision(allowed=True)
            oldest = hits[0]
        return RateDecision(allowed=False, retry_after_seconds=max(1, int(oldest + window_seconds - now)))


def client_key(request: Request) -> str:
    actor = request.headers.get("x-actor-user-id", "").strip()
    if actor:
        return f"actor:{actor}"
    forwarded = request.headers.get("x-forwarded-for", "")
    if forwarded.strip():
        return f"ip:{forwarded.split(',')[0].strip()}"
    host = request.client.host if request.client else None
    return f"ip:{host or 'unknown'}"


def throttle(route_key: str, limit: int, window_seconds: int):
    """Dependency that answers 429 once a client exceeds ``limit`` per window."""

    def _check(request: Request) -> None:
        limiter: SlidingWindowLimiter = request.app.state.rate_limiter
        client = client_key(request)
        decision = limiter.hit(f"{route_key}:{client}", limit, window_seconds)
        if decision.allowed:
            return
        logger.warning("[RATE_LIMIT] route=%s client=%s retry_after=%s", route_key, client, decision.retry_after_seconds)
        raise HTTPException(
            status_code=429,
            detail=f"Too many requests. Retry in {decision.retry_after_seconds}s",
            headers={"Retry-After": str(decision.retry_after_seconds)},
        )

    return Depends(_check)
