"""Simple in-memory rate limiter for API endpoints."""

import threading
import time
from typing import Callable, Dict, Tuple

from fastapi import HTTPException, Request

from ..utils.logger import get_logger

logger = get_logger(__name__)


class RateLimiter:
    """
    Token bucket rate limiter keyed by client.

    A bucket holds up to ``max_requests`` tokens and refills completely over
    ``window_seconds``. Uses in-memory storage, so limits are per process.
    """

    def __init__(
        self,
        max_requests: int = 100,
        window_seconds: float = 15 * 60,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize rate limiter.

        Args:
            max_requests: Requests allowed per window (also the burst size)
            window_seconds: Window length in seconds
            clock: Time source, seconds
        """
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.refill_rate = max_requests / window_seconds  # tokens per second
        self._clock = clock
        self._lock = threading.Lock()

        # Storage: key -> (tokens, last_refill_time)
        self._buckets: Dict[str, Tuple[float, float]] = {}
        self._last_sweep = clock()

    def _refill_bucket(self, key: str) -> Tuple[float, float]:
        now = self._clock()
        current_tokens, last_refill = self._buckets.get(key, (float(self.max_requests), now))
        new_tokens = min(self.max_requests, current_tokens + (now - last_refill) * self.refill_rate)
        self._buckets[key] = (new_tokens, now)
        return new_tokens, now

    def _drop_full_buckets(self) -> int:
        now = self._clock()
        full = [
            key for key, (tokens, last_refill) in self._buckets.items()
            if tokens + (now - last_refill) * self.refill_rate >= self.max_requests
        ]
        for key in full:
            del self._buckets[key]
        self._last_sweep = now
        return len(full)

    def purge_idle(self) -> int:
        """Forget clients whose bucket has refilled completely; returns how many."""
        with self._lock:
            return self._drop_full_buckets()

    def __len__(self) -> int:
        with self._lock:
            return len(self._buckets)

    def check_limit(self, key: str, cost: float = 1.0) -> bool:
        """
        Consume a token for the key.

        Raises:
            HTTPException: 429 if rate limited
        """
        with self._lock:
            if self._clock() - self._last_sweep >= self.window_seconds:
                self._drop_full_buckets()
            current_tokens, now = self._refill_bucket(key)
            if current_tokens >= cost:
                self._buckets[key] = (current_tokens - cost, now)
                return True

        retry_after = int((cost - current_tokens) / self.refill_rate) + 1
        logger.warning(
            f"Rate limit exceeded for key: {key}, "
            f"tokens: {current_tokens:.2f}/{self.max_requests}, "
            f"retry after: {retry_after}s"
        )
        raise HTTPException(
            status_code=429,
            detail="Too many requests from this IP, please try again later.",
            headers={"Retry-After": str(retry_after)},
        )

    def reset(self, key: str = None) -> None:
        with self._lock:
            if key is None:
                self._buckets.clear()
            else:
                self._buckets.pop(key, None)


def client_key(request: Request) -> str:
    host = request.client.host if request.client else "unknown"
    return f"ip:{host}"


def rate_limit_dependency(limiter: RateLimiter):
    """FastAPI dependency enforcing the limiter per client IP."""

    def enforce(request: Request) -> None:
        limiter.check_limit(client_key(request))

    return enforce
