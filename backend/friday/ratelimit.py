"""In-memory request rate limiting.

Fixed-window counters keyed by client address or instance id. The limiter
state lives on the application instance, so a restart (or a fresh app in
tests) starts every client from zero.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Tuple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of one counted request."""

    allowed: bool
    limit: int
    remaining: int
    reset_after: int

    def headers(self) -> Dict[str, str]:
        """IETF draft ``RateLimit-*`` response headers."""
        return {
            "RateLimit-Limit": str(self.limit),
            "RateLimit-Remaining": str(self.remaining),
            "RateLimit-Reset": str(self.reset_after),
        }


class RateLimiter:
    """
    Thread-safe fixed-window counter.

    Each key gets ``max_requests`` hits per ``window_seconds``; the window
    opens on the key's first hit.
    """

    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_requests <= 0 or window_seconds <= 0:
            raise ValueError("max_requests and window_seconds must be positive")
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._hits: Dict[str, Tuple[int, float]] = {}

    @property
    def window_length(self) -> int:
        """Window length in whole seconds, for Retry-After values."""
        return int(self.window_seconds)

    def hit(self, key: str) -> RateLimitDecision:
        """Count one request for ``key`` and decide whether it may proceed."""
        now = self._clock()
        with self._lock:
            count, reset_at = self._hits.get(key, (0, now + self.window_seconds))
            if now >= reset_at:
                count, reset_at = 0, now + self.window_seconds
            count += 1
            self._hits[key] = (count, reset_at)
            if len(self._hits) > 10_000:
                self._prune(now)

        allowed = count <= self.max_requests
        if not allowed:
            logger.info(f"Rate limit hit for {key} ({count}/{self.max_requests})")
        return RateLimitDecision(
            allowed=allowed,
            limit=self.max_requests,
            remaining=max(self.max_requests - count, 0),
            reset_after=max(int(reset_at - now), 0),
        )

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()

    def _prune(self, now: float) -> None:
        expired = [key for key, (_, reset_at) in self._hits.items() if now >= reset_at]
        for key in expired:
            del self._hits[key]
