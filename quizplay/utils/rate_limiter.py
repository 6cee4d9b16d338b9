"""
Sliding-window rate limiting for API endpoints
"""
import time
from collections import defaultdict, deque
from fastapi import Request, HTTPException
from typing import Deque, Dict
import logging

from quizplay.config import settings

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    In-memory per-client limiter with a minute and an hour window

    Counts are per process. Clients are keyed by the forwarded user id when
    present, otherwise by remote address. Clients idle for longer than the
    hour window are dropped by a periodic sweep.
    """

    WINDOWS = (("minute", 60), ("hour", 3600))
    SWEEP_INTERVAL = 60  # seconds between idle-client sweeps

    def __init__(self, requests_per_minute: int = 60, requests_per_hour: int = 1000):
        self.limits = {"minute": requests_per_minute, "hour": requests_per_hour}
        self.history: Dict[str, Deque[float]] = defaultdict(deque)
        self._last_sweep = None

    def _get_client_id(self, request: Request) -> str:
        user_id = request.headers.get("X-User-Id")
        if user_id:
            return f"user:{user_id}"
        return f"ip:{request.client.host if request.client else 'unknown'}"

    def _cleanup_old_entries(self, now: float) -> None:
        """Remove expired timestamps and forget clients left with none"""
        cutoff = now - self.WINDOWS[-1][1]

        for client_id in list(self.history.keys()):
            stamps = self.history[client_id]
            while stamps and stamps[0] <= cutoff:
                stamps.popleft()

            if not stamps:
                del self.history[client_id]

        self._last_sweep = now

    def check(self, client_id: str, now: float = None) -> None:
        """
        Record one request for client_id

        Raises:
            HTTPException: 429 if either window is full
        """
        now = time.time() if now is None else now

        if self._last_sweep is None or now - self._last_sweep >= self.SWEEP_INTERVAL:
            self._cleanup_old_entries(now)

        stamps = self.history[client_id]
        while stamps and stamps[0] <= now - self.WINDOWS[-1][1]:
            stamps.popleft()

        for name, seconds in self.WINDOWS:
            in_window = sum(1 for ts in stamps if ts > now - seconds)
            if in_window >= self.limits[name]:
                logger.warning(f"Rate limit exceeded ({name}): {client_id}")
                raise HTTPException(
                    status_code=429,
                    detail={
                        "error": "rate_limit_exceeded",
                        "message": f"Too many requests. Limit: {self.limits[name]} requests per {name}",
                        "retry_after": seconds
                    }
                )

        stamps.append(now)

    async def check_rate_limit(self, request: Request) -> None:
        self.check(self._get_client_id(request))


# Global instance
rate_limiter = RateLimiter(
    requests_per_minute=settings.RATE_LIMIT_PER_MINUTE,
    requests_per_hour=settings.RATE_LIMIT_PER_HOUR
)
