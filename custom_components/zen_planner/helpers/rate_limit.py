"""Fixed-window request limiter for the advisor endpoints.

Counters are process-local and only touched from the event loop, so no
locking is needed. A shared backend can replace RateLimiter as long as it
offers the same check(key, config) -> RateLimitResult interface.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta

from .. import const
from ..utils.dt_utils import dt_now_utc


@dataclass(frozen=True)
class RateLimitConfig:
    """Limit of max_requests per window_seconds."""

    max_requests: int
    window_seconds: int = const.RATE_LIMIT_WINDOW_SECONDS


@dataclass(frozen=True)
class RateLimitResult:
    """Outcome of a rate-limit check.

    Attributes:
        allowed: Whether the request may proceed
        remaining: Requests left in the current window after this one
        reset_at: When the current window ends
    """

    allowed: bool
    remaining: int
    reset_at: datetime


@dataclass
class _Window:
    count: int
    reset_at: datetime


ADVISOR_LIMIT = RateLimitConfig(max_requests=const.RATE_LIMIT_ADVISOR_MAX)
ANALYZE_LIMIT = RateLimitConfig(max_requests=const.RATE_LIMIT_ANALYZE_MAX)


class RateLimiter:
    """Per-key fixed-window counter.

    The first request for a key (or the first after its window expired)
    opens a new window. Requests beyond max_requests inside a window are
    denied without consuming a slot. Expired windows are swept at most once
    per cleanup interval.
    """

    def __init__(
        self,
        clock: Callable[[], datetime] = dt_now_utc,
        cleanup_interval: int = const.RATE_LIMIT_CLEANUP_INTERVAL_SECONDS,
    ) -> None:
        """Initialize the limiter with an injectable clock."""
        self._clock = clock
        self._cleanup_interval = timedelta(seconds=cleanup_interval)
        self._windows: dict[str, _Window] = {}
        self._last_cleanup = clock()

    def __len__(self) -> int:
        """Return the number of tracked keys."""
        return len(self._windows)

    def check(self, key: str, config: RateLimitConfig) -> RateLimitResult:
        """Count a request for key and report whether it is allowed."""
        now = self._clock()
        self._maybe_cleanup(now)

        window = self._windows.get(key)
        if window is None or now >= window.reset_at:
            window = _Window(
                count=1, reset_at=now + timedelta(seconds=config.window_seconds)
            )
            self._windows[key] = window
            return RateLimitResult(True, config.max_requests - 1, window.reset_at)

        if window.count >= config.max_requests:
            const.LOGGER.debug("DEBUG: Rate limit exceeded for %s", key)
            return RateLimitResult(False, 0, window.reset_at)

        window.count += 1
        return RateLimitResult(
            True, config.max_requests - window.count, window.reset_at
        )

    def _maybe_cleanup(self, now: datetime) -> None:
        if now - self._last_cleanup < self._cleanup_interval:
            return
        self._last_cleanup = now
        expired = [key for key, w in self._windows.items() if now >= w.reset_at]
        for key in expired:
            del self._windows[key]
        if expired:
            const.LOGGER.debug("DEBUG: Swept %s expired rate-limit window(s)", len(expired))
