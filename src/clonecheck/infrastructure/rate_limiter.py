"""
Navigation Rate Limiter.

Keeps a polite minimum spacing between navigations to the source site and
applies exponential backoff after a throttling (HTTP 429) response. Both
policies share one "last request" timestamp, so a throttled request still
counts towards the spacing of the next one.

One limiter serves one navigation lane. Pipelines that navigate in parallel
give every lane its own instance.
"""

import asyncio
import logging
import os
import time
from dataclasses import dataclass
from typing import Optional

from clonecheck.constants import (
    INITIAL_BACKOFF_MS,
    MAX_BACKOFF_MS,
    MIN_REQUEST_DELAY_MS,
)

logger = logging.getLogger(__name__)


def _env_ms(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        parsed = int(value)
    except ValueError:
        logger.warning(f"Ignoring non-integer {name}={value!r}, using {default}")
        return default
    if parsed < 0:
        logger.warning(f"Ignoring negative {name}={parsed}, using {default}")
        return default
    return parsed


@dataclass
class RateLimitConfig:
    """Configuration for rate limiter (all values in milliseconds)."""
    # Minimum spacing between consecutive navigations
    min_delay_ms: int = MIN_REQUEST_DELAY_MS

    # First backoff step after a 429
    initial_backoff_ms: int = INITIAL_BACKOFF_MS

    # Backoff ceiling
    max_backoff_ms: int = MAX_BACKOFF_MS

    @classmethod
    def from_env(cls) -> "RateLimitConfig":
        """Load timings from CLONECHECK_* environment variables.

        Malformed or negative values keep the default.
        """
        return cls(
            min_delay_ms=_env_ms("CLONECHECK_MIN_DELAY_MS", MIN_REQUEST_DELAY_MS),
            initial_backoff_ms=_env_ms("CLONECHECK_INITIAL_BACKOFF_MS", INITIAL_BACKOFF_MS),
            max_backoff_ms=_env_ms("CLONECHECK_MAX_BACKOFF_MS", MAX_BACKOFF_MS),
        )


@dataclass
class RateLimiterMetrics:
    """Snapshot of limiter activity."""
    last_request_time: Optional[float]  # epoch milliseconds
    total_requests: int
    total_wait_ms: float
    total_throttles: int
    total_backoff_ms: float


def exponential_backoff(
    attempt: int,
    initial_backoff_ms: int = INITIAL_BACKOFF_MS,
    max_backoff_ms: int = MAX_BACKOFF_MS,
) -> int:
    """
    Delay before retrying after a throttling response.

    Formula: min(initial_backoff_ms * 2**attempt, max_backoff_ms)

    Args:
        attempt: Retry attempt number (0-indexed); negative values act as 0

    Returns:
        Delay in milliseconds

    Example:
        exponential_backoff(0)  # 5000
        exponential_backoff(3)  # 40000
        exponential_backoff(4)  # 60000 (capped)
    """
    if attempt < 0:
        return initial_backoff_ms
    # Past the cap the exponent no longer matters
    if initial_backoff_ms > 0 and attempt >= max_backoff_ms.bit_length():
        return max_backoff_ms
    return min(initial_backoff_ms * (2 ** attempt), max_backoff_ms)


def _now_ms() -> float:
    return time.time() * 1000


class RateLimiter:
    """
    Minimum-spacing and backoff limiter for page navigations.

    Features:
    - Fixed minimum delay between navigations (first call never waits)
    - Exponential backoff after HTTP 429
    - Shared timestamp between both policies
    """

    def __init__(
        self,
        min_delay_ms: Optional[int] = None,
        config: Optional[RateLimitConfig] = None,
    ):
        """
        Initialize rate limiter.

        Args:
            min_delay_ms: Minimum delay between navigations; overrides config
            config: Rate limit configuration
        """
        self.config = config or RateLimitConfig()
        if min_delay_ms is not None:
            self.config = RateLimitConfig(
                min_delay_ms=min_delay_ms,
                initial_backoff_ms=self.config.initial_backoff_ms,
                max_backoff_ms=self.config.max_backoff_ms,
            )

        self._last_request_time: Optional[float] = None
        self._lock = asyncio.Lock()

        # Statistics
        self._total_requests = 0
        self._total_wait_ms = 0.0
        self._total_throttles = 0
        self._total_backoff_ms = 0.0

    @property
    def min_delay_ms(self) -> int:
        return self.config.min_delay_ms

    @property
    def last_request_time(self) -> Optional[float]:
        """Epoch milliseconds of the last navigation, or None."""
        return self._last_request_time

    def calculate_wait_time(self, current_time_ms: Optional[float] = None) -> float:
        """
        Time to wait before the next navigation.

        Args:
            current_time_ms: Current epoch milliseconds (defaults to now)

        Returns:
            Milliseconds to wait; 0 when no navigation has been recorded
        """
        if self._last_request_time is None:
            return 0
        if current_time_ms is None:
            current_time_ms = _now_ms()
        elapsed = current_time_ms - self._last_request_time
        return max(0, self.config.min_delay_ms - elapsed)

    def record_request(self, timestamp_ms: Optional[float] = None) -> None:
        """Mark a navigation as made now (or at ``timestamp_ms``)."""
        self._last_request_time = _now_ms() if timestamp_ms is None else timestamp_ms
        self._total_requests += 1

    def backoff_delay(self, attempt: int) -> int:
        """Backoff for ``attempt`` using this limiter's timings."""
        return exponential_backoff(
            attempt,
            initial_backoff_ms=self.config.initial_backoff_ms,
            max_backoff_ms=self.config.max_backoff_ms,
        )

    async def wait_between_requests(self) -> float:
        """
        Wait out the minimum spacing, then record the navigation.

        Returns:
            Milliseconds actually waited
        """
        async with self._lock:
            wait_ms = self.calculate_wait_time()

            if wait_ms > 0:
                logger.debug(f"Rate limiter: waiting {wait_ms:.0f}ms before navigation")
                await asyncio.sleep(wait_ms / 1000)
                self._total_wait_ms += wait_ms

            self.record_request()
            return wait_ms

    async def handle_rate_limit(self, attempt: int) -> int:
        """
        Back off after a 429 response.

        Args:
            attempt: Retry attempt number (0-indexed)

        Returns:
            Milliseconds waited
        """
        async with self._lock:
            delay_ms = self.backoff_delay(attempt)
            logger.info(
                f"Rate limiter: throttled (attempt {attempt}), "
                f"backing off {delay_ms}ms"
            )
            await asyncio.sleep(delay_ms / 1000)

            self._total_throttles += 1
            self._total_backoff_ms += delay_ms
            self.record_request()
            return delay_ms

    def get_metrics(self) -> RateLimiterMetrics:
        """Current limiter statistics."""
        return RateLimiterMetrics(
            last_request_time=self._last_request_time,
            total_requests=self._total_requests,
            total_wait_ms=self._total_wait_ms,
            total_throttles=self._total_throttles,
            total_backoff_ms=self._total_backoff_ms,
        )

    def reset(self) -> None:
        """Forget the last navigation, e.g. when starting an unrelated session."""
        self._last_request_time = None
        self._total_requests = 0
        self._total_wait_ms = 0.0
        self._total_throttles = 0
        self._total_backoff_ms = 0.0
