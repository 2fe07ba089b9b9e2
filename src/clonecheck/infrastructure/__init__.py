"""
Infrastructure Package.

Provides navigation pacing for drivers that fetch source and clone pages.
"""

from .rate_limiter import (
    RateLimiter,
    RateLimitConfig,
    RateLimiterMetrics,
    exponential_backoff,
)

__all__ = [
    # Rate Limiter
    "RateLimiter",
    "RateLimitConfig",
    "RateLimiterMetrics",
    "exponential_backoff",
]
