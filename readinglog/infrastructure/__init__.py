"""
readinglog Infrastructure Package.

- RateLimiter: token bucket algorithm with async support
"""

from .rate_limiter import RateLimiter

__all__ = [
    'RateLimiter',
]
