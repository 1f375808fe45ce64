"""
Middleware package for authentication and rate limiting
"""

from gridboard.middleware.authentication import verify_gateway_user, get_current_user
from gridboard.middleware.rate_limiter import (
    limiter,
    init_redis,
    close_redis,
    rate_limit_handler,
)

__all__ = [
    "verify_gateway_user",
    "get_current_user",
    "limiter",
    "init_redis",
    "close_redis",
    "rate_limit_handler",
]
