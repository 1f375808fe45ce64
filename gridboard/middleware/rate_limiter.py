"""
Rate Limiting for FastAPI

Requests are counted per authenticated user (per IP otherwise). Counters live
in Redis when REDIS_URL is configured and in process memory when it is not.
"""

from typing import Optional
from fastapi import Request, status
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
import redis.asyncio as redis
from redis.exceptions import RedisError
from gridboard.core.config import settings
from gridboard.core.logging import logger


# Global Redis client
redis_client: Optional[redis.Redis] = None


async def init_redis() -> Optional[redis.Redis]:
    """
    Check that the Redis backing the limiter is reachable

    Returns:
        Redis client if successful, None if not configured or unreachable
    """
    global redis_client

    if not settings.REDIS_URL:
        logger.info("REDIS_URL not configured, using in-memory rate limiting")
        return None

    try:
        client = redis.Redis.from_url(
            settings.REDIS_URL,
            encoding="utf-8",
            decode_responses=True,
            socket_connect_timeout=5
        )
        await client.ping()
        logger.info("Redis connected for rate limiting")
        redis_client = client
        return client
    except (RedisError, OSError) as e:
        logger.warning(f"Redis not available for rate limiting: {e}")
        redis_client = None
        return None


async def close_redis():
    """Close Redis connection"""
    global redis_client
    if redis_client:
        await redis_client.close()
        redis_client = None
        logger.info("Redis connection closed")


def get_user_identifier(request: Request) -> str:
    """
    Key for rate limiting: the gateway user when known, else the client IP
    """
    user = getattr(request.state, "user", None)
    if user and user.get("userId"):
        return f"user:{user['userId']}"
    return f"ip:{get_remote_address(request)}"


def create_rate_limiter() -> Limiter:
    return Limiter(
        key_func=get_user_identifier,
        default_limits=[settings.RATE_LIMIT_DEFAULT],
        storage_uri=settings.REDIS_URL or "memory://",
        headers_enabled=True,
        enabled=settings.RATE_LIMIT_ENABLED,
    )


# Create global limiter instance
limiter = create_rate_limiter()


def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Handler for rate limit exceeded errors"""
    user = getattr(request.state, "user", None) or {}
    logger.warning(f"Rate limit exceeded for {get_user_identifier(request)} on {request.url.path}")

    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={
            "error": "Too many requests",
            "message": f"Rate limit exceeded: {exc.detail}",
            "userId": user.get("userId"),
        },
    )
