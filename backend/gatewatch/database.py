"""
Redis connection management for GateWatch
Incident records and their time-ordered index live in Redis
"""

import logging
from typing import Tuple

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from .config import Settings

logger = logging.getLogger(__name__)


def create_redis_client(settings: Settings) -> aioredis.Redis:
    """
    Create the async Redis client used by repositories and signal sources.

    No connection is opened until the first command is issued.
    """
    return aioredis.from_url(
        settings.redis_url,
        decode_responses=True,
        socket_timeout=settings.redis_socket_timeout,
        socket_connect_timeout=settings.redis_socket_timeout,
        socket_keepalive=True,
    )


async def check_redis_health(client: aioredis.Redis) -> Tuple[bool, str]:
    """Ping Redis and report (healthy, status)."""
    try:
        await client.ping()
        return True, "healthy"
    except RedisError as e:
        logger.error(f"Redis health check failed: {e}")
        return False, "unhealthy"
