"""
Redis connection shared by the cache layer
"""

import logging
from typing import Optional

import redis

from .config import REDIS_DB, REDIS_HOST, REDIS_PASSWORD, REDIS_PORT, REDIS_URL

logger = logging.getLogger(__name__)

redis_client: Optional[redis.Redis] = None


def _mask_url(url: str) -> str:
    """Hide credentials before logging a Redis URL"""
    if "@" in url:
        url_parts = url.split("@")
        protocol = url_parts[0].split(":")[0]
        return f"{protocol}:****@{url_parts[1]}"
    return "****"


def get_redis_client() -> redis.Redis:
    """
    Get or create the Redis client.
    Uses REDIS_URL when set, otherwise the individual host/port settings.
    Raises if the server cannot be reached; callers decide how to degrade.
    """
    global redis_client

    if redis_client is None:
        logger.info("🔄 Initializing Redis connection...")
        options = {
            "decode_responses": True,
            "socket_connect_timeout": 2,
            "socket_timeout": 5,
            "retry_on_timeout": True,
            "health_check_interval": 30,
        }

        if REDIS_URL:
            logger.info(f"📡 Using Redis URL connection: {_mask_url(REDIS_URL)}")
            client = redis.from_url(REDIS_URL, **options)
        else:
            logger.info(f"📡 Using Redis at {REDIS_HOST}:{REDIS_PORT} (db {REDIS_DB})")
            client = redis.Redis(
                host=REDIS_HOST,
                port=REDIS_PORT,
                password=REDIS_PASSWORD,
                db=REDIS_DB,
                **options,
            )

        try:
            client.ping()
        except Exception as e:
            logger.error(f"❌ Failed to connect to Redis: {str(e)}")
            raise

        redis_client = client
        logger.info("Redis connected successfully")

    return redis_client


def reset_redis_client() -> None:
    """Drop the cached client so the next call reconnects"""
    global redis_client
    redis_client = None
