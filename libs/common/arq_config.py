"""Redis connection settings for the loyalty expiry worker (arq)."""

from typing import Optional
from urllib.parse import urlparse

from arq.connections import RedisSettings
from libs.common.config import get_settings


def get_redis_settings(redis_url: Optional[str] = None) -> RedisSettings:
    """Build arq RedisSettings from a redis:// or rediss:// URL.

    Defaults to REDIS_URL. The database index comes from the URL path.
    """
    parsed = urlparse(redis_url or get_settings().REDIS_URL)
    db_index = parsed.path.lstrip("/")

    return RedisSettings(
        host=parsed.hostname or "localhost",
        port=parsed.port or 6379,
        database=int(db_index) if db_index else 0,
        username=parsed.username,
        password=parsed.password,
        ssl=parsed.scheme == "rediss",
        conn_timeout=5,
    )
