"""Redis caching utilities for FarmLog.

Used for responses that are expensive to produce and change slowly (the
weather feed).  Keys are scoped to the current user context.  Redis being
down never breaks a request: the wrapped function is simply called
uncached.
"""

import functools
import hashlib
import json
import logging
from datetime import date, datetime
from typing import Callable, Optional

import redis.asyncio as redis

from farmlog.config import settings
from farmlog.usercontext import _user_ctx

logger = logging.getLogger(__name__)

_redis_client: Optional[redis.Redis] = None


async def get_redis() -> redis.Redis:
    """Get or create Redis client connection."""
    global _redis_client
    if _redis_client is None:
        _redis_client = redis.from_url(
            settings.redis_url,
            encoding="utf-8",
            decode_responses=True,
            max_connections=50,
        )
    return _redis_client


async def close_redis():
    """Close Redis connection (call on app shutdown)."""
    global _redis_client
    if _redis_client:
        await _redis_client.aclose()
        _redis_client = None


def cache_key(*args, **kwargs) -> str:
    """Deterministic hash of the call arguments."""
    if not args and not kwargs:
        return "default"

    key_data = json.dumps({"args": args, "kwargs": kwargs}, sort_keys=True)
    return hashlib.md5(key_data.encode()).hexdigest()


def _serialize(result):
    if hasattr(result, "model_dump"):
        return result.model_dump(mode="json", by_alias=True)
    if isinstance(result, list) and result and hasattr(result[0], "model_dump"):
        return [item.model_dump(mode="json", by_alias=True) for item in result]
    return result


def cached(ttl: int = 300, prefix: str = "cache"):
    """Decorator to cache an async function's result in Redis.

    Only keyword arguments of simple types take part in the key; positional
    arguments (usually injected dependencies) are ignored.  On a hit the
    decoded JSON is returned, not the original object.

    Cache keys: ``u:{user}:{prefix}:{function_name}:{kwargs_hash}``
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            cache_kwargs = {}
            for k, v in kwargs.items():
                if k.startswith("_"):
                    continue
                if isinstance(v, (int, str, bool, float, type(None))):
                    cache_kwargs[k] = v
                elif isinstance(v, (date, datetime)):
                    cache_kwargs[k] = v.isoformat()
            key = f"{prefix}:{func.__name__}:{cache_key(**cache_kwargs)}"
            user = _user_ctx.get()
            if user:
                key = f"u:{user}:{key}"

            try:
                redis_client = await get_redis()
                cached_value = await redis_client.get(key)
                if cached_value:
                    logger.debug(f"Cache HIT: {key}")
                    return json.loads(cached_value)
                logger.debug(f"Cache MISS: {key}")
            except redis.RedisError as e:
                logger.warning(f"Redis error (falling back to uncached): {e}")
                return await func(*args, **kwargs)

            result = await func(*args, **kwargs)
            try:
                await redis_client.setex(key, ttl, json.dumps(_serialize(result)))
            except redis.RedisError as e:
                logger.warning(f"Failed to store cache entry {key}: {e}")
            return result

        return wrapper

    return decorator


async def invalidate_cache(pattern: str):
    """Delete cache keys matching *pattern* within the current user scope."""
    try:
        user = _user_ctx.get()
        scoped_pattern = f"u:{user}:{pattern}" if user else pattern

        redis_client = await get_redis()
        keys = [key async for key in redis_client.scan_iter(match=scoped_pattern)]
        if keys:
            await redis_client.delete(*keys)
            logger.info(f"Invalidated {len(keys)} cache keys matching {scoped_pattern}")
    except redis.RedisError as e:
        logger.warning(f"Failed to invalidate cache: {e}")
