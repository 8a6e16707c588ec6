"""
Cache utilities for the storefront.

Provides Redis-backed caching with graceful fallback to simple in-memory caching.
Uses Flask-Caching for integration with Flask app.

Backend responses are cached under logical tags ("carts", "coins") scoped to a
customer session. Every key embeds the tag's current generation token;
invalidating a tag mints a new random token, so keys built from an older
generation are never read again. A generation key that expires or is evicted
is replaced by a fresh token as well, never by an earlier one.

Usage:
    from storefront.utils.cache import cache, tagged_key, invalidate_tag

    tag = get_cache_tag('carts', cache_id)
    key = tagged_key(tag, cart_id)
    cache.set(key, data, timeout=60)
    invalidate_tag(tag)

Environment Variables:
    REDIS_URL: Redis connection URL (e.g., redis://localhost:6379/0)
              Falls back to simple cache if not set or unavailable.
"""
import os
import uuid
import logging
from flask import current_app
from flask_caching import Cache

logger = logging.getLogger(__name__)

# Global cache instance - initialized in init_cache()
cache = Cache()

# Default cache configuration
DEFAULT_CACHE_CONFIG = {
    'CACHE_TYPE': 'SimpleCache',  # Fallback: in-memory
    'CACHE_DEFAULT_TIMEOUT': 300,  # 5 minutes
}


def init_cache(app):
    """
    Initialize Flask-Caching with Redis or fallback to simple cache.

    Args:
        app: Flask application instance

    Returns:
        bool: True if Redis connected, False if using fallback
    """
    redis_url = app.config.get('REDIS_URL') or os.getenv('REDIS_URL')

    if redis_url:
        try:
            # Test Redis connection before configuring
            import redis
            r = redis.from_url(redis_url, socket_connect_timeout=2)
            r.ping()

            app.config['CACHE_TYPE'] = 'RedisCache'
            app.config['CACHE_REDIS_URL'] = redis_url
            app.config['CACHE_DEFAULT_TIMEOUT'] = 300
            app.config['CACHE_KEY_PREFIX'] = 'storefront:'

            cache.init_app(app)
            logger.info('[Storefront] Redis cache connected: %s', redis_url.split('@')[-1])
            return True

        except Exception as e:
            logger.warning('[Storefront] Redis unavailable (%s), using simple cache', str(e))

    # Fallback to simple in-memory cache
    app.config['CACHE_TYPE'] = 'SimpleCache'
    app.config.setdefault('CACHE_DEFAULT_TIMEOUT', DEFAULT_CACHE_CONFIG['CACHE_DEFAULT_TIMEOUT'])

    cache.init_app(app)
    logger.info('[Storefront] Using simple in-memory cache (no Redis)')
    return False


def cache_key(*args, **kwargs):
    """
    Generate a cache key from function arguments.

        key = cache_key('cart', 'cart_123', region='eu')
    """
    parts = list(args)
    for k, v in sorted(kwargs.items()):
        parts.append(f'{k}={v}')
    return ':'.join(str(p) for p in parts)


def get_cache_tag(tag: str, cache_id: str = None) -> str:
    """Scope a logical tag to one customer session."""
    if not cache_id:
        return tag
    return f'{tag}-{cache_id}'


def tag_timeout() -> int:
    """Lifetime of a generation key: at least as long as any tagged entry."""
    config = current_app.config
    return max(
        config.get('CART_CACHE_TIMEOUT', 0),
        config.get('COINS_CACHE_TIMEOUT', 0),
        config.get('CACHE_DEFAULT_TIMEOUT', DEFAULT_CACHE_CONFIG['CACHE_DEFAULT_TIMEOUT']),
    )


def tag_version(tag: str) -> str:
    """Current generation token of a tag, minting one if none is stored."""
    key = cache_key('tag', tag)
    version = cache.get(key)
    if version is None:
        version = uuid.uuid4().hex
        if not cache.add(key, version, timeout=tag_timeout()):
            version = cache.get(key) or version
    return version


def tagged_key(tag: str, *args, **kwargs) -> str:
    """Build a cache key bound to the current generation of a tag."""
    return cache_key(tag, f'v{tag_version(tag)}', *args, **kwargs)


def invalidate_tag(tag: str) -> str:
    """
    Start a new generation for a tag.

    Returns:
        str: The new generation token
    """
    version = uuid.uuid4().hex
    cache.set(cache_key('tag', tag), version, timeout=tag_timeout())
    logger.debug('Invalidated cache tag %s (now v%s)', tag, version)
    return version
