"""
Caching utilities for the habit ledger.
Django cache framework with per-user generation counters for invalidation.
"""
from django.core.cache import cache
import hashlib
import logging

from habits.utils.constants import get_setting

logger = logging.getLogger(__name__)


def make_cache_key(prefix, *args, **kwargs):
    """
    Generate a consistent cache key from arguments.

    Args:
        prefix: Cache key prefix (e.g., 'dashboard')
        *args: Positional key parts
        **kwargs: Keyword key parts (sorted for stability)

    Returns:
        String cache key (hashed when longer than 200 chars)
    """
    key_parts = [prefix]
    key_parts.extend(str(arg) for arg in args)
    key_parts.extend(f"{k}={v}" for k, v in sorted(kwargs.items()))

    key_string = ':'.join(key_parts)
    if len(key_string) > 200:
        key_hash = hashlib.md5(key_string.encode()).hexdigest()
        return f"{prefix}:{key_hash}"
    return key_string


def _generation_key(user_id) -> str:
    return f"dashboard_generation:{user_id}"


def get_cache_generation(user_id) -> int:
    """Current generation of a user's cached dashboards."""
    return cache.get(_generation_key(user_id), 0)


def dashboard_cache_key(user_id, week_id: str, today_iso: str) -> str:
    """Key for one user's dashboard of one week as seen on one day."""
    return make_cache_key('dashboard', user_id, week_id, today_iso, gen=get_cache_generation(user_id))


def get_cached_dashboard(user_id, week_id: str, today_iso: str):
    key = dashboard_cache_key(user_id, week_id, today_iso)
    result = cache.get(key)
    logger.debug("Cache %s: %s", "HIT" if result is not None else "MISS", key)
    return result


def set_cached_dashboard(user_id, week_id: str, today_iso: str, data, timeout=None):
    if timeout is None:
        timeout = get_setting('DASHBOARD_CACHE_TIMEOUT')
    cache.set(dashboard_cache_key(user_id, week_id, today_iso), data, timeout)


def invalidate_user_dashboard(user_id):
    """
    Invalidate every cached dashboard of a user.
    Call this whenever one of the user's habits or week logs changes.
    """
    key = _generation_key(user_id)
    cache.add(key, 0, None)
    try:
        cache.incr(key)
    except ValueError:
        # Evicted between add and incr
        cache.set(key, 1, None)
    logger.debug("Invalidated dashboard cache for user %s", user_id)


class CacheInvalidator:
    """
    Context manager for writes that should invalidate a user's dashboards.

    Usage:
        with CacheInvalidator(user.id):
            log.save()
        # Cache invalidated on successful exit
    """

    def __init__(self, user_id):
        self.user_id = user_id

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            invalidate_user_dashboard(self.user_id)
