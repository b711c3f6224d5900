"""Cache: Redis service."""

from lawdesk.infrastructure.cache.redis_cache import CacheService

__all__ = ["CacheService"]
