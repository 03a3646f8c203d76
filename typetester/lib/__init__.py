from typetester.lib.cache import CacheBackend, MemoryCache, RedisCache, create_cache_backend

__all__ = [
    "CacheBackend",
    "MemoryCache",
    "RedisCache",
    "create_cache_backend",
]
