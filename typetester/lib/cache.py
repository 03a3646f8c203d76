"""Pluggable key-value cache backends.

Built-in backends:
- MemoryCache: dict with monotonic expiry, per-process (default)
- RedisCache: shared cache on Redis, for multi-worker deployments

Every backend scopes its keys to a namespace so ``clear()`` only flushes
entries that belong to this application.
"""

from __future__ import annotations

import importlib
import logging
import time
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from typetester.config import CacheConfig

logger = logging.getLogger(__name__)


class CacheUnavailableError(Exception):
    """Raised by a backend that cannot reach its storage."""


@runtime_checkable
class CacheBackend(Protocol):
    """Interface for string-valued caches with per-entry TTL."""

    async def get(self, key: str) -> str | None: ...
    async def set(self, key: str, value: str, ttl: int) -> None: ...
    async def delete(self, *keys: str) -> None: ...
    async def clear(self) -> None: ...
    async def close(self) -> None: ...


class MemoryCache:
    """In-process cache. Expired entries are dropped lazily on access."""

    def __init__(self, namespace: str = "font_tester", **kwargs: Any) -> None:
        self._namespace = namespace
        self._entries: dict[str, tuple[float, str]] = {}

    def _key(self, key: str) -> str:
        return f"{self._namespace}:{key}"

    async def get(self, key: str) -> str | None:
        full_key = self._key(key)
        entry = self._entries.get(full_key)
        if entry is None:
            return None
        expires_at, value = entry
        if expires_at <= time.monotonic():
            del self._entries[full_key]
            return None
        return value

    async def set(self, key: str, value: str, ttl: int) -> None:
        self._entries[self._key(key)] = (time.monotonic() + ttl, value)

    async def delete(self, *keys: str) -> None:
        for key in keys:
            self._entries.pop(self._key(key), None)

    async def clear(self) -> None:
        prefix = f"{self._namespace}:"
        for key in [k for k in self._entries if k.startswith(prefix)]:
            del self._entries[key]

    async def close(self) -> None:
        self._entries.clear()


class RedisCache:
    """Redis-backed cache shared by all workers."""

    def __init__(self, url: str, namespace: str = "font_tester", client: Any = None, **kwargs: Any) -> None:
        import redis.asyncio as aioredis

        self._namespace = namespace
        self._client = client if client is not None else aioredis.Redis.from_url(url)

    def _key(self, key: str) -> str:
        return f"{self._namespace}:{key}"

    async def get(self, key: str) -> str | None:
        from redis.exceptions import RedisError

        try:
            value = await self._client.get(self._key(key))
        except (RedisError, OSError) as exc:
            raise CacheUnavailableError(str(exc)) from exc
        if value is None:
            return None
        return value.decode() if isinstance(value, bytes) else value

    async def set(self, key: str, value: str, ttl: int) -> None:
        from redis.exceptions import RedisError

        try:
            await self._client.set(self._key(key), value, ex=ttl)
        except (RedisError, OSError) as exc:
            raise CacheUnavailableError(str(exc)) from exc

    async def delete(self, *keys: str) -> None:
        from redis.exceptions import RedisError

        if not keys:
            return
        try:
            await self._client.delete(*(self._key(k) for k in keys))
        except (RedisError, OSError) as exc:
            raise CacheUnavailableError(str(exc)) from exc

    async def clear(self) -> None:
        from redis.exceptions import RedisError

        try:
            batch: list[Any] = []
            async for key in self._client.scan_iter(match=f"{self._namespace}:*"):
                batch.append(key)
                if len(batch) >= 500:
                    await self._client.delete(*batch)
                    batch = []
            if batch:
                await self._client.delete(*batch)
        except (RedisError, OSError) as exc:
            raise CacheUnavailableError(str(exc)) from exc

    async def close(self) -> None:
        await self._client.aclose()


def load_backend(spec: str) -> type:
    """Import a backend class from a 'module:ClassName' string."""
    parts = spec.split(":")
    if len(parts) != 2:
        raise ValueError(
            f"Invalid backend spec '{spec}': must contain exactly one colon"
        )
    module_path, class_name = parts
    module = importlib.import_module(module_path)
    return getattr(module, class_name)


def create_cache_backend(config: CacheConfig) -> CacheBackend:
    """Instantiate a cache backend from configuration."""
    backend_type = config.backend

    if backend_type == "memory":
        return MemoryCache(namespace=config.namespace)

    if backend_type == "redis":
        return RedisCache(url=config.url, namespace=config.namespace)

    if ":" in backend_type:
        cls = load_backend(backend_type)
        return cls(url=config.url, namespace=config.namespace)

    raise ValueError(
        f"Unknown cache backend '{backend_type}'. "
        "Use 'memory', 'redis', or 'module:ClassName'."
    )
