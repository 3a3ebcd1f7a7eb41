"""
Caching of introspection results.

Meta models never cache; the introspector keeps successful enumerations
in cachetools TTL caches so repeated requests for the same container do not
re-run catalog queries. Failed enumerations are never cached.
"""
import functools
import logging
import threading
from typing import Any

import cachetools

logger = logging.getLogger(__name__)

_MISSING = object()


class Cache:
    """Cache manager for introspection results.

    Thread-safe singleton that manages all TTL caches.
    """

    _instance = None
    _caches: dict[str, cachetools.TTLCache] = {}
    _lock = threading.RLock()

    @classmethod
    def get_instance(cls) -> 'Cache':
        """Get singleton instance."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    def get_cache(self, name: str, maxsize: int = 100, ttl: int = 300) -> cachetools.TTLCache:
        """Get or create a TTL cache with the given name.

        Args:
            name: Name of the cache
            maxsize: Maximum cache size
            ttl: Time-to-live in seconds

        Returns
            TTLCache instance
        """
        if name not in self._caches:
            with self._lock:
                if name not in self._caches:
                    self._caches[name] = cachetools.TTLCache(maxsize=maxsize, ttl=ttl)
        return self._caches[name]

    def clear_all(self) -> None:
        """Clear all managed caches."""
        with self._lock:
            for cache in self._caches.values():
                cache.clear()

    def clear_for_data_source(self, data_source: Any) -> None:
        """Drop every cached entry of one data source, e.g. on refresh.
        """
        with self._lock:
            for cache in self._caches.values():
                keys_to_clear = [key for key in list(cache.keys()) if key[0] == data_source.uid]
                for key in keys_to_clear:
                    cache.pop(key, None)
                    logger.debug(f'Cleared cache entry {key}')


def _create_cache_key(data_source: Any, container_name: str,
                      method_args: tuple, method_kwargs: dict) -> tuple:
    """Create a deterministic cache key from arguments.

    Data sources are told apart by their `uid`, never by display name, and
    filter arguments keep their case.
    """
    args_str = ':'.join(repr(arg) for arg in method_args)
    kwargs_str = ':'.join(
        f'{k}={repr(v)}' for k, v in sorted(method_kwargs.items())
        if k != 'bypass_cache'
    )
    return (data_source.uid, container_name, args_str, kwargs_str)


def cacheable_introspection(cache_name: str, ttl: int = 300, maxsize: int = 50):
    """Decorator for caching introspector results per container.

    Cached methods take the container as first argument and accept a
    `bypass_cache` keyword to force a fresh catalog read. The catalog read
    itself runs outside the lock.

    Args:
        cache_name: Base name for the cache
        ttl: Time-to-live in seconds
        maxsize: Maximum cache size
    """
    def decorator(method):
        @functools.wraps(method)
        def wrapper(self, container, *args, bypass_cache=False, **kwargs):
            if bypass_cache:
                logger.debug(f'Bypassing cache for {method.__name__}({container.name})')
                return method(self, container, *args, **kwargs)

            manager = Cache.get_instance()
            cache = manager.get_cache(f'{cache_name}_{method.__name__}', ttl=ttl, maxsize=maxsize)
            cache_key = _create_cache_key(self.data_source, container.name, args, kwargs)

            with manager._lock:
                result = cache.get(cache_key, _MISSING)
            if result is not _MISSING:
                logger.debug(f'Cache hit for {method.__name__}({container.name})')
                return result

            logger.debug(f'Cache miss for {method.__name__}({container.name})')
            result = method(self, container, *args, **kwargs)
            with manager._lock:
                cache[cache_key] = result
            return result

        return wrapper
    return decorator
