"""Simple TTL cache helpers for rarely changing reference data."""
from __future__ import annotations

from typing import Callable, Generic, Optional, TypeVar

from cachetools import TTLCache

T = TypeVar("T")


class SimpleTTLCache(Generic[T]):
    def __init__(self, ttl: int, maxsize: int = 32) -> None:
        self._cache: TTLCache[str, T] = TTLCache(maxsize=maxsize, ttl=ttl)

    def get(self, key: str) -> Optional[T]:
        return self._cache.get(key)

    def set(self, key: str, value: T) -> None:
        self._cache[key] = value

    def get_or_load(self, key: str, loader: Callable[[], T]) -> T:
        cached = self._cache.get(key)
        if cached is None:
            cached = loader()
            self._cache[key] = cached
        return cached

    def pop(self, key: str) -> None:
        self._cache.pop(key, None)

    def clear(self) -> None:
        self._cache.clear()
