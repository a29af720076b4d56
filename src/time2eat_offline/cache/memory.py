from __future__ import annotations

from typing import Dict, Optional

from time2eat_offline.cache.interfaces import Cache, CacheStorage, ensure_storable
from time2eat_offline.core.models import Request, Response, request_key


class MemoryCache(Cache):
    def __init__(self, name: str) -> None:
        self.name = name
        self._entries: Dict[str, Response] = {}

    async def get(self, request: Request) -> Optional[Response]:
        if request.method != "GET":
            return None
        response = self._entries.get(request_key(request))
        return response.clone() if response is not None else None

    async def put(self, request: Request, response: Response) -> None:
        ensure_storable(request)
        self._entries[request_key(request)] = response.clone()

    async def delete(self, request: Request) -> bool:
        return self._entries.pop(request_key(request), None) is not None

    async def list_keys(self) -> list[str]:
        return list(self._entries.keys())


class MemoryCacheStorage(CacheStorage):
    """Process-local partitions, for tests and hosts without durable storage."""

    def __init__(self) -> None:
        self._caches: Dict[str, MemoryCache] = {}

    async def open(self, name: str) -> MemoryCache:
        cache = self._caches.get(name)
        if cache is None:
            cache = MemoryCache(name)
            self._caches[name] = cache
        return cache

    async def has(self, name: str) -> bool:
        return name in self._caches

    async def delete(self, name: str) -> bool:
        return self._caches.pop(name, None) is not None

    async def keys(self) -> list[str]:
        return list(self._caches.keys())
