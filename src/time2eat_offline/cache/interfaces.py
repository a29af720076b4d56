from __future__ import annotations

from typing import Optional

from time2eat_offline.core.models import HTTP_SCHEMES, Request, Response


def ensure_storable(request: Request) -> None:
    """Only GET requests over http(s) may be written to a partition."""
    if request.method != "GET":
        raise ValueError(f"Only GET requests can be cached. method={request.method} url={request.url}")
    if request.scheme not in HTTP_SCHEMES:
        raise ValueError(f"Only http(s) requests can be cached. url={request.url}")


class Cache:
    """A single named partition mapping GET request keys to stored responses."""

    name: str

    async def get(self, request: Request) -> Optional[Response]:
        raise NotImplementedError

    async def put(self, request: Request, response: Response) -> None:
        raise NotImplementedError

    async def delete(self, request: Request) -> bool:
        raise NotImplementedError

    async def list_keys(self) -> list[str]:
        raise NotImplementedError

    async def put_all(self, entries: list[tuple[Request, Response]]) -> None:
        for request, _ in entries:
            ensure_storable(request)
        for request, response in entries:
            await self.put(request, response)


class CacheStorage:
    """The set of named partitions, searched as one logical space by match()."""

    async def open(self, name: str) -> Cache:
        """Return the partition called name, creating it if absent."""
        raise NotImplementedError

    async def has(self, name: str) -> bool:
        raise NotImplementedError

    async def delete(self, name: str) -> bool:
        raise NotImplementedError

    async def keys(self) -> list[str]:
        """Partition names in creation order."""
        raise NotImplementedError

    async def match(self, request: Request) -> Optional[Response]:
        if request.method != "GET":
            return None
        for name in await self.keys():
            cache = await self.open(name)
            response = await cache.get(request)
            if response is not None:
                return response
        return None
