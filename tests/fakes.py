from __future__ import annotations

from typing import Dict, Optional, Union

from time2eat_offline.cache.memory import MemoryCache, MemoryCacheStorage
from time2eat_offline.config.models import AgentSettings
from time2eat_offline.core.models import Request, Response
from time2eat_offline.errors import NetworkError
from time2eat_offline.net.interfaces import Network

ORIGIN = "https://time2eat.test"

Route = Union[Response, Exception]


def make_settings(**overrides) -> AgentSettings:
    values = {
        "version": "1.0.0",
        "origin": ORIGIN,
        "static_manifest": ["/", "/public/css/app.css", "/offline.html"],
    }
    values.update(overrides)
    return AgentSettings(**values)


def page(url: str, body: str = "<p>ok</p>", *, status: int = 200, type: str = "basic") -> Response:
    return Response(
        url=url,
        status=status,
        headers={"Content-Type": "text/html; charset=utf-8"},
        body=body.encode("utf-8"),
        type=type,
    )


class FakeNetwork(Network):
    """Serves canned responses keyed by (method, url); anything else fails like a dropped connection."""

    def __init__(self, routes: Optional[Dict[str, Route]] = None) -> None:
        self.routes: Dict[str, Route] = {}
        for url, route in (routes or {}).items():
            self.add("GET", url, route)
        self.calls: list[Request] = []
        self.offline = False

    def add(self, method: str, url: str, route: Route) -> None:
        self.routes[f"{method.upper()} {url}"] = route

    def calls_to(self, url: str) -> list[Request]:
        return [request for request in self.calls if request.url == url]

    async def fetch(self, request: Request) -> Response:
        self.calls.append(request)
        if self.offline:
            raise NetworkError(request.url, ConnectionError("offline"))
        route = self.routes.get(f"{request.method} {request.url}")
        if route is None:
            raise NetworkError(request.url, ConnectionError("no route"))
        if isinstance(route, Exception):
            raise route
        return route


class BrokenCache(MemoryCache):
    def __init__(self, name: str, fail_on: Optional[str] = None) -> None:
        super().__init__(name)
        self.fail_on = fail_on

    async def put(self, request: Request, response: Response) -> None:
        if self.fail_on is None or request.url == self.fail_on:
            raise OSError("quota exceeded")
        await super().put(request, response)


class BrokenWritesCacheStorage(MemoryCacheStorage):
    """Partitions whose writes fail, for every URL or only for ``fail_on``."""

    def __init__(self, fail_on: Optional[str] = None) -> None:
        super().__init__()
        self.fail_on = fail_on

    async def open(self, name: str) -> MemoryCache:
        cache = self._caches.get(name)
        if cache is None:
            cache = BrokenCache(name, self.fail_on)
            self._caches[name] = cache
        return cache


class AgentHarness:
    def __init__(
        self,
        network: FakeNetwork,
        *,
        settings: Optional[AgentSettings] = None,
        caches: Optional[MemoryCacheStorage] = None,
    ) -> None:
        # Imported here so the cache and network fakes stay usable without the agent package.
        from time2eat_offline.agent import OfflineAgent
        from time2eat_offline.host.local import LocalClients, LocalHost, LoggingNotifier
        from time2eat_offline.queue.memory import MemoryOfflineQueue

        self.settings = settings or make_settings()
        self.network = network
        self.caches = caches if caches is not None else MemoryCacheStorage()
        self.queue = MemoryOfflineQueue()
        self.clients = LocalClients(origin=ORIGIN)
        self.notifier = LoggingNotifier()
        self.host = LocalHost()
        self.agent = OfflineAgent(
            config=self.settings,
            caches=self.caches,
            network=network,
            queue=self.queue,
            clients=self.clients,
            notifier=self.notifier,
            host=self.host,
        )

    async def install_and_activate(self) -> None:
        from time2eat_offline.agent import ActivateEvent, InstallEvent

        await self.agent.dispatch(InstallEvent())
        await self.agent.dispatch(ActivateEvent())


def manifest_network(settings: Optional[AgentSettings] = None) -> FakeNetwork:
    settings = settings or make_settings()
    network = FakeNetwork()
    for path in settings.static_manifest:
        url = f"{ORIGIN}{path}"
        network.add("GET", url, page(url, f"<p>{path}</p>"))
    return network
