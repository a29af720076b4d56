from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional, Type

from time2eat_offline.agent.events import (
    ActivateEvent,
    ExtendableEvent,
    FetchEvent,
    InstallEvent,
    NotificationClickEvent,
    PushEvent,
    SyncEvent,
)
from time2eat_offline.agent.fetch_policy import FetchPolicy
from time2eat_offline.agent.lifecycle import CacheLifecycleManager
from time2eat_offline.agent.push import PushPresenter
from time2eat_offline.agent.sync import BackgroundSyncCoordinator
from time2eat_offline.cache.interfaces import CacheStorage
from time2eat_offline.config.models import AgentSettings, NotificationSettings
from time2eat_offline.core.models import Response
from time2eat_offline.errors import InstallError
from time2eat_offline.host.interfaces import Clients, Host, Notifier
from time2eat_offline.net.interfaces import Network
from time2eat_offline.queue.interfaces import OfflineQueue

logger = logging.getLogger(__name__)


class AgentState(str, Enum):
    PARSED = "parsed"
    INSTALLING = "installing"
    INSTALLED = "installed"
    ACTIVATING = "activating"
    ACTIVATED = "activated"
    REDUNDANT = "redundant"


class OfflineAgent:
    """
    Offline cache and sync agent.

    The host delivers events through dispatch(); each event kind maps to one
    handler, and dispatch() does not return until the handler and all work it
    registered with wait_until() have finished.
    """

    def __init__(
        self,
        *,
        config: AgentSettings,
        caches: CacheStorage,
        network: Network,
        queue: OfflineQueue,
        clients: Clients,
        notifier: Notifier,
        host: Host,
        notifications: NotificationSettings = NotificationSettings(),
    ) -> None:
        self._config = config
        self._state = AgentState.PARSED
        self.lifecycle = CacheLifecycleManager(
            config=config,
            caches=caches,
            network=network,
            clients=clients,
            host=host,
        )
        self.fetch_policy = FetchPolicy(config=config, caches=caches, network=network)
        self.sync = BackgroundSyncCoordinator(config=config, network=network, queue=queue)
        self.push = PushPresenter(
            settings=notifications,
            origin=config.origin,
            notifier=notifier,
            clients=clients,
        )
        self._handlers: Dict[Type[ExtendableEvent], Callable[[Any], Awaitable[Any]]] = {
            InstallEvent: self._on_install,
            ActivateEvent: self._on_activate,
            FetchEvent: self._on_fetch,
            SyncEvent: self._on_sync,
            PushEvent: self._on_push,
            NotificationClickEvent: self._on_notification_click,
        }

    @property
    def state(self) -> AgentState:
        return self._state

    @property
    def version(self) -> str:
        return self._config.version

    async def resume(self) -> bool:
        """Take over a generation installed by an earlier process, if its static partition exists."""
        if self._state is AgentState.ACTIVATED:
            return True
        if self._state is not AgentState.PARSED:
            return False
        if not await self.lifecycle.has_static_cache():
            return False
        self._state = AgentState.ACTIVATED
        logger.debug("Resumed installed agent generation. version=%s", self.version)
        return True

    async def dispatch(self, event: ExtendableEvent) -> Any:
        handler = self._handlers.get(type(event))
        if handler is None:
            raise TypeError(f"Unsupported agent event: {type(event).__name__}")
        try:
            return await handler(event)
        finally:
            await event.settle()

    async def _on_install(self, event: InstallEvent) -> None:
        if self._state is not AgentState.PARSED:
            raise RuntimeError(f"Agent cannot install from state={self._state.value}")
        self._state = AgentState.INSTALLING
        try:
            await self.lifecycle.on_install()
        except InstallError:
            self._state = AgentState.REDUNDANT
            logger.error("Agent installation failed, previous agent stays in control. version=%s", self.version)
            raise
        except BaseException:
            self._state = AgentState.REDUNDANT
            raise
        self._state = AgentState.INSTALLED

    async def _on_activate(self, event: ActivateEvent) -> None:
        if self._state is not AgentState.INSTALLED:
            raise RuntimeError(f"Agent cannot activate from state={self._state.value}")
        self._state = AgentState.ACTIVATING
        await self.lifecycle.on_activate()
        self._state = AgentState.ACTIVATED

    async def _on_fetch(self, event: FetchEvent) -> Optional[Response]:
        # Pages are only controlled once activation has claimed them.
        if self._state is not AgentState.ACTIVATED:
            return None
        return await self.fetch_policy.handle(event)

    async def _on_sync(self, event: SyncEvent) -> bool:
        return await self.sync.run(event.tag)

    async def _on_push(self, event: PushEvent):
        return await self.push.on_push(event.data)

    async def _on_notification_click(self, event: NotificationClickEvent):
        return await self.push.on_click(event.click)
