from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Optional

from time2eat_offline.core.models import NotificationClick, Request

logger = logging.getLogger(__name__)


@dataclass
class ExtendableEvent:
    """
    Base for every event the agent handles.

    Work a handler does not want to hold its result back for is registered
    with wait_until(); the dispatcher settles it before the event is done, so
    the host never tears the agent down in the middle of a cache write.
    """

    _lifetime: list[Awaitable[Any]] = field(default_factory=list, init=False, repr=False, compare=False)

    def wait_until(self, awaitable: Awaitable[Any]) -> None:
        self._lifetime.append(awaitable)

    async def settle(self) -> None:
        # Awaited work may extend the lifetime again, so drain until empty.
        while self._lifetime:
            batch = list(self._lifetime)
            self._lifetime.clear()
            results = await asyncio.gather(*batch, return_exceptions=True)
            for result in results:
                if isinstance(result, asyncio.CancelledError):
                    raise result
                if isinstance(result, BaseException):
                    logger.error(
                        "Extended event work failed. event=%s",
                        type(self).__name__,
                        exc_info=(type(result), result, result.__traceback__),
                    )


@dataclass
class InstallEvent(ExtendableEvent):
    pass


@dataclass
class ActivateEvent(ExtendableEvent):
    pass


@dataclass
class FetchEvent(ExtendableEvent):
    request: Request


@dataclass
class SyncEvent(ExtendableEvent):
    tag: str


@dataclass
class PushEvent(ExtendableEvent):
    data: Optional[bytes] = None


@dataclass
class NotificationClickEvent(ExtendableEvent):
    click: NotificationClick
