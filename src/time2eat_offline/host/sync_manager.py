from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SyncRegistration:
    tag: str
    attempts: int = 0
    last_error: str = ""


class SyncManager:
    """
    Deferred-sync scheduler standing in for the platform's background sync.

    Tags are registered when a mutation could not reach the server and are
    dispatched by run_pending() once connectivity is back. A tag whose sync
    fails stays registered for the next run until max_attempts is reached.
    Giving up on a tag never touches the offline queue itself.
    """

    def __init__(self, dispatch: Callable[[str], Awaitable[object]], *, max_attempts: int = 3) -> None:
        self._dispatch = dispatch
        self._max_attempts = max(1, int(max_attempts))
        self._registrations: Dict[str, SyncRegistration] = {}

    def register(self, tag: str) -> None:
        if tag in self._registrations:
            return
        self._registrations[tag] = SyncRegistration(tag=tag)
        logger.debug("Background sync registered. tag=%s", tag)

    def pending(self) -> list[SyncRegistration]:
        return list(self._registrations.values())

    async def run_pending(self) -> Dict[str, bool]:
        results: Dict[str, bool] = {}
        for registration in list(self._registrations.values()):
            try:
                await self._dispatch(registration.tag)
            except Exception as e:
                registration.attempts += 1
                registration.last_error = str(e)
                results[registration.tag] = False
                if registration.attempts >= self._max_attempts:
                    self._registrations.pop(registration.tag, None)
                    logger.warning(
                        "Background sync abandoned after retries. tag=%s attempts=%d error=%s",
                        registration.tag,
                        registration.attempts,
                        e,
                    )
                else:
                    logger.info(
                        "Background sync failed, will retry. tag=%s attempts=%d error=%s",
                        registration.tag,
                        registration.attempts,
                        e,
                    )
                continue
            self._registrations.pop(registration.tag, None)
            results[registration.tag] = True
        return results
