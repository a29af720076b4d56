from __future__ import annotations

import asyncio
import logging
from typing import Optional

import aiohttp

from time2eat_offline.config.models import AgentSettings
from time2eat_offline.core.models import Request, Response, origin_of, resolve_url
from time2eat_offline.errors import NetworkError
from time2eat_offline.net.interfaces import Network

logger = logging.getLogger(__name__)


class AiohttpNetwork(Network):
    def __init__(self, config: AgentSettings) -> None:
        self._config = config
        self._origin = origin_of(config.origin)
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self) -> AiohttpNetwork:
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.stop()

    async def start(self) -> None:
        """Open the shared client session."""
        if self._session is not None:
            return
        timeout = aiohttp.ClientTimeout(total=self._config.fetch_timeout_seconds)
        self._session = aiohttp.ClientSession(timeout=timeout)

    async def stop(self) -> None:
        """Close the shared client session."""
        if self._session is not None:
            await self._session.close()
            self._session = None

    async def fetch(self, request: Request) -> Response:
        url = resolve_url(self._config.origin, request.url)

        should_close = False
        if self._session is None:
            await self.start()
            should_close = True

        try:
            assert self._session is not None
            logger.debug("net.fetch_start method=%s url=%s", request.method, url)
            async with self._session.request(
                request.method,
                url,
                headers=dict(request.headers),
                data=request.body or None,
            ) as response:
                body = await response.read()
                final_url = str(response.url)
                return Response(
                    url=final_url,
                    status=response.status,
                    status_text=response.reason or "",
                    headers={name: value for name, value in response.headers.items()},
                    body=body,
                    type="basic" if origin_of(final_url) == self._origin else "cors",
                )
        except asyncio.TimeoutError as e:
            logger.debug("net.fetch_timeout url=%s", url)
            raise NetworkError(url, e) from e
        except aiohttp.ClientError as e:
            logger.debug("net.fetch_failed url=%s error=%s", url, e)
            raise NetworkError(url, e) from e
        finally:
            if should_close:
                await self.stop()
