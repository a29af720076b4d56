from __future__ import annotations

from time2eat_offline.core.models import Request, Response


class Network:
    async def fetch(self, request: Request) -> Response:
        """
        Perform the request and return whatever response the server produced.

        Non-2xx statuses are returned, not raised. NetworkError is raised only
        when no response could be obtained at all.
        """
        raise NotImplementedError
