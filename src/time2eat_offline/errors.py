from __future__ import annotations

from typing import Optional, Sequence


class AgentError(Exception):
    """Base class for errors raised by the offline agent."""


class NetworkError(AgentError):
    """The request could not complete (no response was received)."""

    def __init__(self, url: str, cause: Optional[BaseException] = None) -> None:
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Network request failed for {url}{detail}")
        self.url = url
        self.cause = cause


class InstallError(AgentError):
    """Precaching the static manifest failed, so the agent must not activate."""

    def __init__(self, failed_urls: Sequence[str]) -> None:
        super().__init__(f"Failed to precache {len(failed_urls)} manifest URL(s): {', '.join(failed_urls)}")
        self.failed_urls = list(failed_urls)


class SyncError(AgentError):
    """A background sync task left at least one record queued."""

    def __init__(self, tag: str, failed_ids: Sequence[str] = ()) -> None:
        message = f"Background sync failed. tag={tag}"
        if failed_ids:
            message += f" failed_ids={','.join(failed_ids)}"
        super().__init__(message)
        self.tag = tag
        self.failed_ids = list(failed_ids)


__all__ = ["AgentError", "InstallError", "NetworkError", "SyncError"]
