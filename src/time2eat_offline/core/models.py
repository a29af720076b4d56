from __future__ import annotations

import json
import uuid
from dataclasses import dataclass, field, replace
from typing import Any, Literal, Mapping, Optional
from urllib.parse import urljoin, urlsplit, urlunsplit

from pydantic import BaseModel, ConfigDict, Field

from time2eat_offline.core.utils import format_rfc3339, utc_now

ResponseType = Literal["basic", "cors", "opaque", "error"]

HTTP_SCHEMES = ("http", "https")


def _normalize_headers(headers: Optional[Mapping[str, str]]) -> dict[str, str]:
    if not headers:
        return {}
    return {str(name).lower(): str(value) for name, value in headers.items()}


def strip_fragment(url: str) -> str:
    parts = urlsplit(url)
    if not parts.fragment:
        return url
    return urlunsplit((parts.scheme, parts.netloc, parts.path, parts.query, ""))


def resolve_url(base: str, url: str) -> str:
    """Resolve a manifest or endpoint URL against the application origin."""
    return strip_fragment(urljoin(base, url))


def origin_of(url: str) -> str:
    parts = urlsplit(url)
    return f"{parts.scheme}://{parts.netloc}".lower()


@dataclass(frozen=True, slots=True)
class Request:
    url: str
    method: str = "GET"
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""

    def __post_init__(self) -> None:
        object.__setattr__(self, "url", strip_fragment(self.url))
        object.__setattr__(self, "method", self.method.upper())
        object.__setattr__(self, "headers", _normalize_headers(self.headers))

    @classmethod
    def get(cls, url: str, *, accept: str = "*/*") -> Request:
        return cls(url=url, method="GET", headers={"accept": accept})

    @classmethod
    def post_json(cls, url: str, payload: Any) -> Request:
        return cls(
            url=url,
            method="POST",
            headers={"content-type": "application/json"},
            body=json.dumps(payload).encode("utf-8"),
        )

    @property
    def scheme(self) -> str:
        return urlsplit(self.url).scheme.lower()

    @property
    def accept(self) -> str:
        return self.headers.get("accept", "")


@dataclass(frozen=True, slots=True)
class Response:
    url: str = ""
    status: int = 200
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""
    type: ResponseType = "basic"
    status_text: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", _normalize_headers(self.headers))

    @classmethod
    def html(cls, markup: str, *, status: int = 200, url: str = "") -> Response:
        return cls(
            url=url,
            status=status,
            headers={"content-type": "text/html; charset=utf-8"},
            body=markup.encode("utf-8"),
        )

    @classmethod
    def empty(cls, status: int, *, url: str = "") -> Response:
        return cls(url=url, status=status, body=b"")

    @property
    def ok(self) -> bool:
        return 200 <= self.status <= 299

    @property
    def content_type(self) -> str:
        return self.headers.get("content-type", "")

    def clone(self) -> Response:
        return replace(self, headers=dict(self.headers))

    def text(self, encoding: str = "utf-8") -> str:
        return self.body.decode(encoding)

    def json(self) -> Any:
        return json.loads(self.body.decode("utf-8"))


def request_key(request: Request) -> str:
    return f"{request.method} {request.url}"


class OfflineOrder(BaseModel):
    """An order placed while offline, waiting for the next order sync."""

    model_config = ConfigDict(extra="allow")

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    queued_at: str = Field(default_factory=lambda: format_rfc3339(utc_now()))


class OfflineCart(BaseModel):
    model_config = ConfigDict(extra="allow")

    items: list[dict[str, Any]] = Field(default_factory=list)
    updated_at: str = Field(default_factory=lambda: format_rfc3339(utc_now()))


@dataclass(frozen=True, slots=True)
class NotificationAction:
    action: str
    title: str
    icon: str = ""


@dataclass(slots=True)
class NotificationOptions:
    body: str
    icon: str = ""
    badge: str = ""
    vibrate: list[int] = field(default_factory=list)
    data: dict[str, Any] = field(default_factory=dict)
    actions: list[NotificationAction] = field(default_factory=list)


@dataclass(slots=True)
class Notification:
    title: str
    options: NotificationOptions
    id: str = field(default_factory=lambda: uuid.uuid4().hex)


@dataclass(frozen=True, slots=True)
class NotificationClick:
    notification: Notification
    action: str = ""
