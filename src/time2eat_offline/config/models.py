from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field


class FileRotationSettings(BaseModel):
    """
    Date-based rotation settings (daily).

    This maps cleanly to Python's standard library TimedRotatingFileHandler behavior.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    backup_count: int


class FileLoggingSettings(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    path: str
    rotation: FileRotationSettings


class LoggingSettings(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    level: str
    file: FileLoggingSettings


class DynamicCacheSettings(BaseModel):
    """URL classification for opportunistic runtime caching."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    # Path prefixes for API and authenticated-area routes
    path_prefixes: Sequence[str] = (
        "/api/",
        "/dashboard",
        "/customer/",
        "/vendor/",
        "/rider/",
        "/admin/",
    )
    # Any URL containing one of these segments is an image asset
    image_segments: Sequence[str] = ("/public/images/",)
    # Catalog and menu API patterns
    catalog_patterns: Sequence[str] = ("/api/menu/", "/api/restaurants/")


class EndpointSettings(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    orders: str = "/api/orders"
    cart_sync: str = "/api/cart/sync"


class AgentSettings(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    cache_prefix: str = "time2eat"
    version: str
    origin: str

    static_manifest: Sequence[str]
    dynamic: DynamicCacheSettings = Field(default_factory=DynamicCacheSettings)

    offline_page_url: str = "/offline.html"
    offline_image_url: str = "/public/images/offline.png"
    offline_html: str = "<h1>Offline</h1><p>Please check your internet connection.</p>"

    endpoints: EndpointSettings = Field(default_factory=EndpointSettings)

    # None disables the client-side timeout; a hung request only blocks itself.
    fetch_timeout_seconds: Optional[float] = None

    @property
    def static_cache_name(self) -> str:
        return f"{self.cache_prefix}-static-v{self.version}"

    @property
    def dynamic_cache_name(self) -> str:
        return f"{self.cache_prefix}-dynamic-v{self.version}"


class StorageSettings(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    cache_dir: str = "data/cache"
    queue_path: str = "data/queue/offline-queue.json"


class NotificationActionSettings(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    action: str
    title: str
    icon: str = ""


class NotificationSettings(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    title: str = "Time2Eat"
    body: str = "Your order status has been updated!"
    icon: str = "/public/images/icon-192x192.png"
    badge: str = "/public/images/badge-72x72.png"
    vibrate: Sequence[int] = (200, 100, 200)
    primary_key: int = 1
    actions: Sequence[NotificationActionSettings] = (
        NotificationActionSettings(action="view", title="View Order", icon="/public/images/view-icon.png"),
        NotificationActionSettings(action="close", title="Close", icon="/public/images/close-icon.png"),
    )
    view_url: str = "/dashboard"
    default_url: str = "/"


class SyncSettings(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    # Attempts before the deferred-sync scheduler gives up on a tag
    max_attempts: int = 3


class AppConfig(BaseModel):
    """Effective runtime configuration after applying all precedence rules."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    logging: LoggingSettings
    agent: AgentSettings
    storage: StorageSettings = Field(default_factory=StorageSettings)
    notifications: NotificationSettings = Field(default_factory=NotificationSettings)
    sync: SyncSettings = Field(default_factory=SyncSettings)


@dataclass(frozen=True, slots=True)
class ConfigLoadRequest:
    """
    Optional inputs for a configuration loader.

    Implementations may use these to control where configuration is read from.
    """

    yaml_path: str = "data/config/config.yaml"
    env_prefix: str = "T2E__"
    dotenv_path: Optional[str] = "data/.env"
