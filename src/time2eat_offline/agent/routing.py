from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlsplit

from time2eat_offline.config.models import DynamicCacheSettings


@dataclass(frozen=True, slots=True)
class DynamicCacheRule:
    """Decides which network responses are copied into the dynamic partition."""

    path_prefixes: tuple[str, ...] = ()
    image_segments: tuple[str, ...] = ()
    catalog_patterns: tuple[str, ...] = ()

    @classmethod
    def from_settings(cls, settings: DynamicCacheSettings) -> DynamicCacheRule:
        return cls(
            path_prefixes=tuple(settings.path_prefixes),
            image_segments=tuple(settings.image_segments),
            catalog_patterns=tuple(settings.catalog_patterns),
        )

    def matches(self, url: str) -> bool:
        path = urlsplit(url).path or "/"
        if any(path.startswith(prefix) for prefix in self.path_prefixes):
            return True
        if any(segment in url for segment in self.image_segments):
            return True
        return any(pattern in url for pattern in self.catalog_patterns)
