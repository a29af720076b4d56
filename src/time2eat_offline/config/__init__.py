"""Configuration models and loaders."""

from time2eat_offline.config.loader import YamlConfigLoader
from time2eat_offline.config.models import AppConfig, ConfigLoadRequest

__all__ = ["AppConfig", "ConfigLoadRequest", "YamlConfigLoader"]
