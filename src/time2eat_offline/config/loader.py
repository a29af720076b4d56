from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import Any, Mapping, MutableMapping, Sequence

import yaml
from dotenv import load_dotenv

from time2eat_offline.config.models import AppConfig, ConfigLoadRequest

logger = logging.getLogger(__name__)

DEFAULT_EXAMPLE_CONFIG = Path("examples/config.yaml")

# Subdirectories created next to data/config/ for the file-backed stores and logs.
DATA_SUBDIRS = ("config", "cache", "queue", "logs")


def _bootstrap_from_example(target: Path, example: Path) -> None:
    if target.exists() or not example.exists():
        return
    target.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(example, target)
    logger.info("Created config file from example. path=%s example=%s", target, example)


def _prepare_data_dirs(yaml_path: Path) -> None:
    """Create the data/ tree when the config lives at the conventional data/config/ location."""
    if yaml_path.parent.name != "config":
        return
    data_root = yaml_path.parent.parent
    for name in DATA_SUBDIRS:
        (data_root / name).mkdir(parents=True, exist_ok=True)


def _read_yaml_mapping(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Top-level YAML must be a mapping, got: {type(data).__name__}")
    return data


def _override_segments(name: str, prefix: str) -> Sequence[str]:
    segments = [part.lower() for part in name[len(prefix) :].split("__") if part]
    if not segments:
        raise ValueError(f"Invalid environment variable override name: {name}")
    return segments


def _resolve_parent(config: MutableMapping[str, Any], segments: Sequence[str]) -> MutableMapping[str, Any]:
    dotted = ".".join(segments)
    node: MutableMapping[str, Any] = config
    for segment in segments[:-1]:
        if segment not in node:
            raise KeyError(f"Unknown configuration key path: {dotted}")
        child = node[segment]
        if not isinstance(child, dict):
            raise TypeError(f"Configuration key path does not point to a mapping: {dotted}")
        node = child
    if segments[-1] not in node:
        raise KeyError(f"Unknown configuration key path: {dotted}")
    return node


def _coerce_override(current: Any, raw: str, dotted: str) -> Any:
    # Scalars are left as strings for pydantic; lists and mappings (the static
    # manifest, dynamic prefixes) are given as YAML flow values.
    if not isinstance(current, (list, dict)):
        return raw
    value = yaml.safe_load(raw)
    if not isinstance(value, type(current)):
        raise TypeError(f"Override for {dotted} must be a YAML {type(current).__name__}, got: {raw!r}")
    return value


def _apply_env_overrides(config: MutableMapping[str, Any], env: Mapping[str, str], prefix: str) -> None:
    for name in sorted(env):
        if not name.startswith(prefix):
            continue
        segments = _override_segments(name, prefix)
        parent = _resolve_parent(config, segments)
        dotted = ".".join(segments)
        parent[segments[-1]] = _coerce_override(parent[segments[-1]], env[name], dotted)
        logger.debug("Applied environment override. key=%s", dotted)


class YamlConfigLoader:
    """Builds an AppConfig from YAML, an optional .env file and prefixed environment variables."""

    def __init__(self, example_path: Path = DEFAULT_EXAMPLE_CONFIG) -> None:
        self._example_path = example_path

    async def load(self, request: ConfigLoadRequest = ConfigLoadRequest()) -> AppConfig:
        yaml_path = Path(request.yaml_path)
        _prepare_data_dirs(yaml_path)
        _bootstrap_from_example(yaml_path, self._example_path)
        config = _read_yaml_mapping(yaml_path)

        if request.dotenv_path is not None and Path(request.dotenv_path).exists():
            load_dotenv(dotenv_path=request.dotenv_path, override=False)

        _apply_env_overrides(config, os.environ, request.env_prefix)
        return AppConfig.model_validate(config)
