from __future__ import annotations

import asyncio
import logging
import shutil
from pathlib import Path
from typing import Any, Dict, Optional

from time2eat_offline.cache.interfaces import Cache, CacheStorage, ensure_storable
from time2eat_offline.cache.io import (
    SchemaVersion,
    atomic_write_bytes,
    atomic_write_json,
    decode_entry,
    encode_entry,
    read_json_file,
)
from time2eat_offline.core.models import Request, Response, request_key
from time2eat_offline.core.utils import hash_bytes

logger = logging.getLogger(__name__)

PARTITIONS_FILE = "partitions.json"
INDEX_FILE = "index.json"
BODIES_DIR = "bodies"


def _partition_dir_name(name: str) -> str:
    return hash_bytes(name.encode("utf-8"))[:24]


class FileCache(Cache):
    """
    One partition on disk.

    Layout: index.json maps request keys to response metadata, response bodies
    live in bodies/<sha256> and are shared between entries with identical bodies.
    """

    def __init__(self, name: str, directory: Path) -> None:
        self.name = name
        self._dir = directory
        self._lock = asyncio.Lock()
        payload = read_json_file(self._index_path, default={"schema_version": SchemaVersion, "entries": {}})
        self._entries: Dict[str, Dict[str, Any]] = dict(payload.get("entries", {}))

    @property
    def _index_path(self) -> Path:
        return self._dir / INDEX_FILE

    def _body_path(self, body_hash: str) -> Path:
        return self._dir / BODIES_DIR / body_hash

    def _write_index(self) -> None:
        atomic_write_json(self._index_path, {"schema_version": SchemaVersion, "entries": self._entries})

    def _drop_body_if_unreferenced(self, body_hash: str) -> None:
        if any(entry.get("body_sha256") == body_hash for entry in self._entries.values()):
            return
        self._body_path(body_hash).unlink(missing_ok=True)

    async def get(self, request: Request) -> Optional[Response]:
        if request.method != "GET":
            return None
        entry = self._entries.get(request_key(request))
        if entry is None:
            return None
        body_path = self._body_path(entry["body_sha256"])
        try:
            body = body_path.read_bytes()
        except OSError:
            logger.warning("Cached body is missing, treating as a miss. cache=%s url=%s", self.name, request.url)
            return None
        return decode_entry(entry, body)

    async def put(self, request: Request, response: Response) -> None:
        ensure_storable(request)
        key = request_key(request)
        body_hash = hash_bytes(response.body)
        async with self._lock:
            body_path = self._body_path(body_hash)
            if not body_path.exists():
                atomic_write_bytes(body_path, response.body)
            previous = self._entries.get(key)
            self._entries[key] = encode_entry(response, body_hash)
            self._write_index()
            if previous is not None and previous.get("body_sha256") != body_hash:
                self._drop_body_if_unreferenced(previous["body_sha256"])

    async def delete(self, request: Request) -> bool:
        key = request_key(request)
        async with self._lock:
            previous = self._entries.pop(key, None)
            if previous is None:
                return False
            self._write_index()
            self._drop_body_if_unreferenced(previous["body_sha256"])
            return True

    async def list_keys(self) -> list[str]:
        return list(self._entries.keys())


class FileCacheStorage(CacheStorage):
    def __init__(self, root: Path | str) -> None:
        self._root = Path(root)
        self._lock = asyncio.Lock()
        self._open: Dict[str, FileCache] = {}
        payload = read_json_file(
            self._root / PARTITIONS_FILE,
            default={"schema_version": SchemaVersion, "partitions": []},
        )
        self._names: list[str] = [str(name) for name in payload.get("partitions", [])]

    def _write_partitions(self) -> None:
        atomic_write_json(
            self._root / PARTITIONS_FILE,
            {"schema_version": SchemaVersion, "partitions": self._names},
        )

    async def open(self, name: str) -> FileCache:
        async with self._lock:
            cache = self._open.get(name)
            if cache is not None:
                return cache
            if name not in self._names:
                self._names.append(name)
                self._write_partitions()
                logger.debug("Cache partition created. name=%s", name)
            cache = FileCache(name, self._root / _partition_dir_name(name))
            self._open[name] = cache
            return cache

    async def has(self, name: str) -> bool:
        return name in self._names

    async def delete(self, name: str) -> bool:
        async with self._lock:
            if name not in self._names:
                return False
            self._names.remove(name)
            self._open.pop(name, None)
            self._write_partitions()
            shutil.rmtree(self._root / _partition_dir_name(name), ignore_errors=True)
            return True

    async def keys(self) -> list[str]:
        return list(self._names)
