from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict

from time2eat_offline.core.models import Response

logger = logging.getLogger(__name__)

SchemaVersion = 1


def atomic_write_json(path: Path, payload: dict) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    tmp_path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
    tmp_path.replace(path)


def atomic_write_bytes(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    tmp_path.write_bytes(data)
    tmp_path.replace(path)


def read_json_file(path: Path, *, default: dict) -> dict:
    """Read a versioned JSON document, falling back to default on any mismatch."""
    if not path.exists():
        return default
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except Exception:
        logger.exception("Failed to read cache metadata file, starting fresh. path=%s", path)
        return default
    if not isinstance(payload, dict):
        logger.warning("Cache metadata file is not a mapping, starting fresh. path=%s", path)
        return default
    version = payload.get("schema_version", SchemaVersion)
    if version != SchemaVersion:
        logger.warning(
            "Cache schema version mismatch, starting fresh. path=%s expected=%s actual=%s",
            path,
            SchemaVersion,
            version,
        )
        return default
    return payload


def encode_entry(response: Response, body_hash: str) -> Dict[str, Any]:
    return {
        "url": response.url,
        "status": response.status,
        "status_text": response.status_text,
        "headers": dict(response.headers),
        "type": response.type,
        "body_sha256": body_hash,
    }


def decode_entry(payload: Dict[str, Any], body: bytes) -> Response:
    return Response(
        url=payload.get("url", ""),
        status=int(payload["status"]),
        status_text=payload.get("status_text", ""),
        headers=payload.get("headers", {}),
        type=payload.get("type", "basic"),
        body=body,
    )
