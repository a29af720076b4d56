from __future__ import annotations

import hashlib
from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_rfc3339(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def epoch_millis(dt: datetime) -> int:
    return int(dt.timestamp() * 1000)


def hash_bytes(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()
