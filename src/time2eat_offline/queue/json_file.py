from __future__ import annotations

import asyncio
import json
import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from time2eat_offline.cache.io import atomic_write_json
from time2eat_offline.core.models import OfflineCart, OfflineOrder
from time2eat_offline.core.utils import hash_bytes, utc_now
from time2eat_offline.queue.interfaces import OfflineQueue

logger = logging.getLogger(__name__)

QueueSchemaVersion = 1


@dataclass(slots=True)
class QueueState:
    orders: list[OfflineOrder] = field(default_factory=list)
    cart: Optional[OfflineCart] = None


def encode_queue(state: QueueState) -> dict:
    return {
        "schema_version": QueueSchemaVersion,
        "orders": [order.model_dump(mode="json") for order in state.orders],
        "cart": state.cart.model_dump(mode="json") if state.cart is not None else None,
    }


def decode_queue(payload: dict) -> QueueState:
    version = payload.get("schema_version")
    if version != QueueSchemaVersion:
        raise ValueError(f"Unsupported offline queue schema version: {version}")
    orders = [OfflineOrder.model_validate(item) for item in payload.get("orders") or []]
    cart_payload = payload.get("cart")
    cart = OfflineCart.model_validate(cart_payload) if cart_payload is not None else None
    return QueueState(orders=orders, cart=cart)


class JsonFileOfflineQueue(OfflineQueue):
    """
    Offline queue persisted as a single JSON document.

    Every operation re-reads the file under a lock and writes it back atomically,
    so a crash between two calls never loses a confirmed enqueue.
    """

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)
        self._lock = asyncio.Lock()

    def _backup_unreadable(self) -> None:
        # Backups are named by time and content digest, so a later corruption never
        # replaces an earlier backup and re-reading the same bad file adds nothing.
        digest = hash_bytes(self._path.read_bytes())[:12]
        existing = sorted(self._path.parent.glob(f"{self._path.name}.corrupt-*-{digest}"))
        if existing:
            logger.warning(
                "Offline queue file could not be decoded and is already backed up. path=%s backup=%s",
                self._path,
                existing[-1],
            )
            return
        stamp = utc_now().strftime("%Y%m%dT%H%M%S%fZ")
        backup_path = self._path.with_name(f"{self._path.name}.corrupt-{stamp}-{digest}")
        shutil.copyfile(self._path, backup_path)
        logger.warning(
            "Offline queue file could not be decoded and was backed up. path=%s backup=%s",
            self._path,
            backup_path,
        )

    def _load(self) -> QueueState:
        if not self._path.exists():
            return QueueState()
        try:
            payload = json.loads(self._path.read_text(encoding="utf-8"))
            if not isinstance(payload, dict):
                raise ValueError(f"Top-level JSON must be an object, got: {type(payload).__name__}")
            return decode_queue(payload)
        except (ValueError, ValidationError):
            logger.exception("Failed to read offline queue, starting empty. path=%s", self._path)
            self._backup_unreadable()
            return QueueState()

    def _save(self, state: QueueState) -> None:
        atomic_write_json(self._path, encode_queue(state))

    async def list_orders(self) -> list[OfflineOrder]:
        async with self._lock:
            return self._load().orders

    async def enqueue_order(self, order: OfflineOrder) -> OfflineOrder:
        async with self._lock:
            state = self._load()
            if any(existing.id == order.id for existing in state.orders):
                raise ValueError(f"Order is already queued. id={order.id}")
            state.orders.append(order)
            self._save(state)
        logger.info("Order queued for background sync. id=%s", order.id)
        return order

    async def remove_order(self, order_id: str) -> bool:
        async with self._lock:
            state = self._load()
            remaining = [order for order in state.orders if order.id != order_id]
            if len(remaining) == len(state.orders):
                return False
            state.orders = remaining
            self._save(state)
            return True

    async def get_cart(self) -> Optional[OfflineCart]:
        async with self._lock:
            return self._load().cart

    async def save_cart(self, cart: OfflineCart) -> None:
        async with self._lock:
            state = self._load()
            state.cart = cart
            self._save(state)

    async def clear_cart(self) -> None:
        async with self._lock:
            state = self._load()
            if state.cart is None:
                return
            state.cart = None
            self._save(state)
