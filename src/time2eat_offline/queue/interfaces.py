from __future__ import annotations

from typing import Optional

from time2eat_offline.core.models import OfflineCart, OfflineOrder


class OfflineQueue:
    """
    Durable storage for mutations attempted while offline.

    Orders are kept in enqueue order and are removed only by remove_order(),
    which the order sync calls after the server confirmed receipt. The cart is
    a single pending snapshot that replaces any previous one.
    """

    async def list_orders(self) -> list[OfflineOrder]:
        raise NotImplementedError

    async def enqueue_order(self, order: OfflineOrder) -> OfflineOrder:
        raise NotImplementedError

    async def remove_order(self, order_id: str) -> bool:
        raise NotImplementedError

    async def get_cart(self) -> Optional[OfflineCart]:
        raise NotImplementedError

    async def save_cart(self, cart: OfflineCart) -> None:
        raise NotImplementedError

    async def clear_cart(self) -> None:
        raise NotImplementedError
