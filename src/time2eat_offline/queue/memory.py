from __future__ import annotations

from typing import Optional

from time2eat_offline.core.models import OfflineCart, OfflineOrder
from time2eat_offline.queue.interfaces import OfflineQueue


class MemoryOfflineQueue(OfflineQueue):
    def __init__(self) -> None:
        self._orders: list[OfflineOrder] = []
        self._cart: Optional[OfflineCart] = None

    async def list_orders(self) -> list[OfflineOrder]:
        return [order.model_copy(deep=True) for order in self._orders]

    async def enqueue_order(self, order: OfflineOrder) -> OfflineOrder:
        if any(existing.id == order.id for existing in self._orders):
            raise ValueError(f"Order is already queued. id={order.id}")
        self._orders.append(order.model_copy(deep=True))
        return order

    async def remove_order(self, order_id: str) -> bool:
        for index, order in enumerate(self._orders):
            if order.id == order_id:
                del self._orders[index]
                return True
        return False

    async def get_cart(self) -> Optional[OfflineCart]:
        return self._cart.model_copy(deep=True) if self._cart is not None else None

    async def save_cart(self, cart: OfflineCart) -> None:
        self._cart = cart.model_copy(deep=True)

    async def clear_cart(self) -> None:
        self._cart = None
