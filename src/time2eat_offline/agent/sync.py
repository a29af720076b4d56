from __future__ import annotations

import logging
from typing import Awaitable, Callable, Dict

from time2eat_offline.config.models import AgentSettings
from time2eat_offline.core.models import OfflineOrder, Request, resolve_url
from time2eat_offline.errors import NetworkError, SyncError
from time2eat_offline.net.interfaces import Network
from time2eat_offline.queue.interfaces import OfflineQueue

logger = logging.getLogger(__name__)

ORDER_SYNC_TAG = "order-sync"
CART_SYNC_TAG = "cart-sync"


class BackgroundSyncCoordinator:
    """
    Flushes the offline queue when the host signals that connectivity is back.

    A task raises SyncError when anything stays queued, which is the host's cue
    to schedule another attempt. Records leave the queue only after the server
    answered with a 2xx status.
    """

    def __init__(self, *, config: AgentSettings, network: Network, queue: OfflineQueue) -> None:
        self._config = config
        self._network = network
        self._queue = queue
        self._tasks: Dict[str, Callable[[], Awaitable[None]]] = {
            ORDER_SYNC_TAG: self.sync_orders,
            CART_SYNC_TAG: self.sync_cart,
        }

    @property
    def tags(self) -> tuple[str, ...]:
        return tuple(self._tasks.keys())

    async def run(self, tag: str) -> bool:
        task = self._tasks.get(tag)
        if task is None:
            logger.warning("Ignoring unknown background sync tag. tag=%s", tag)
            return False
        logger.info("Background sync started. tag=%s", tag)
        await task()
        logger.info("Background sync finished. tag=%s", tag)
        return True

    async def _post_order(self, order: OfflineOrder) -> bool:
        url = resolve_url(self._config.origin, self._config.endpoints.orders)
        try:
            response = await self._network.fetch(Request.post_json(url, order.model_dump(mode="json")))
        except NetworkError as e:
            logger.error("Failed to sync order. id=%s error=%s", order.id, e)
            return False
        if not response.ok:
            logger.error("Order sync rejected by server. id=%s status=%s", order.id, response.status)
            return False
        return True

    async def sync_orders(self) -> None:
        orders = await self._queue.list_orders()
        failed: list[str] = []
        for order in orders:
            if not await self._post_order(order):
                failed.append(order.id)
                continue
            await self._queue.remove_order(order.id)
            logger.info("Order synced successfully. id=%s", order.id)

        if failed:
            raise SyncError(ORDER_SYNC_TAG, failed)

    async def sync_cart(self) -> None:
        cart = await self._queue.get_cart()
        if cart is None or not cart.items:
            logger.debug("No queued cart to sync.")
            return

        url = resolve_url(self._config.origin, self._config.endpoints.cart_sync)
        try:
            response = await self._network.fetch(Request.post_json(url, cart.model_dump(mode="json")))
        except NetworkError as e:
            logger.error("Failed to sync cart. error=%s", e)
            raise SyncError(CART_SYNC_TAG) from e
        if not response.ok:
            logger.error("Cart sync rejected by server. status=%s", response.status)
            raise SyncError(CART_SYNC_TAG)

        # The page may have queued a newer cart while the request was in flight.
        current = await self._queue.get_cart()
        if current is not None and current != cart:
            logger.info("Queued cart changed during sync, keeping the newer cart.")
            return
        await self._queue.clear_cart()
        logger.info("Cart synced successfully. items=%d", len(cart.items))
