from __future__ import annotations

import logging
from typing import Optional

from time2eat_offline.agent.sync import CART_SYNC_TAG, ORDER_SYNC_TAG
from time2eat_offline.config.models import AgentSettings
from time2eat_offline.core.models import OfflineCart, OfflineOrder, Request, Response, resolve_url
from time2eat_offline.errors import NetworkError
from time2eat_offline.host.sync_manager import SyncManager
from time2eat_offline.net.interfaces import Network
from time2eat_offline.queue.interfaces import OfflineQueue

logger = logging.getLogger(__name__)


class OfflineMutationClient:
    """
    Page-side submission of orders and carts.

    A mutation that cannot reach the server is queued and the matching sync tag
    is registered. Server responses, including error statuses, are returned to
    the caller as-is; only a failed connection counts as offline.
    """

    def __init__(
        self,
        *,
        config: AgentSettings,
        network: Network,
        queue: OfflineQueue,
        sync_manager: SyncManager,
    ) -> None:
        self._config = config
        self._network = network
        self._queue = queue
        self._sync_manager = sync_manager

    async def submit_order(self, order: OfflineOrder) -> Optional[Response]:
        url = resolve_url(self._config.origin, self._config.endpoints.orders)
        try:
            return await self._network.fetch(Request.post_json(url, order.model_dump(mode="json")))
        except NetworkError as e:
            logger.info("Order submission failed, queueing for background sync. id=%s error=%s", order.id, e)
            await self._queue.enqueue_order(order)
            self._sync_manager.register(ORDER_SYNC_TAG)
            return None

    async def update_cart(self, cart: OfflineCart) -> Optional[Response]:
        url = resolve_url(self._config.origin, self._config.endpoints.cart_sync)
        try:
            return await self._network.fetch(Request.post_json(url, cart.model_dump(mode="json")))
        except NetworkError as e:
            logger.info("Cart update failed, queueing for background sync. items=%d error=%s", len(cart.items), e)
            await self._queue.save_cart(cart)
            self._sync_manager.register(CART_SYNC_TAG)
            return None
