import json
import unittest

from time2eat_offline.agent import CART_SYNC_TAG, ORDER_SYNC_TAG, SyncEvent
from time2eat_offline.core.models import OfflineCart, OfflineOrder, Response
from time2eat_offline.errors import NetworkError, SyncError

from tests.fakes import ORIGIN, AgentHarness, FakeNetwork

ORDERS_URL = f"{ORIGIN}/api/orders"
CART_URL = f"{ORIGIN}/api/cart/sync"


class SequencedNetwork(FakeNetwork):
    """Answers POSTs from a list of outcomes, one per call."""

    def __init__(self, outcomes) -> None:
        super().__init__()
        self._outcomes = list(outcomes)

    async def fetch(self, request):
        self.calls.append(request)
        outcome = self._outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def created() -> Response:
    return Response(url=ORDERS_URL, status=201, body=b"{}")


class OrderSyncTests(unittest.IsolatedAsyncioTestCase):
    async def queue_orders(self, harness: AgentHarness, count: int) -> list[OfflineOrder]:
        orders = [OfflineOrder(id=f"order-{index}", restaurant_id=7, total=12.5) for index in range(1, count + 1)]
        for order in orders:
            await harness.queue.enqueue_order(order)
        return orders

    async def test_failed_order_stays_queued_and_others_are_removed(self) -> None:
        network = SequencedNetwork([created(), NetworkError(ORDERS_URL), created()])
        harness = AgentHarness(network)
        await self.queue_orders(harness, 3)

        with self.assertRaises(SyncError) as ctx:
            await harness.agent.dispatch(SyncEvent(tag=ORDER_SYNC_TAG))

        self.assertEqual(ctx.exception.failed_ids, ["order-2"])
        self.assertEqual([order.id for order in await harness.queue.list_orders()], ["order-2"])
        self.assertEqual(len(network.calls), 3)

    async def test_orders_are_posted_in_enqueue_order_as_json(self) -> None:
        network = SequencedNetwork([created(), created()])
        harness = AgentHarness(network)
        await self.queue_orders(harness, 2)

        self.assertTrue(await harness.agent.dispatch(SyncEvent(tag=ORDER_SYNC_TAG)))

        self.assertEqual([request.url for request in network.calls], [ORDERS_URL, ORDERS_URL])
        self.assertTrue(all(request.method == "POST" for request in network.calls))
        bodies = [json.loads(request.body) for request in network.calls]
        self.assertEqual([body["id"] for body in bodies], ["order-1", "order-2"])
        self.assertEqual(bodies[0]["restaurant_id"], 7)
        self.assertEqual(network.calls[0].headers["content-type"], "application/json")
        self.assertEqual(await harness.queue.list_orders(), [])

    async def test_rejected_order_counts_as_failure(self) -> None:
        network = SequencedNetwork([Response(url=ORDERS_URL, status=500)])
        harness = AgentHarness(network)
        await self.queue_orders(harness, 1)

        with self.assertRaises(SyncError):
            await harness.agent.dispatch(SyncEvent(tag=ORDER_SYNC_TAG))

        self.assertEqual(len(await harness.queue.list_orders()), 1)

    async def test_empty_order_queue_is_a_successful_noop(self) -> None:
        network = SequencedNetwork([])
        harness = AgentHarness(network)

        self.assertTrue(await harness.agent.dispatch(SyncEvent(tag=ORDER_SYNC_TAG)))
        self.assertEqual(network.calls, [])


class CartSyncTests(unittest.IsolatedAsyncioTestCase):
    async def test_empty_cart_never_hits_network(self) -> None:
        network = SequencedNetwork([])
        harness = AgentHarness(network)
        await harness.queue.save_cart(OfflineCart(items=[]))

        self.assertTrue(await harness.agent.dispatch(SyncEvent(tag=CART_SYNC_TAG)))

        self.assertEqual(network.calls, [])

    async def test_missing_cart_never_hits_network(self) -> None:
        network = SequencedNetwork([])
        harness = AgentHarness(network)

        await harness.agent.dispatch(SyncEvent(tag=CART_SYNC_TAG))

        self.assertEqual(network.calls, [])

    async def test_cart_is_posted_once_and_cleared(self) -> None:
        network = SequencedNetwork([Response(url=CART_URL, status=200)])
        harness = AgentHarness(network)
        await harness.queue.save_cart(OfflineCart(items=[{"menu_item_id": 3, "quantity": 2}, {"menu_item_id": 9}]))

        await harness.agent.dispatch(SyncEvent(tag=CART_SYNC_TAG))

        self.assertEqual(len(network.calls), 1)
        self.assertEqual(network.calls[0].url, CART_URL)
        self.assertEqual(len(json.loads(network.calls[0].body)["items"]), 2)
        self.assertIsNone(await harness.queue.get_cart())

    async def test_failed_cart_sync_keeps_cart(self) -> None:
        network = SequencedNetwork([NetworkError(CART_URL)])
        harness = AgentHarness(network)
        await harness.queue.save_cart(OfflineCart(items=[{"menu_item_id": 3}]))

        with self.assertRaises(SyncError):
            await harness.agent.dispatch(SyncEvent(tag=CART_SYNC_TAG))

        cart = await harness.queue.get_cart()
        self.assertEqual(cart.items, [{"menu_item_id": 3}])

    async def test_unknown_tag_is_ignored(self) -> None:
        network = SequencedNetwork([])
        harness = AgentHarness(network)

        self.assertFalse(await harness.agent.dispatch(SyncEvent(tag="profile-sync")))


if __name__ == "__main__":
    unittest.main()
