import unittest

from time2eat_offline.agent import CART_SYNC_TAG, ORDER_SYNC_TAG, OfflineMutationClient
from time2eat_offline.core.models import OfflineCart, OfflineOrder, Response
from time2eat_offline.errors import SyncError
from time2eat_offline.host.sync_manager import SyncManager
from time2eat_offline.queue.memory import MemoryOfflineQueue

from tests.fakes import ORIGIN, FakeNetwork, make_settings


class SyncManagerTests(unittest.IsolatedAsyncioTestCase):
    async def test_successful_tag_is_unregistered(self) -> None:
        dispatched: list[str] = []

        async def dispatch(tag: str) -> None:
            dispatched.append(tag)

        manager = SyncManager(dispatch)
        manager.register(ORDER_SYNC_TAG)
        manager.register(ORDER_SYNC_TAG)

        self.assertEqual(await manager.run_pending(), {ORDER_SYNC_TAG: True})
        self.assertEqual(dispatched, [ORDER_SYNC_TAG])
        self.assertEqual(manager.pending(), [])

    async def test_failing_tag_is_retried_until_max_attempts(self) -> None:
        async def dispatch(tag: str) -> None:
            raise SyncError(tag, ["order-1"])

        manager = SyncManager(dispatch, max_attempts=2)
        manager.register(ORDER_SYNC_TAG)

        self.assertEqual(await manager.run_pending(), {ORDER_SYNC_TAG: False})
        self.assertEqual([(r.tag, r.attempts) for r in manager.pending()], [(ORDER_SYNC_TAG, 1)])

        with self.assertLogs("time2eat_offline.host.sync_manager", level="WARNING"):
            await manager.run_pending()
        self.assertEqual(manager.pending(), [])


class OfflineMutationClientTests(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        self.network = FakeNetwork()
        self.queue = MemoryOfflineQueue()
        self.manager = SyncManager(self._noop)
        self.client = OfflineMutationClient(
            config=make_settings(),
            network=self.network,
            queue=self.queue,
            sync_manager=self.manager,
        )

    async def _noop(self, tag: str) -> None:
        return None

    async def test_order_is_queued_when_offline(self) -> None:
        self.network.offline = True
        order = OfflineOrder(id="order-9", total=18)

        self.assertIsNone(await self.client.submit_order(order))

        self.assertEqual([o.id for o in await self.queue.list_orders()], ["order-9"])
        self.assertEqual([r.tag for r in self.manager.pending()], [ORDER_SYNC_TAG])

    async def test_server_error_is_returned_not_queued(self) -> None:
        self.network.add("POST", f"{ORIGIN}/api/orders", Response(status=422))

        response = await self.client.submit_order(OfflineOrder(id="order-9"))

        self.assertEqual(response.status, 422)
        self.assertEqual(await self.queue.list_orders(), [])
        self.assertEqual(self.manager.pending(), [])

    async def test_cart_is_queued_when_offline(self) -> None:
        self.network.offline = True

        await self.client.update_cart(OfflineCart(items=[{"menu_item_id": 5}]))

        self.assertEqual((await self.queue.get_cart()).items, [{"menu_item_id": 5}])
        self.assertEqual([r.tag for r in self.manager.pending()], [CART_SYNC_TAG])


if __name__ == "__main__":
    unittest.main()
