from __future__ import annotations

import argparse
import asyncio
import json
import logging
from dataclasses import dataclass
from pathlib import Path

from time2eat_offline.agent import (
    ActivateEvent,
    CART_SYNC_TAG,
    FetchEvent,
    InstallEvent,
    NotificationClickEvent,
    OfflineAgent,
    OfflineMutationClient,
    ORDER_SYNC_TAG,
    PushEvent,
    SyncEvent,
)
from time2eat_offline.cache import FileCacheStorage
from time2eat_offline.config import YamlConfigLoader
from time2eat_offline.config.models import AppConfig, ConfigLoadRequest
from time2eat_offline.core.models import NotificationClick, OfflineCart, OfflineOrder, Request, resolve_url
from time2eat_offline.errors import AgentError
from time2eat_offline.host import LocalClients, LocalHost, LoggingNotifier, SyncManager
from time2eat_offline.logging import init_logging
from time2eat_offline.net import AiohttpNetwork
from time2eat_offline.queue import JsonFileOfflineQueue

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="time2eat-offline", description="Time2Eat offline cache and sync agent")
    parser.add_argument(
        "--config",
        default="data/config/config.yaml",
        help="Path to config.yaml (default: data/config/config.yaml)",
    )
    parser.add_argument(
        "--launch-browser",
        action="store_true",
        help="Open windows requested by notification clicks in the system browser.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True, help="Command to run")

    subparsers.add_parser("install", help="Precache the static manifest and activate this version")

    fetch_parser = subparsers.add_parser("fetch", help="Fetch a URL through the agent")
    fetch_parser.add_argument("url", help="Absolute URL or path relative to the configured origin")
    fetch_parser.add_argument("--accept", default="*/*", help="Accept header to send (default: */*)")
    fetch_parser.add_argument("--output", default=None, help="Write the response body to this file")

    sync_parser = subparsers.add_parser("sync", help="Flush queued offline mutations")
    sync_parser.add_argument(
        "tags",
        nargs="*",
        default=[ORDER_SYNC_TAG, CART_SYNC_TAG],
        help=f"Sync tags to run (default: {ORDER_SYNC_TAG} {CART_SYNC_TAG})",
    )

    order_parser = subparsers.add_parser("submit-order", help="Submit an order, queueing it when offline")
    order_parser.add_argument("file", help="JSON file holding the order")

    cart_parser = subparsers.add_parser("update-cart", help="Send the cart, queueing it when offline")
    cart_parser.add_argument("file", help="JSON file holding the cart")

    push_parser = subparsers.add_parser("push", help="Present a push payload as a notification")
    push_parser.add_argument("payload", nargs="?", default=None, help="JSON push payload")
    push_parser.add_argument("--click", default=None, help="Simulate a click (view, close, or empty for default)")

    subparsers.add_parser("status", help="Show cache partitions and queued mutations")

    return parser


@dataclass(slots=True)
class Runtime:
    config: AppConfig
    agent: OfflineAgent
    caches: FileCacheStorage
    queue: JsonFileOfflineQueue
    network: AiohttpNetwork
    sync_manager: SyncManager


async def _load_config(args: argparse.Namespace) -> AppConfig:
    loader = YamlConfigLoader()
    request = ConfigLoadRequest(
        yaml_path=args.config,
    )
    return await loader.load(request)


def _build_runtime(config: AppConfig, network: AiohttpNetwork, *, launch_browser: bool) -> Runtime:
    caches = FileCacheStorage(Path(config.storage.cache_dir))
    queue = JsonFileOfflineQueue(Path(config.storage.queue_path))
    agent = OfflineAgent(
        config=config.agent,
        caches=caches,
        network=network,
        queue=queue,
        clients=LocalClients(origin=config.agent.origin, launch_browser=launch_browser),
        notifier=LoggingNotifier(),
        host=LocalHost(),
        notifications=config.notifications,
    )
    sync_manager = SyncManager(
        lambda tag: agent.dispatch(SyncEvent(tag=tag)),
        max_attempts=config.sync.max_attempts,
    )
    return Runtime(
        config=config,
        agent=agent,
        caches=caches,
        queue=queue,
        network=network,
        sync_manager=sync_manager,
    )


def _read_json_file(path: str) -> dict:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object in {path}, got: {type(data).__name__}")
    return data


async def _install(runtime: Runtime, args: argparse.Namespace) -> int:
    await runtime.agent.dispatch(InstallEvent())
    await runtime.agent.dispatch(ActivateEvent())
    logger.info("Agent version %s is active.", runtime.agent.version)
    return 0


async def _fetch(runtime: Runtime, args: argparse.Namespace) -> int:
    if not await runtime.agent.resume():
        logger.warning("No installed agent generation found; requests pass through. version=%s", runtime.agent.version)
    url = resolve_url(runtime.config.agent.origin, args.url)
    request = Request.get(url, accept=args.accept)
    response = await runtime.agent.dispatch(FetchEvent(request=request))
    if response is None:
        response = await runtime.network.fetch(request)
    print(f"{response.status} {response.status_text} {response.content_type}".strip())
    if args.output:
        Path(args.output).write_bytes(response.body)
    return 0 if response.ok else 1


async def _sync(runtime: Runtime, args: argparse.Namespace) -> int:
    for tag in args.tags:
        runtime.sync_manager.register(tag)
    results = await runtime.sync_manager.run_pending()
    for tag, ok in results.items():
        print(f"{tag}: {'ok' if ok else 'failed'}")
    return 0 if all(results.values()) else 1


def _mutation_client(runtime: Runtime) -> OfflineMutationClient:
    return OfflineMutationClient(
        config=runtime.config.agent,
        network=runtime.network,
        queue=runtime.queue,
        sync_manager=runtime.sync_manager,
    )


async def _submit_order(runtime: Runtime, args: argparse.Namespace) -> int:
    order = OfflineOrder.model_validate(_read_json_file(args.file))
    response = await _mutation_client(runtime).submit_order(order)
    if response is None:
        print(f"queued {order.id}")
        return 0
    print(f"{response.status} {response.status_text}".strip())
    return 0 if response.ok else 1


async def _update_cart(runtime: Runtime, args: argparse.Namespace) -> int:
    cart = OfflineCart.model_validate(_read_json_file(args.file))
    response = await _mutation_client(runtime).update_cart(cart)
    if response is None:
        print(f"queued cart items={len(cart.items)}")
        return 0
    print(f"{response.status} {response.status_text}".strip())
    return 0 if response.ok else 1


async def _push(runtime: Runtime, args: argparse.Namespace) -> int:
    payload = args.payload.encode("utf-8") if args.payload is not None else None
    notification = await runtime.agent.dispatch(PushEvent(data=payload))
    print(f"{notification.title}: {notification.options.body}")
    if args.click is not None:
        window = await runtime.agent.dispatch(
            NotificationClickEvent(click=NotificationClick(notification=notification, action=args.click))
        )
        if window is not None:
            print(f"window {window.url}")
    return 0


async def _status(runtime: Runtime, args: argparse.Namespace) -> int:
    for name in await runtime.caches.keys():
        cache = await runtime.caches.open(name)
        print(f"cache {name}: {len(await cache.list_keys())} entries")
    orders = await runtime.queue.list_orders()
    cart = await runtime.queue.get_cart()
    print(f"queued orders: {len(orders)}")
    print(f"queued cart items: {len(cart.items) if cart is not None else 0}")
    return 0


_COMMANDS = {
    "install": _install,
    "fetch": _fetch,
    "sync": _sync,
    "submit-order": _submit_order,
    "update-cart": _update_cart,
    "push": _push,
    "status": _status,
}


async def _main_async() -> int:
    parser = _build_parser()
    args = parser.parse_args()

    config = await _load_config(args)
    init_logging(config.logging)
    logger.info("Starting agent command. command=%s version=%s", args.command, config.agent.version)

    async with AiohttpNetwork(config.agent) as network:
        runtime = _build_runtime(config, network, launch_browser=args.launch_browser)
        try:
            return await _COMMANDS[args.command](runtime, args)
        except AgentError as e:
            logger.error("Command failed. command=%s error=%s", args.command, e)
            return 1


def main() -> None:
    try:
        exit_code = asyncio.run(_main_async())
    except KeyboardInterrupt:
        logger.info("Interrupted by user.")
        exit_code = 130
    raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
