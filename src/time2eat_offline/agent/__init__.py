"""Offline cache and background sync agent."""

from time2eat_offline.agent.agent import AgentState, OfflineAgent
from time2eat_offline.agent.events import (
    ActivateEvent,
    ExtendableEvent,
    FetchEvent,
    InstallEvent,
    NotificationClickEvent,
    PushEvent,
    SyncEvent,
)
from time2eat_offline.agent.mutations import OfflineMutationClient
from time2eat_offline.agent.routing import DynamicCacheRule
from time2eat_offline.agent.sync import CART_SYNC_TAG, ORDER_SYNC_TAG

__all__ = [
    "ActivateEvent",
    "AgentState",
    "CART_SYNC_TAG",
    "DynamicCacheRule",
    "ExtendableEvent",
    "FetchEvent",
    "InstallEvent",
    "NotificationClickEvent",
    "OfflineAgent",
    "OfflineMutationClient",
    "ORDER_SYNC_TAG",
    "PushEvent",
    "SyncEvent",
]
