"""Host environment capabilities the agent is given at construction."""

from time2eat_offline.host.interfaces import Clients, Host, Notifier, WindowClient
from time2eat_offline.host.local import LocalClients, LocalHost, LocalWindowClient, LoggingNotifier
from time2eat_offline.host.sync_manager import SyncManager, SyncRegistration

__all__ = [
    "Clients",
    "Host",
    "LocalClients",
    "LocalHost",
    "LocalWindowClient",
    "LoggingNotifier",
    "Notifier",
    "SyncManager",
    "SyncRegistration",
    "WindowClient",
]
