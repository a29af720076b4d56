"""Durable queue of mutations attempted while offline."""

from time2eat_offline.queue.interfaces import OfflineQueue
from time2eat_offline.queue.json_file import JsonFileOfflineQueue
from time2eat_offline.queue.memory import MemoryOfflineQueue

__all__ = ["JsonFileOfflineQueue", "MemoryOfflineQueue", "OfflineQueue"]
