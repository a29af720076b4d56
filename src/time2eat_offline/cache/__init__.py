"""Response cache partitions backing the offline agent."""

from time2eat_offline.cache.file_store import FileCache, FileCacheStorage
from time2eat_offline.cache.interfaces import Cache, CacheStorage
from time2eat_offline.cache.memory import MemoryCache, MemoryCacheStorage

__all__ = [
    "Cache",
    "CacheStorage",
    "FileCache",
    "FileCacheStorage",
    "MemoryCache",
    "MemoryCacheStorage",
]
