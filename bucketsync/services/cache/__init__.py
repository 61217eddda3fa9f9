"""
文件缓存服务模块
"""

from bucketsync.services.cache.file_cache import (
    FileCacheEntry,
    FileCacheService,
    calculate_content_hash,
)
from bucketsync.services.cache.modification_watcher import ModificationWatcher
from bucketsync.services.cache.stores import (
    KeyValueStore,
    LocalFileStore,
    RedisStore,
    create_store,
)

__all__ = [
    'FileCacheEntry',
    'FileCacheService',
    'calculate_content_hash',
    'ModificationWatcher',
    'KeyValueStore',
    'LocalFileStore',
    'RedisStore',
    'create_store',
]
