"""
文件缓存持久化后端
缓存整体序列化为一个JSON字符串，存放在一个固定的键下
"""

import os
from pathlib import Path
from typing import Optional, Protocol, Union

from bucketsync.core.config import settings
from bucketsync.core.log_utils import get_logger
from bucketsync.core.redis import RedisClient, redis_client

logger = get_logger(__name__)


class KeyValueStore(Protocol):
    """
    键值存储协议

    文件缓存服务只依赖这三个操作。
    """

    async def get(self, key: str) -> Optional[str]:
        ...

    async def set(self, key: str, value: str) -> None:
        ...

    async def delete(self, key: str) -> None:
        ...


class LocalFileStore:
    """
    本地文件存储，每个键对应目录下的一个JSON文件

    Args:
        base_dir: 存储目录，默认使用 settings.absolute_file_cache_dir
    """

    def __init__(self, base_dir: Optional[Union[str, Path]] = None):
        self.base_dir = Path(base_dir or settings.absolute_file_cache_dir)

    def _key_path(self, key: str) -> Path:
        return self.base_dir / f"{key}.json"

    async def get(self, key: str) -> Optional[str]:
        path = self._key_path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    async def set(self, key: str, value: str) -> None:
        self.base_dir.mkdir(parents=True, exist_ok=True)
        path = self._key_path(key)
        tmp_path = path.with_suffix(".json.tmp")
        tmp_path.write_text(value, encoding="utf-8")
        os.replace(tmp_path, path)

    async def delete(self, key: str) -> None:
        path = self._key_path(key)
        if path.exists():
            path.unlink()


class RedisStore:
    """
    Redis存储

    Args:
        client: Redis客户端，默认使用全局实例
    """

    def __init__(self, client: Optional[RedisClient] = None):
        self.client = client or redis_client

    async def get(self, key: str) -> Optional[str]:
        return await self.client.get(key)

    async def set(self, key: str, value: str) -> None:
        await self.client.set(key, value)

    async def delete(self, key: str) -> None:
        await self.client.delete(key)


def create_store(backend: Optional[str] = None) -> KeyValueStore:
    """
    根据配置创建持久化后端

    Args:
        backend: local 或 redis，默认使用 settings.file_cache_backend

    Raises:
        ValueError: 后端名称无效时抛出
    """
    backend = (backend or settings.file_cache_backend).strip().lower()
    if backend == "local":
        return LocalFileStore()
    if backend == "redis":
        return RedisStore()
    raise ValueError("不支持的文件缓存后端: {}".format(backend))


__all__ = ['KeyValueStore', 'LocalFileStore', 'RedisStore', 'create_store']
