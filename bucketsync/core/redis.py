"""
Redis客户端连接管理
文件缓存使用 redis 持久化后端时的连接封装，所有键自动加上 redis_key_prefix
"""

import asyncio
from typing import Optional

import redis.asyncio as redis
from redis.asyncio.connection import ConnectionPool

from bucketsync.core.config import settings
from bucketsync.core.log_utils import get_logger

logger = get_logger(__name__)


class RedisClient:
    """
    Redis客户端封装类

    Args:
        url: Redis连接URL，默认使用 settings.redis_url
        client: 已创建的 redis 客户端（测试时注入）
        key_prefix: 键前缀，默认使用 settings.redis_key_prefix
    """

    def __init__(
        self,
        url: Optional[str] = None,
        client: Optional[redis.Redis] = None,
        key_prefix: Optional[str] = None
    ):
        self.url = url or settings.redis_url
        self.key_prefix = settings.redis_key_prefix if key_prefix is None else key_prefix
        self._client = client
        self._connection_pool: Optional[ConnectionPool] = None
        self._connect_lock: Optional[asyncio.Lock] = None

    def _key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    async def _connection(self) -> redis.Redis:
        """返回可用连接，首次调用时建立连接池并验证连通性"""
        if self._client is not None:
            return self._client

        if self._connect_lock is None:
            self._connect_lock = asyncio.Lock()
        async with self._connect_lock:
            if self._client is None:
                await self._connect()
            return self._client

    async def _connect(self) -> None:
        pool = ConnectionPool.from_url(
            self.url,
            max_connections=10,
            socket_connect_timeout=5,
            socket_timeout=5,
            decode_responses=True,
        )
        client = redis.Redis(connection_pool=pool)
        try:
            await client.ping()
        except Exception as e:
            await pool.disconnect()
            logger.error(
                f"Redis连接失败: {str(e)}",
                extra={'redis_url': self.url.split("@")[-1], 'error_type': type(e).__name__}
            )
            raise

        self._connection_pool = pool
        self._client = client
        logger.info("Redis连接已建立", extra={'redis_db': settings.redis_db, 'key_prefix': self.key_prefix})

    @property
    def connected(self) -> bool:
        return self._client is not None

    async def close(self) -> None:
        """关闭Redis连接"""
        if self._client is None:
            return
        await self._client.aclose()
        self._client = None
        if self._connection_pool is not None:
            await self._connection_pool.disconnect()
            self._connection_pool = None
        logger.info("Redis连接已关闭")

    async def get(self, key: str) -> Optional[str]:
        """
        读取缓存键

        Returns:
            Optional[str]: 值，不存在时返回None
        """
        client = await self._connection()
        value = await client.get(self._key(key))
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    async def set(self, key: str, value: str, expire: Optional[int] = None) -> bool:
        """写入已序列化的字符串，expire 为过期秒数"""
        client = await self._connection()
        return bool(await client.set(self._key(key), value, ex=expire))

    async def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        client = await self._connection()
        return await client.delete(*(self._key(key) for key in keys))

    async def ping(self) -> bool:
        """检查连接是否可用"""
        try:
            client = await self._connection()
            return bool(await client.ping())
        except Exception as e:
            logger.warning("Redis连接检查失败", extra={'error': str(e)})
            return False


# 全局Redis客户端实例
redis_client = RedisClient()
