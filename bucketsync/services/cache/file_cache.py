"""
文件状态缓存服务
记录本地文件与远端的同步状态，通过内容哈希检测本地修改
"""

import asyncio
import json
import time
from dataclasses import asdict, dataclass, replace
from typing import Any, Callable, Dict, List, Optional

from bucketsync.core.config import settings
from bucketsync.core.log_messages import log_messages
from bucketsync.core.log_utils import get_logger
from bucketsync.core.storage.exceptions import CacheCorruptError
from bucketsync.services.cache.stores import KeyValueStore, create_store

logger = get_logger(__name__)

_BASE36_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


@dataclass(frozen=True)
class FileCacheEntry:
    """文件缓存条目"""
    local_path: str
    remote_path: str
    last_modified: str  # 远端最后修改时间（ISO格式）
    remote_revision: str  # 远端版本标识（GitHub文件sha）
    is_published: bool
    is_synced: bool
    cache_time: int = 0  # 写入时间（毫秒时间戳）
    file_size: int = 0
    content_hash: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典"""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FileCacheEntry':
        """从字典创建"""
        return cls(**data)


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    sign = "-" if value < 0 else ""
    value = abs(value)
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36_DIGITS[remainder])
    return sign + "".join(reversed(digits))


def calculate_content_hash(content: str) -> str:
    """
    计算内容哈希

    按UTF-16编码单元逐个累加 h = h * 31 + c，结果截断为有符号32位整数，
    以36进制文本表示。只用于检测本地修改，不具备抗碰撞性。

    Args:
        content: 文件内容

    Returns:
        str: 哈希文本，如 "2p"、"-1a2b3c"
    """
    data = content.encode("utf-16-le", "surrogatepass")
    h = 0
    for i in range(0, len(data), 2):
        unit = data[i] | (data[i + 1] << 8)
        h = ((h << 5) - h + unit) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return _to_base36(h)


class FileCacheService:
    """
    文件状态缓存服务

    整个缓存保存在内存字典中，每次修改后整体序列化写入持久化后端。
    首次访问时加载持久化数据，加载期间的其他调用会等待加载完成。

    Args:
        store: 持久化后端，默认根据 settings.file_cache_backend 创建
        max_age_seconds: 缓存有效期（秒）
        cache_key: 持久化使用的键
        clock: 返回当前时间（秒）的函数，测试时注入
    """

    def __init__(
        self,
        store: Optional[KeyValueStore] = None,
        max_age_seconds: Optional[float] = None,
        cache_key: Optional[str] = None,
        clock: Callable[[], float] = time.time
    ) -> None:
        self.store = store or create_store()
        self.max_age_seconds = (
            max_age_seconds if max_age_seconds is not None else settings.file_cache_max_age
        )
        self.cache_key = cache_key or settings.file_cache_key
        self._clock = clock
        self._cache: Dict[str, FileCacheEntry] = {}
        self._loaded = False
        self._load_lock: Optional[asyncio.Lock] = None

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    @staticmethod
    def _decode(blob: str) -> Dict[str, FileCacheEntry]:
        """
        解析持久化的缓存数据

        Raises:
            CacheCorruptError: 数据无法解析时抛出
        """
        try:
            data = json.loads(blob)
            if not isinstance(data, dict):
                raise TypeError("缓存数据不是对象")
            return {path: FileCacheEntry.from_dict(item) for path, item in data.items()}
        except (ValueError, TypeError) as e:
            raise CacheCorruptError(
                "文件缓存数据无法解析: {}".format(str(e))
            ) from e

    def _encode(self) -> str:
        return json.dumps(
            {path: entry.to_dict() for path, entry in self._cache.items()},
            ensure_ascii=False
        )

    def _lock(self) -> asyncio.Lock:
        if self._load_lock is None:
            self._load_lock = asyncio.Lock()
        return self._load_lock

    async def _read_store(self) -> Dict[str, FileCacheEntry]:
        blob = await self.store.get(self.cache_key)
        if not blob:
            return {}

        try:
            entries = self._decode(blob)
        except CacheCorruptError as e:
            logger.error("加载文件缓存失败，已丢弃全部缓存", exception=e)
            await self.store.delete(self.cache_key)
            return {}

        logger.info(log_messages.CACHE_LOADED, count=len(entries))
        return entries

    async def load(self) -> None:
        """从持久化后端重新加载缓存，数据损坏时丢弃并从空缓存开始"""
        async with self._lock():
            self._cache = await self._read_store()
            self._loaded = True

    async def _ensure_loaded(self) -> None:
        if self._loaded:
            return
        async with self._lock():
            # 等锁期间可能已由其他任务加载完成
            if not self._loaded:
                self._cache = await self._read_store()
                self._loaded = True

    async def _persist(self) -> None:
        await self.store.set(self.cache_key, self._encode())

    def is_cache_valid(self, entry: FileCacheEntry, max_age: Optional[float] = None) -> bool:
        """缓存是否仍在有效期内"""
        age = max_age if max_age is not None else self.max_age_seconds
        return (self._now_ms() - entry.cache_time) < age * 1000

    async def get(self, path: str) -> Optional[FileCacheEntry]:
        """
        获取文件缓存

        不存在或已过期时返回None，过期条目会被移除。
        """
        await self._ensure_loaded()

        entry = self._cache.get(path)
        if entry is None:
            logger.debug(log_messages.CACHE_MISS, path=path)
            return None

        if not self.is_cache_valid(entry):
            logger.debug(log_messages.CACHE_EXPIRED, path=path)
            await self.remove(path)
            return None

        logger.debug(log_messages.CACHE_HIT, path=path)
        return entry

    async def put(self, path: str, entry: FileCacheEntry) -> FileCacheEntry:
        """写入文件缓存，cache_time 更新为当前时间"""
        await self._ensure_loaded()

        stamped = replace(entry, cache_time=self._now_ms())
        self._cache[path] = stamped
        await self._persist()
        logger.debug(log_messages.CACHE_UPDATED, path=path)
        return stamped

    async def remove(self, path: str) -> None:
        await self._ensure_loaded()

        if self._cache.pop(path, None) is not None:
            await self._persist()
            logger.debug(log_messages.CACHE_REMOVED, path=path)

    async def clear(self) -> None:
        """清空全部缓存并删除持久化数据"""
        async with self._lock():
            self._cache = {}
            self._loaded = True
            await self.store.delete(self.cache_key)
        logger.info(log_messages.CACHE_CLEARED)

    async def all_entries(self) -> List[FileCacheEntry]:
        """所有缓存条目，包含已过期的"""
        await self._ensure_loaded()
        return list(self._cache.values())

    async def is_modified_locally(self, path: str, current_content: Optional[str]) -> bool:
        """
        检查文件是否在本地被修改

        Args:
            path: 本地文件路径
            current_content: 当前文件内容，None 表示文件不存在

        Returns:
            bool: 无缓存、文件不存在、哈希不一致或检查出错时返回True
        """
        try:
            entry = await self.get(path)
            if entry is None or current_content is None:
                return True
            return calculate_content_hash(current_content) != entry.content_hash
        except Exception as e:
            logger.error("检查文件修改状态失败", exception=e, extra={'path': path})
            return True

    async def update_after_sync(
        self,
        path: str,
        remote_path: str,
        remote_revision: str,
        last_modified: str,
        published: bool,
        current_content: Optional[str]
    ) -> Optional[FileCacheEntry]:
        """
        同步完成后更新缓存

        Returns:
            Optional[FileCacheEntry]: 写入的条目，文件不存在时返回None
        """
        if current_content is None:
            return None

        entry = FileCacheEntry(
            local_path=path,
            remote_path=remote_path,
            last_modified=last_modified,
            remote_revision=remote_revision,
            is_published=published,
            is_synced=True,
            file_size=len(current_content),
            content_hash=calculate_content_hash(current_content)
        )
        return await self.put(path, entry)

    async def mark_modified(self, path: str, current_content: str) -> bool:
        """
        内容哈希变化时将缓存标记为未同步

        Returns:
            bool: 缓存条目是否被更新
        """
        entry = await self.get(path)
        if entry is None:
            return False

        current_hash = calculate_content_hash(current_content)
        if current_hash == entry.content_hash:
            return False

        await self.put(path, replace(
            entry,
            content_hash=current_hash,
            file_size=len(current_content),
            is_synced=False
        ))
        logger.info("检测到文件内容修改", extra={'path': path})
        return True

    async def stats(self) -> Dict[str, int]:
        """缓存统计信息"""
        entries = await self.all_entries()
        return {
            "total_files": len(entries),
            "published_files": sum(1 for entry in entries if entry.is_published),
            "synced_files": sum(1 for entry in entries if entry.is_synced),
            "expired_caches": sum(1 for entry in entries if not self.is_cache_valid(entry)),
        }


__all__ = ['FileCacheEntry', 'FileCacheService', 'calculate_content_hash']
