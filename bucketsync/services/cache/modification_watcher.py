"""
文件修改监听
文件修改事件经过防抖后重新计算内容哈希，内容变化时把缓存标记为未同步
"""

import asyncio
from typing import Awaitable, Callable, Dict, List, Optional

from bucketsync.core.config import settings
from bucketsync.core.log_utils import get_logger
from bucketsync.services.cache.file_cache import FileCacheService

logger = get_logger(__name__)

ContentReader = Callable[[str], Awaitable[Optional[str]]]
ChangeCallback = Callable[[str], Awaitable[None]]


class ModificationWatcher:
    """
    防抖的文件修改监听器

    每个文件各自防抖：同一文件的 notify 会取消该文件之前的检查并重新计时，
    不影响其他文件的待执行检查。

    Args:
        cache: 文件缓存服务
        read_content: 读取文件内容的协程函数，文件不存在时返回None
        delay_seconds: 防抖等待时间（秒）
        on_change: 内容确实变化后的回调（可选）
    """

    def __init__(
        self,
        cache: FileCacheService,
        read_content: ContentReader,
        delay_seconds: Optional[float] = None,
        on_change: Optional[ChangeCallback] = None
    ) -> None:
        self.cache = cache
        self.read_content = read_content
        self.delay_seconds = (
            delay_seconds if delay_seconds is not None else settings.modify_debounce_seconds
        )
        self.on_change = on_change
        self._pending: Dict[str, asyncio.Task] = {}

    @property
    def has_pending(self) -> bool:
        return any(not task.done() for task in self._pending.values())

    def pending_paths(self) -> List[str]:
        return sorted(path for path, task in self._pending.items() if not task.done())

    def notify(self, path: str) -> asyncio.Task:
        """
        记录一次文件修改事件

        Returns:
            asyncio.Task: 新调度的检查任务
        """
        previous = self._pending.get(path)
        if previous is not None and not previous.done():
            previous.cancel()

        task = asyncio.create_task(self._check_later(path))
        self._pending[path] = task
        return task

    async def _check_later(self, path: str) -> bool:
        await asyncio.sleep(self.delay_seconds)
        try:
            return await self.check(path)
        finally:
            if self._pending.get(path) is asyncio.current_task():
                del self._pending[path]

    async def check(self, path: str) -> bool:
        """
        立即检查文件是否被修改

        Returns:
            bool: 缓存是否被标记为未同步
        """
        try:
            content = await self.read_content(path)
            if content is None:
                return False

            changed = await self.cache.mark_modified(path, content)
            if changed and self.on_change:
                await self.on_change(path)
            return changed
        except Exception as e:
            logger.error("处理文件修改事件失败", exception=e, extra={'path': path})
            return False

    async def aclose(self) -> None:
        """取消所有待执行的检查"""
        tasks = list(self._pending.values())
        self._pending = {}
        for task in tasks:
            task.cancel()
        for task in tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass


__all__ = ['ModificationWatcher']
