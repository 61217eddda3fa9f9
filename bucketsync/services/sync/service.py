"""
笔记库同步服务
在本地笔记库目录与GitHub仓库之间推送、拉取文件，并维护文件状态缓存
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Union

from bucketsync.core.config import settings
from bucketsync.core.github import GitHubContentClient, SyncResult
from bucketsync.core.log_messages import log_messages
from bucketsync.core.log_utils import get_logger
from bucketsync.services.cache.file_cache import FileCacheService

logger = get_logger(__name__)

NOT_CONFIGURED_MESSAGE = "GitHub Token或仓库地址未配置"


class NotTextFileError(ValueError):
    """文件不是UTF-8文本，无法通过GitHub内容接口同步"""

    def __init__(self, path: str) -> None:
        super().__init__("不是UTF-8文本文件: {}".format(path))
        self.path = path


@dataclass
class FileStatus:
    """
    文件同步状态

    Attributes:
        path: 笔记库内的相对路径
        source: 状态来源，cache 或 remote
        is_published: 远端是否存在
        is_synced: 缓存中是否标记为已同步
        is_modified: 本地内容是否与缓存不一致
        last_modified: 远端最后修改时间
        rate_limited: 是否因速率限制未能查询
        wait_minutes: 速率限制需要等待的分钟数
        message: 查询失败时的提示
    """
    path: str
    source: str
    is_published: bool = False
    is_synced: bool = False
    is_modified: bool = True
    last_modified: Optional[str] = None
    rate_limited: bool = False
    wait_minutes: Optional[int] = None
    message: Optional[str] = None


def _utc_iso_now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class SyncService:
    """
    笔记库同步服务

    Args:
        github: GitHub内容客户端
        cache: 文件缓存服务
        vault_dir: 本地笔记库目录，默认 settings.absolute_vault_dir
        repository_url: 仓库地址，默认 settings.repository_url
        excluded_dirs: 不参与同步的目录，默认 settings.sync_excluded_dirs
    """

    def __init__(
        self,
        github: GitHubContentClient,
        cache: FileCacheService,
        vault_dir: Optional[Union[str, Path]] = None,
        repository_url: Optional[str] = None,
        excluded_dirs: Optional[List[str]] = None
    ) -> None:
        self.github = github
        self.cache = cache
        self.vault_dir = Path(vault_dir or settings.absolute_vault_dir)
        self.repository_url = repository_url if repository_url is not None else settings.repository_url
        self.excluded_dirs = list(
            excluded_dirs if excluded_dirs is not None else settings.sync_excluded_dirs
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.github.token and self.repository_url)

    def _resolve(self, path: str) -> Path:
        """
        将相对路径解析为笔记库内的绝对路径

        Raises:
            ValueError: 路径为空或超出笔记库目录时抛出
        """
        clean = path.strip().lstrip("/")
        if not clean:
            raise ValueError("文件路径不能为空")

        root = self.vault_dir.resolve()
        target = (root / clean).resolve()
        if target != root and root not in target.parents:
            raise ValueError("文件路径超出笔记库目录: {}".format(path))
        return target

    async def read_local_file(self, path: str) -> Optional[str]:
        """
        读取本地文件内容，不存在时返回None

        Raises:
            NotTextFileError: 文件不是UTF-8文本时抛出
        """
        target = self._resolve(path)
        if not target.is_file():
            return None
        try:
            return target.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise NotTextFileError(path) from e

    async def write_local_file(self, path: str, content: str) -> None:
        target = self._resolve(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")

    def _excluded_prefixes(self) -> List[str]:
        prefixes = [d.strip("/") for d in self.excluded_dirs if d.strip("/")]
        if settings.keep_local_images and settings.local_image_path:
            image_dir = settings.local_image_path.strip("/")
            if image_dir:
                prefixes.append(image_dir)
        return prefixes

    def list_local_files(self) -> List[str]:
        """列出笔记库中需要同步的文件（相对路径，已排序）"""
        if not self.vault_dir.is_dir():
            return []

        prefixes = self._excluded_prefixes()
        files = []
        for file in self.vault_dir.rglob("*"):
            if not file.is_file():
                continue
            relative = file.relative_to(self.vault_dir).as_posix()
            if any(relative == p or relative.startswith(p + "/") for p in prefixes):
                continue
            files.append(relative)
        return sorted(files)

    def is_vault_empty(self) -> bool:
        return not self.list_local_files()

    async def sync_file_to_remote(self, path: str) -> SyncResult:
        """推送单个文件到远端，成功后更新缓存"""
        if not self.is_configured:
            return SyncResult(success=False, message=NOT_CONFIGURED_MESSAGE)

        content = await self.read_local_file(path)
        if content is None:
            return SyncResult(success=False, message="本地文件不存在: {}".format(path))

        result = await self.github.upload_file(self.repository_url, path, content)
        if not result.success:
            logger.warning(log_messages.SYNC_FILE_FAILED, extra={'reason': result.message}, path=path)
            return result

        await self.cache.update_after_sync(
            path, path, result.revision or "", _utc_iso_now(), True, content
        )
        logger.info(log_messages.SYNC_FILE_SUCCESS, path=path)
        return result

    async def pull_remote_to_file(self, path: str) -> SyncResult:
        """拉取远端文件覆盖本地文件，成功后更新缓存"""
        if not self.is_configured:
            return SyncResult(success=False, message=NOT_CONFIGURED_MESSAGE)

        result = await self.github.download_file(self.repository_url, path)
        if not result.success or result.content is None:
            return SyncResult(success=False, message=result.message)

        await self.write_local_file(path, result.content)
        await self.cache.update_after_sync(path, path, "", _utc_iso_now(), True, result.content)
        logger.info("拉取远端文件成功", extra={'path': path})
        return SyncResult(success=True, message="拉取成功", files_processed=1)

    async def force_sync_remote_to_local(self) -> SyncResult:
        """拉取远端全部文件写入本地"""
        if not self.is_configured:
            return SyncResult(success=False, message=NOT_CONFIGURED_MESSAGE)

        result = await self.github.download_all_files(self.repository_url)
        if not result.success:
            return SyncResult(success=False, message=result.message)

        processed = 0
        failed = result.files_failed
        for file in result.files:
            try:
                await self.write_local_file(file.path, file.content)
                await self.cache.update_after_sync(
                    file.path, file.path, "", _utc_iso_now(), True, file.content
                )
                processed += 1
            except (OSError, ValueError) as e:
                failed += 1
                logger.error("写入本地文件失败", exception=e, extra={'path': file.path})

        return SyncResult(
            success=True,
            message="已从远端同步 {} 个文件".format(processed),
            files_processed=processed,
            files_failed=failed
        )

    async def initialize_repository(self) -> SyncResult:
        """笔记库为空时从远端初始化"""
        if not self.is_vault_empty():
            return SyncResult(success=False, message="笔记库不为空，无法初始化")
        return await self.force_sync_remote_to_local()

    async def force_sync_local_to_remote(self) -> SyncResult:
        """
        推送本地全部文件到远端

        逐个推送直到结束，单个文件失败只计数不中断；非文本文件（图片等附件）跳过。
        """
        if not self.is_configured:
            return SyncResult(success=False, message=NOT_CONFIGURED_MESSAGE)

        files = self.list_local_files()
        if not files:
            return SyncResult(success=False, message="笔记库中没有可同步的文件")

        processed = 0
        failed = 0
        skipped = 0
        for path in files:
            try:
                result = await self.sync_file_to_remote(path)
            except NotTextFileError:
                logger.info("跳过非文本文件", extra={'path': path})
                skipped += 1
                continue
            except Exception as e:
                logger.error(log_messages.SYNC_FILE_FAILED, exception=e, path=path)
                failed += 1
                continue

            if result.success:
                processed += 1
            else:
                failed += 1

        if failed:
            message = "同步完成，成功 {} 个，失败 {} 个".format(processed, failed)
        else:
            message = "全部文件同步成功"
        if skipped:
            message += "，跳过 {} 个非文本文件".format(skipped)

        return SyncResult(
            success=True,
            message=message,
            files_processed=processed,
            files_failed=failed
        )

    async def file_status(self, path: str) -> FileStatus:
        """
        查询文件同步状态

        优先使用缓存；缓存不存在时先检查速率限制，再查询远端最后修改时间并写入缓存。
        """
        content = await self.read_local_file(path)

        entry = await self.cache.get(path)
        if entry is not None:
            return FileStatus(
                path=path,
                source="cache",
                is_published=entry.is_published,
                is_synced=entry.is_synced,
                is_modified=await self.cache.is_modified_locally(path, content),
                last_modified=entry.last_modified or None
            )

        if not self.is_configured:
            return FileStatus(path=path, source="remote", message=NOT_CONFIGURED_MESSAGE)

        rate_limit = await self.github.check_rate_limit()
        if not rate_limit.can_proceed:
            return FileStatus(
                path=path,
                source="remote",
                rate_limited=True,
                wait_minutes=rate_limit.wait_minutes,
                message=rate_limit.message
            )

        result = await self.github.get_file_last_modified(self.repository_url, path)
        if not result.success:
            return FileStatus(path=path, source="remote", message="查询远端状态失败")

        published = bool(result.exists and result.last_modified)
        last_modified = result.last_modified if published else ""
        entry = await self.cache.update_after_sync(path, path, "", last_modified, published, content)

        return FileStatus(
            path=path,
            source="remote",
            is_published=published,
            is_synced=entry is not None,
            is_modified=entry is None,
            last_modified=last_modified or None
        )


__all__ = ['SyncService', 'FileStatus', 'NotTextFileError', 'NOT_CONFIGURED_MESSAGE']
