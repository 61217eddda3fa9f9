"""
API依赖注入
服务实例在进程内共享，测试时可通过 app.dependency_overrides 替换
"""

from functools import lru_cache
from typing import Optional

from fastapi import Depends, HTTPException, status

from bucketsync.core.github import GitHubContentClient
from bucketsync.core.log_utils import get_logger
from bucketsync.core.storage import StorageClient, get_storage_service
from bucketsync.core.storage.exceptions import UnsupportedProviderError
from bucketsync.services.cache import FileCacheService, ModificationWatcher
from bucketsync.services.image import ImageUploadService
from bucketsync.services.sync import SyncService

logger = get_logger(__name__)


def get_storage_client() -> StorageClient:
    """获取存储客户端，服务商不受支持时返回400"""
    try:
        return get_storage_service()
    except UnsupportedProviderError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message) from e


def get_optional_storage_client() -> Optional[StorageClient]:
    """获取存储客户端，服务商不受支持时返回None（图片只保存到本地）"""
    try:
        return get_storage_service()
    except UnsupportedProviderError as e:
        logger.warning("存储服务商配置无效，图片将只保存到本地", extra={'error': e.message})
        return None


@lru_cache
def get_file_cache() -> FileCacheService:
    """获取文件缓存服务（进程内单例）"""
    return FileCacheService()


@lru_cache
def get_github_client() -> GitHubContentClient:
    """获取GitHub客户端（进程内单例，保留速率限制状态）"""
    return GitHubContentClient()


@lru_cache
def get_modification_watcher() -> ModificationWatcher:
    """获取文件修改监听器（进程内单例，防抖状态需要跨请求保留）"""
    reader = SyncService(github=get_github_client(), cache=get_file_cache())
    return ModificationWatcher(cache=get_file_cache(), read_content=reader.read_local_file)


def get_sync_service(
    github: GitHubContentClient = Depends(get_github_client),
    cache: FileCacheService = Depends(get_file_cache)
) -> SyncService:
    return SyncService(github=github, cache=cache)


def get_image_upload_service(
    storage: Optional[StorageClient] = Depends(get_optional_storage_client)
) -> ImageUploadService:
    return ImageUploadService(storage=storage)
