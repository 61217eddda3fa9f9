"""
文件缓存API端点
"""

from fastapi import APIRouter, Depends, HTTPException, status

from bucketsync.api.deps import get_file_cache, get_modification_watcher
from bucketsync.schemas.common import StandardResponse
from bucketsync.schemas.sync import CacheEntryData, CacheStatsData, SyncFileRequest
from bucketsync.services.cache import FileCacheService, ModificationWatcher

router = APIRouter(tags=["文件缓存"])


@router.get("/stats", response_model=StandardResponse, summary="缓存统计")
async def cache_stats(cache: FileCacheService = Depends(get_file_cache)) -> StandardResponse:
    stats = await cache.stats()
    return StandardResponse(status="success", message="获取缓存统计成功", data=CacheStatsData(**stats))


@router.get("/entries/{path:path}", response_model=StandardResponse, summary="获取文件缓存")
async def get_cache_entry(
    path: str,
    cache: FileCacheService = Depends(get_file_cache)
) -> StandardResponse:
    entry = await cache.get(path)
    if entry is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="文件缓存不存在或已过期")
    return StandardResponse(
        status="success",
        message="获取文件缓存成功",
        data=CacheEntryData(**entry.to_dict())
    )


@router.delete("/entries/{path:path}", response_model=StandardResponse, summary="移除文件缓存")
async def remove_cache_entry(
    path: str,
    cache: FileCacheService = Depends(get_file_cache)
) -> StandardResponse:
    await cache.remove(path)
    return StandardResponse(status="success", message="文件缓存已移除")


@router.delete("", response_model=StandardResponse, summary="清空文件缓存")
async def clear_cache(cache: FileCacheService = Depends(get_file_cache)) -> StandardResponse:
    await cache.clear()
    return StandardResponse(status="success", message="文件缓存已清空")


@router.post(
    "/modified",
    response_model=StandardResponse,
    summary="通知文件修改",
    description="防抖后重新计算内容哈希，内容变化时将缓存标记为未同步"
)
async def notify_modified(
    request: SyncFileRequest,
    watcher: ModificationWatcher = Depends(get_modification_watcher)
) -> StandardResponse:
    watcher.notify(request.path)
    return StandardResponse(status="success", message="已记录文件修改")
