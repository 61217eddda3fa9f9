"""
同步与文件缓存相关的Pydantic模型
"""

from typing import Optional

from pydantic import BaseModel, Field


class SyncFileRequest(BaseModel):
    """单文件同步请求"""
    path: str = Field(..., min_length=1, description="笔记库内的相对路径")


class SyncResultData(BaseModel):
    """同步结果"""
    success: bool
    message: str
    files_processed: int = 0
    files_failed: int = 0


class FileStatusData(BaseModel):
    """文件同步状态"""
    path: str
    source: str
    is_published: bool
    is_synced: bool
    is_modified: bool
    last_modified: Optional[str] = None
    rate_limited: bool = False
    wait_minutes: Optional[int] = None
    message: Optional[str] = None


class RateLimitData(BaseModel):
    """速率限制状态"""
    can_proceed: bool
    remaining: Optional[int] = None
    wait_minutes: Optional[int] = None
    message: Optional[str] = None


class CacheStatsData(BaseModel):
    """缓存统计"""
    total_files: int
    published_files: int
    synced_files: int
    expired_caches: int


class CacheEntryData(BaseModel):
    """缓存条目"""
    local_path: str
    remote_path: str
    last_modified: str
    remote_revision: str
    is_published: bool
    is_synced: bool
    cache_time: int
    file_size: int
    content_hash: str
