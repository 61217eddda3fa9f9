"""
GitHub同步数据模型
"""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class RepositoryInfo:
    """仓库地址解析结果"""
    owner: str
    repo: str
    path: str = ""

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    def full_path(self, file_path: str) -> str:
        """拼接仓库内子目录与文件路径"""
        return f"{self.path}/{file_path}" if self.path else file_path


@dataclass(frozen=True)
class RateLimitStatus:
    """
    速率限制检查结果

    Attributes:
        can_proceed: 是否可以继续调用
        remaining: 剩余调用次数，未知时为None
        wait_minutes: 需要等待的分钟数
        message: 提示信息（接近上限或已达上限时）
    """
    can_proceed: bool
    remaining: Optional[int] = None
    wait_minutes: Optional[int] = None
    message: Optional[str] = None


@dataclass
class SyncResult:
    """同步结果"""
    success: bool
    message: str
    files_processed: int = 0
    files_failed: int = 0
    revision: Optional[str] = None  # 上传后远端文件的sha


@dataclass(frozen=True)
class DownloadedFile:
    """下载的文件，path 为相对仓库子目录的路径"""
    path: str
    content: str


@dataclass
class DownloadResult(SyncResult):
    content: Optional[str] = None
    files: List[DownloadedFile] = field(default_factory=list)


@dataclass(frozen=True)
class LastModifiedResult:
    """远端文件最后修改时间查询结果"""
    success: bool
    exists: bool
    last_modified: Optional[str] = None


__all__ = [
    'RepositoryInfo',
    'RateLimitStatus',
    'SyncResult',
    'DownloadedFile',
    'DownloadResult',
    'LastModifiedResult',
]
