"""
GitHub同步模块
"""

from bucketsync.core.github.client import GitHubContentClient, parse_repository_url
from bucketsync.core.github.errors import (
    GitHubAPIError,
    GitHubErrorInfo,
    classify_github_error,
)
from bucketsync.core.github.models import (
    DownloadedFile,
    DownloadResult,
    LastModifiedResult,
    RateLimitStatus,
    RepositoryInfo,
    SyncResult,
)

__all__ = [
    'GitHubContentClient',
    'parse_repository_url',
    'GitHubAPIError',
    'GitHubErrorInfo',
    'classify_github_error',
    'DownloadedFile',
    'DownloadResult',
    'LastModifiedResult',
    'RateLimitStatus',
    'RepositoryInfo',
    'SyncResult',
]
