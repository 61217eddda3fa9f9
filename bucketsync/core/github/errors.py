"""
GitHub API错误定义与分类
分类结果只用于提示信息，不做自动重试
"""

import math
import time
from dataclasses import dataclass
from typing import Mapping, Optional

import httpx


class GitHubAPIError(Exception):
    """
    GitHub API返回非2xx状态码

    Attributes:
        status_code: HTTP状态码
        headers: 响应头
        message: 服务端返回的错误信息
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        headers: Optional[Mapping[str, str]] = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.headers = dict(headers or {})


@dataclass(frozen=True)
class GitHubErrorInfo:
    """错误分类结果"""
    message: str
    is_retryable: bool
    status_code: Optional[int] = None


NON_RETRYABLE_MESSAGES = {
    401: "GitHub Token无效或已过期，请检查Token是否正确以及权限是否足够",
    404: "资源不存在，请检查仓库路径、文件路径以及Token的访问权限",
    409: "文件冲突，远端文件已被修改，请先从远端同步最新版本",
    422: "请求参数无效，请检查文件路径格式以及文件大小",
}

SERVER_ERROR_STATUSES = (500, 502, 503, 504)


def minutes_until(reset_epoch: float, now: Optional[float] = None) -> int:
    """距离重置时间的分钟数，向上取整"""
    now = time.time() if now is None else now
    return math.ceil((reset_epoch - now) / 60)


def _lower_headers(headers: Mapping[str, str]) -> dict:
    return {key.lower(): value for key, value in headers.items()}


def classify_github_error(error: Exception, now: Optional[float] = None) -> GitHubErrorInfo:
    """
    将GitHub调用中的异常分类为可重试/不可重试

    403 且 x-ratelimit-remaining 为 0、5xx、网络错误、超时为可重试；
    401/404/409/422 以及普通 403 为不可重试。

    Args:
        error: 捕获到的异常
        now: 当前时间（秒），用于计算等待分钟数

    Returns:
        GitHubErrorInfo: 分类结果
    """
    if isinstance(error, GitHubAPIError):
        status = error.status_code

        if status == 403:
            headers = _lower_headers(error.headers)
            if headers.get("x-ratelimit-remaining") == "0":
                reset = headers.get("x-ratelimit-reset")
                try:
                    wait = minutes_until(int(reset), now)
                except (TypeError, ValueError):
                    wait = 60
                return GitHubErrorInfo(
                    message="GitHub API每小时调用次数已达上限，请等待 {} 分钟后重试".format(wait),
                    is_retryable=True,
                    status_code=status
                )
            return GitHubErrorInfo(
                message="GitHub访问被拒绝，请检查Token权限以及仓库是否存在",
                is_retryable=False,
                status_code=status
            )

        if status in NON_RETRYABLE_MESSAGES:
            return GitHubErrorInfo(
                message=NON_RETRYABLE_MESSAGES[status],
                is_retryable=False,
                status_code=status
            )

        if status in SERVER_ERROR_STATUSES:
            return GitHubErrorInfo(
                message="GitHub服务器错误 ({})，请稍后重试".format(status),
                is_retryable=True,
                status_code=status
            )

        return GitHubErrorInfo(
            message="GitHub API错误 ({}): {}".format(status, error.message or "未知错误"),
            is_retryable=False,
            status_code=status
        )

    if isinstance(error, httpx.TimeoutException):
        return GitHubErrorInfo(message="请求超时，请检查网络连接或稍后重试", is_retryable=True)

    if isinstance(error, httpx.RequestError):
        return GitHubErrorInfo(
            message="网络连接失败，请检查是否能访问GitHub以及代理设置",
            is_retryable=True
        )

    return GitHubErrorInfo(
        message="操作失败: {}".format(str(error) or "未知错误"),
        is_retryable=False
    )


__all__ = ['GitHubAPIError', 'GitHubErrorInfo', 'classify_github_error', 'minutes_until']
