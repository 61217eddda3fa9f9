"""
GitHub内容API客户端
负责文件的上传、下载、最后修改时间查询以及速率限制检查
"""

import base64
import re
import time
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import quote

import httpx

from bucketsync.core.config import settings
from bucketsync.core.github.errors import (
    GitHubAPIError,
    classify_github_error,
    minutes_until,
)
from bucketsync.core.github.models import (
    DownloadedFile,
    DownloadResult,
    LastModifiedResult,
    RateLimitStatus,
    RepositoryInfo,
    SyncResult,
)
from bucketsync.core.log_utils import get_logger

logger = get_logger(__name__)

RATE_LIMIT_WARNING_THRESHOLD = 10

INVALID_URL_MESSAGE = "无效的仓库URL格式"
RATE_LIMITED_MESSAGE = "GitHub API调用次数已达上限，请稍后重试"

_FULL_URL_RE = re.compile(r"^https://github\.com/([^/]+)/([^/]+)(?:/(.*))?$")
_SHORT_URL_RE = re.compile(r"^([^/]+)/([^/]+)(?:/(.*))?$")


def parse_repository_url(url: str) -> Optional[RepositoryInfo]:
    """
    解析仓库地址

    支持 https://github.com/owner/repo/path 与 owner/repo/path 两种格式。

    Returns:
        Optional[RepositoryInfo]: 无法解析时返回None
    """
    if not url or not url.strip():
        return None

    clean_url = url.strip()
    match = _FULL_URL_RE.match(clean_url) or _SHORT_URL_RE.match(clean_url)
    if not match:
        logger.warning("无法解析仓库地址", extra={'repository_url': clean_url})
        return None

    return RepositoryInfo(
        owner=match.group(1),
        repo=match.group(2),
        path=(match.group(3) or "").strip("/")
    )


class GitHubContentClient:
    """
    GitHub内容API客户端

    Args:
        token: GitHub个人访问令牌
        api_url: API地址
        timeout: 请求超时时间（秒）
        transport: 自定义 httpx 传输层（测试时注入）
        clock: 返回当前时间（秒）的函数
    """

    def __init__(
        self,
        token: Optional[str] = None,
        api_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Callable[[], float] = time.time
    ) -> None:
        self.token = token if token is not None else settings.github_token
        self.api_url = (api_url or settings.github_api_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.github_timeout
        self.transport = transport
        self._clock = clock
        self.rate_limit_remaining: Optional[int] = None

    def update_token(self, token: str) -> None:
        """更新Token并重置速率限制信息"""
        self.token = token
        self.rate_limit_remaining = None

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        """
        发送API请求并返回JSON

        Raises:
            GitHubAPIError: 返回非2xx时抛出
            httpx.RequestError: 网络错误时抛出
        """
        async with httpx.AsyncClient(
            base_url=self.api_url,
            headers=self._headers(),
            timeout=self.timeout,
            transport=self.transport
        ) as client:
            response = await client.request(method, path, **kwargs)

        if not response.is_success:
            try:
                message = response.json().get("message", response.text)
            except (ValueError, AttributeError):
                message = response.text
            raise GitHubAPIError(message, response.status_code, response.headers)

        if not response.content:
            return None
        return response.json()

    @staticmethod
    def _contents_path(repo_info: RepositoryInfo, path: str) -> str:
        return "/repos/{}/{}/contents/{}".format(
            repo_info.owner, repo_info.repo, quote(path, safe="/")
        )

    async def check_rate_limit(self) -> RateLimitStatus:
        """
        检查速率限制

        剩余次数为0时不允许继续；少于10次时给出提醒；
        查询本身失败时允许继续。
        """
        try:
            data = await self._request("GET", "/rate_limit")
            core = data["resources"]["core"]
            remaining = int(core["remaining"])
            reset = int(core["reset"])
        except Exception as e:
            logger.warning("获取GitHub速率限制失败", extra={'error': str(e)})
            return RateLimitStatus(can_proceed=True)

        self.rate_limit_remaining = remaining

        if remaining == 0:
            wait = minutes_until(reset, self._clock())
            return RateLimitStatus(
                can_proceed=False,
                remaining=0,
                wait_minutes=wait,
                message="GitHub API调用次数已达上限，请等待 {} 分钟后重试".format(wait)
            )

        if remaining < RATE_LIMIT_WARNING_THRESHOLD:
            return RateLimitStatus(
                can_proceed=True,
                remaining=remaining,
                message="GitHub API剩余调用次数 {}，请谨慎使用".format(remaining)
            )

        return RateLimitStatus(can_proceed=True, remaining=remaining)

    async def _before_api_call(self) -> bool:
        status = await self.check_rate_limit()
        if not status.can_proceed:
            logger.warning(status.message)
            return False
        if status.message:
            logger.warning(status.message, extra={'remaining': status.remaining})
        return True

    def _failure(self, operation: str, error: Exception) -> str:
        info = classify_github_error(error, self._clock())
        logger.error(
            "{}失败".format(operation),
            exception=error,
            extra={'is_retryable': info.is_retryable, 'status_code': info.status_code}
        )
        return info.message

    async def test_connection(self, repository_url: str) -> SyncResult:
        """测试Token与仓库访问权限，仓库子目录不存在不算失败"""
        repo_info = parse_repository_url(repository_url)
        if not repo_info:
            return SyncResult(success=False, message=INVALID_URL_MESSAGE)

        if not await self._before_api_call():
            return SyncResult(success=False, message=RATE_LIMITED_MESSAGE)

        try:
            user = await self._request("GET", "/user")
            repo = await self._request("GET", f"/repos/{repo_info.owner}/{repo_info.repo}")

            if repo_info.path:
                try:
                    await self._request("GET", self._contents_path(repo_info, repo_info.path))
                except GitHubAPIError as e:
                    if e.status_code != 404:
                        raise

            can_push = bool((repo.get("permissions") or {}).get("push"))
            return SyncResult(
                success=True,
                message="连接成功: 用户 {}，仓库 {}（{}）".format(
                    user.get("login", ""), repo_info.full_name, "读写" if can_push else "只读"
                )
            )
        except Exception as e:
            return SyncResult(success=False, message=self._failure("GitHub连接测试", e))

    async def _get_file_sha(self, repo_info: RepositoryInfo, full_path: str) -> Optional[str]:
        try:
            data = await self._request("GET", self._contents_path(repo_info, full_path))
        except GitHubAPIError as e:
            if e.status_code == 404:
                return None
            raise
        if isinstance(data, dict):
            return data.get("sha")
        return None

    async def upload_file(self, repository_url: str, file_path: str, content: str) -> SyncResult:
        """
        上传或更新文件

        Args:
            repository_url: 仓库地址
            file_path: 相对仓库子目录的文件路径
            content: 文件文本内容
        """
        repo_info = parse_repository_url(repository_url)
        if not repo_info:
            return SyncResult(success=False, message=INVALID_URL_MESSAGE)

        if not await self._before_api_call():
            return SyncResult(success=False, message=RATE_LIMITED_MESSAGE)

        full_path = repo_info.full_path(file_path)
        try:
            sha = await self._get_file_sha(repo_info, full_path)
            payload: Dict[str, Any] = {
                "message": f"Update {file_path}",
                "content": base64.b64encode(content.encode("utf-8")).decode("ascii"),
            }
            if sha:
                payload["sha"] = sha

            data = await self._request(
                "PUT", self._contents_path(repo_info, full_path), json=payload
            )
            logger.info("文件上传到GitHub成功", extra={'remote_path': full_path})
            return SyncResult(
                success=True,
                message="文件上传成功",
                files_processed=1,
                revision=((data or {}).get("content") or {}).get("sha")
            )
        except Exception as e:
            return SyncResult(success=False, message=self._failure("文件上传", e), files_failed=1)

    @staticmethod
    def _decode_content(data: Dict[str, Any]) -> str:
        return base64.b64decode(data.get("content", "")).decode("utf-8")

    async def download_file(self, repository_url: str, file_path: str) -> DownloadResult:
        """下载单个文件"""
        repo_info = parse_repository_url(repository_url)
        if not repo_info:
            return DownloadResult(success=False, message=INVALID_URL_MESSAGE)

        if not await self._before_api_call():
            return DownloadResult(success=False, message=RATE_LIMITED_MESSAGE)

        try:
            data = await self._request(
                "GET", self._contents_path(repo_info, repo_info.full_path(file_path))
            )
            if not isinstance(data, dict) or "content" not in data:
                return DownloadResult(success=False, message="指定路径不是文件")
            return DownloadResult(
                success=True,
                message="文件下载成功",
                files_processed=1,
                content=self._decode_content(data)
            )
        except Exception as e:
            return DownloadResult(success=False, message=self._failure("文件下载", e))

    async def _list_files_recursively(self, repo_info: RepositoryInfo, path: str) -> List[Dict[str, Any]]:
        """递归列出目录下所有文件，目录读取失败时跳过"""
        files: List[Dict[str, Any]] = []
        try:
            data = await self._request("GET", self._contents_path(repo_info, path))
        except Exception as e:
            logger.error("读取远端目录失败", exception=e, extra={'remote_path': path})
            return files

        if isinstance(data, list):
            for item in data:
                if item.get("type") == "file":
                    files.append(item)
                elif item.get("type") == "dir":
                    files.extend(await self._list_files_recursively(repo_info, item["path"]))
        return files

    async def download_all_files(self, repository_url: str) -> DownloadResult:
        """下载仓库子目录下的全部文件，单个文件失败时跳过"""
        repo_info = parse_repository_url(repository_url)
        if not repo_info:
            return DownloadResult(success=False, message=INVALID_URL_MESSAGE)

        if not await self._before_api_call():
            return DownloadResult(success=False, message=RATE_LIMITED_MESSAGE)

        try:
            items = await self._list_files_recursively(repo_info, repo_info.path)
            files: List[DownloadedFile] = []
            failed = 0
            prefix = f"{repo_info.path}/" if repo_info.path else ""

            for item in items:
                remote_path = item["path"]
                try:
                    data = await self._request("GET", self._contents_path(repo_info, remote_path))
                    if not isinstance(data, dict) or "content" not in data:
                        continue
                    relative = remote_path[len(prefix):] if prefix and remote_path.startswith(prefix) else remote_path
                    files.append(DownloadedFile(path=relative, content=self._decode_content(data)))
                except Exception as e:
                    failed += 1
                    logger.warning("跳过远端文件", extra={'remote_path': remote_path, 'error': str(e)})

            return DownloadResult(
                success=True,
                message="所有文件下载成功",
                files_processed=len(files),
                files_failed=failed,
                files=files
            )
        except Exception as e:
            return DownloadResult(success=False, message=self._failure("下载全部文件", e))

    async def get_file_last_modified(self, repository_url: str, file_path: str) -> LastModifiedResult:
        """
        查询文件最新一次提交的时间

        已知剩余调用次数为0时直接返回失败，不发起请求。
        """
        repo_info = parse_repository_url(repository_url)
        if not repo_info:
            return LastModifiedResult(success=False, exists=False)

        if self.rate_limit_remaining == 0:
            return LastModifiedResult(success=False, exists=False)

        try:
            commits = await self._request(
                "GET",
                f"/repos/{repo_info.owner}/{repo_info.repo}/commits",
                params={"path": repo_info.full_path(file_path), "per_page": 1}
            )
        except Exception as e:
            self._failure("获取文件最后修改时间", e)
            return LastModifiedResult(success=False, exists=False)

        if not commits:
            return LastModifiedResult(success=True, exists=False)

        commit = commits[0].get("commit", {})
        last_modified = (
            (commit.get("committer") or {}).get("date")
            or (commit.get("author") or {}).get("date")
        )
        return LastModifiedResult(success=True, exists=True, last_modified=last_modified)


__all__ = ['GitHubContentClient', 'parse_repository_url']
