"""
笔记库同步服务单元测试
GitHub客户端使用 AsyncMock 替代，笔记库使用临时目录
"""

from unittest.mock import AsyncMock

import pytest

from bucketsync.core.config import settings
from bucketsync.core.github import (
    DownloadedFile,
    DownloadResult,
    GitHubContentClient,
    LastModifiedResult,
    RateLimitStatus,
    SyncResult,
)
from bucketsync.services.cache import FileCacheService, calculate_content_hash
from bucketsync.services.sync import NotTextFileError, SyncService
from bucketsync.services.sync.service import NOT_CONFIGURED_MESSAGE

REPO_URL = "https://github.com/octo/vault"


@pytest.fixture
def github():
    client = AsyncMock(spec=GitHubContentClient)
    client.token = "ghp_test"
    client.check_rate_limit.return_value = RateLimitStatus(can_proceed=True, remaining=5000)
    return client


@pytest.fixture
def vault(tmp_path):
    root = tmp_path / "vault"
    (root / "daily").mkdir(parents=True)
    (root / ".obsidian").mkdir()
    (root / "a.md").write_text("hello", encoding="utf-8")
    (root / "daily" / "b.md").write_text("world", encoding="utf-8")
    (root / ".obsidian" / "app.json").write_text("{}", encoding="utf-8")
    return root


@pytest.fixture
def cache(memory_store, fake_clock):
    return FileCacheService(store=memory_store, clock=fake_clock)


@pytest.fixture
def service(github, cache, vault):
    return SyncService(
        github=github,
        cache=cache,
        vault_dir=vault,
        repository_url=REPO_URL,
        excluded_dirs=[".obsidian"]
    )


@pytest.mark.unit
@pytest.mark.sync
class TestLocalFiles:
    """本地文件测试类"""

    def test_list_local_files_excludes_dirs(self, service):
        assert service.list_local_files() == ["a.md", "daily/b.md"]

    def test_excludes_local_image_dir(self, service, vault, monkeypatch):
        (vault / "assets").mkdir()
        (vault / "assets" / "image-1.png").write_bytes(b"png")
        monkeypatch.setattr(settings, "keep_local_images", True)
        monkeypatch.setattr(settings, "local_image_path", "assets")

        assert "assets/image-1.png" not in service.list_local_files()

    @pytest.mark.asyncio
    async def test_read_missing_file(self, service):
        assert await service.read_local_file("missing.md") is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("path", ["../outside.md", "daily/../../outside.md", "   "])
    async def test_rejects_paths_outside_vault(self, service, path):
        with pytest.raises(ValueError):
            await service.read_local_file(path)

    def test_is_vault_empty(self, github, cache, tmp_path):
        empty = SyncService(github=github, cache=cache, vault_dir=tmp_path / "none", repository_url=REPO_URL)
        assert empty.is_vault_empty() is True


@pytest.mark.unit
@pytest.mark.sync
class TestPush:
    """推送测试类"""

    @pytest.mark.asyncio
    async def test_push_single_file_updates_cache(self, service, github, cache):
        github.upload_file.return_value = SyncResult(
            success=True, message="文件上传成功", files_processed=1, revision="sha-a"
        )

        result = await service.sync_file_to_remote("a.md")

        assert result.success is True
        github.upload_file.assert_awaited_once_with(REPO_URL, "a.md", "hello")
        entry = await cache.get("a.md")
        assert entry.remote_revision == "sha-a"
        assert entry.is_published is True
        assert entry.content_hash == calculate_content_hash("hello")

    @pytest.mark.asyncio
    async def test_push_failure_leaves_cache(self, service, github, cache):
        github.upload_file.return_value = SyncResult(success=False, message="文件冲突", files_failed=1)

        result = await service.sync_file_to_remote("a.md")

        assert result.success is False
        assert await cache.get("a.md") is None

    @pytest.mark.asyncio
    async def test_push_missing_file(self, service, github):
        result = await service.sync_file_to_remote("missing.md")

        assert result.success is False
        github.upload_file.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_push_all_counts_failures(self, service, github):
        github.upload_file.side_effect = [
            SyncResult(success=True, message="ok", files_processed=1, revision="s"),
            SyncResult(success=False, message="boom", files_failed=1),
        ]

        result = await service.force_sync_local_to_remote()

        assert result.success is True
        assert result.files_processed == 1
        assert result.files_failed == 1
        assert result.message == "同步完成，成功 1 个，失败 1 个"
        pushed = [call.args[1] for call in github.upload_file.await_args_list]
        assert pushed == ["a.md", "daily/b.md"]

    @pytest.mark.asyncio
    async def test_push_all_continues_after_exception(self, service, github):
        github.upload_file.side_effect = [
            RuntimeError("unexpected"),
            SyncResult(success=True, message="ok", files_processed=1),
        ]

        result = await service.force_sync_local_to_remote()

        assert result.files_processed == 1
        assert result.files_failed == 1

    @pytest.mark.asyncio
    async def test_push_all_success_message(self, service, github):
        github.upload_file.return_value = SyncResult(success=True, message="ok", files_processed=1)

        result = await service.force_sync_local_to_remote()

        assert result.message == "全部文件同步成功"
        assert result.files_processed == 2

    @pytest.mark.asyncio
    async def test_push_all_skips_binary_files(self, service, github, vault):
        (vault / "daily" / "photo.png").write_bytes(b"\x89PNG\r\n\x1a\n\xff\xfe")
        github.upload_file.return_value = SyncResult(success=True, message="ok", files_processed=1)

        result = await service.force_sync_local_to_remote()

        assert result.files_processed == 2
        assert result.files_failed == 0
        assert result.message == "全部文件同步成功，跳过 1 个非文本文件"
        pushed = [call.args[1] for call in github.upload_file.await_args_list]
        assert pushed == ["a.md", "daily/b.md"]

    @pytest.mark.asyncio
    async def test_push_binary_file_rejected(self, service, github, vault):
        (vault / "photo.png").write_bytes(b"\xff\xd8\xff\xe0")

        with pytest.raises(NotTextFileError):
            await service.sync_file_to_remote("photo.png")
        github.upload_file.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_not_configured(self, github, cache, vault):
        service = SyncService(github=github, cache=cache, vault_dir=vault, repository_url="")

        result = await service.force_sync_local_to_remote()

        assert result.success is False
        assert result.message == NOT_CONFIGURED_MESSAGE
        github.upload_file.assert_not_awaited()


@pytest.mark.unit
@pytest.mark.sync
class TestPull:
    """拉取测试类"""

    @pytest.mark.asyncio
    async def test_pull_single_file(self, service, github, vault):
        github.download_file.return_value = DownloadResult(
            success=True, message="ok", files_processed=1, content="remote"
        )

        result = await service.pull_remote_to_file("a.md")

        assert result.success is True
        assert (vault / "a.md").read_text(encoding="utf-8") == "remote"

    @pytest.mark.asyncio
    async def test_pull_all_writes_files(self, service, github, vault, cache):
        github.download_all_files.return_value = DownloadResult(
            success=True, message="ok", files_processed=2, files_failed=1,
            files=[DownloadedFile("new/c.md", "c"), DownloadedFile("a.md", "A")]
        )

        result = await service.force_sync_remote_to_local()

        assert result.files_processed == 2
        assert result.files_failed == 1
        assert (vault / "new" / "c.md").read_text(encoding="utf-8") == "c"
        assert (vault / "a.md").read_text(encoding="utf-8") == "A"
        assert (await cache.get("new/c.md")).is_synced is True

    @pytest.mark.asyncio
    async def test_pull_all_rejects_escaping_paths(self, service, github, tmp_path):
        github.download_all_files.return_value = DownloadResult(
            success=True, message="ok", files=[DownloadedFile("../evil.md", "x")]
        )

        result = await service.force_sync_remote_to_local()

        assert result.files_failed == 1
        assert not (tmp_path / "evil.md").exists()

    @pytest.mark.asyncio
    async def test_initialize_requires_empty_vault(self, service, github):
        result = await service.initialize_repository()

        assert result.success is False
        github.download_all_files.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_initialize_empty_vault(self, github, cache, tmp_path):
        github.download_all_files.return_value = DownloadResult(
            success=True, message="ok", files=[DownloadedFile("a.md", "a")]
        )
        service = SyncService(github=github, cache=cache, vault_dir=tmp_path / "v", repository_url=REPO_URL)

        result = await service.initialize_repository()

        assert result.success is True
        assert (tmp_path / "v" / "a.md").exists()


@pytest.mark.unit
@pytest.mark.sync
class TestFileStatus:
    """文件状态测试类"""

    @pytest.mark.asyncio
    async def test_status_from_remote_then_cache(self, service, github):
        github.get_file_last_modified.return_value = LastModifiedResult(
            success=True, exists=True, last_modified="2024-03-05T08:00:00Z"
        )

        first = await service.file_status("a.md")
        second = await service.file_status("a.md")

        assert first.source == "remote"
        assert first.is_published is True
        assert first.is_modified is False
        assert first.last_modified == "2024-03-05T08:00:00Z"
        assert second.source == "cache"
        assert second.is_modified is False
        github.get_file_last_modified.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_status_detects_local_change(self, service, github, vault):
        github.get_file_last_modified.return_value = LastModifiedResult(success=True, exists=False)
        await service.file_status("a.md")

        (vault / "a.md").write_text("hello!", encoding="utf-8")
        status = await service.file_status("a.md")

        assert status.source == "cache"
        assert status.is_published is False
        assert status.is_modified is True

    @pytest.mark.asyncio
    async def test_status_rate_limited(self, service, github):
        github.check_rate_limit.return_value = RateLimitStatus(
            can_proceed=False, remaining=0, wait_minutes=12, message="已达上限"
        )

        status = await service.file_status("a.md")

        assert status.rate_limited is True
        assert status.wait_minutes == 12
        github.get_file_last_modified.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_status_remote_failure(self, service, github):
        github.get_file_last_modified.return_value = LastModifiedResult(success=False, exists=False)

        status = await service.file_status("a.md")

        assert status.message == "查询远端状态失败"
        assert status.is_published is False

    @pytest.mark.asyncio
    async def test_status_not_configured(self, github, cache, vault):
        github.token = ""
        service = SyncService(github=github, cache=cache, vault_dir=vault, repository_url=REPO_URL)

        status = await service.file_status("a.md")

        assert status.message == NOT_CONFIGURED_MESSAGE
        github.check_rate_limit.assert_not_awaited()
