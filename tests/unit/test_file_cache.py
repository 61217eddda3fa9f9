"""
文件状态缓存单元测试
"""

import asyncio
import json

import pytest

from bucketsync.services.cache import (
    FileCacheEntry,
    FileCacheService,
    LocalFileStore,
    calculate_content_hash,
    create_store,
)
from bucketsync.services.cache.file_cache import _to_base36


def _entry(path="notes/a.md", **overrides):
    data = dict(
        local_path=path,
        remote_path=path,
        last_modified="2024-03-05T08:00:00Z",
        remote_revision="sha-1",
        is_published=True,
        is_synced=True,
        content_hash=calculate_content_hash("hello"),
        file_size=5
    )
    data.update(overrides)
    return FileCacheEntry(**data)


@pytest.mark.unit
@pytest.mark.cache
class TestContentHash:
    """内容哈希测试类"""

    def test_known_values(self):
        assert calculate_content_hash("") == "0"
        assert calculate_content_hash("a") == "2p"
        assert calculate_content_hash("ab") == "2e9"
        assert calculate_content_hash("hello") == "1n1e4y"

    def test_wraps_to_signed_32_bit(self):
        # 该字符串的累加结果恰好为 -2^31
        assert calculate_content_hash("polygenelubricants") == "-zik0zk"

    def test_counts_utf16_code_units(self):
        expected = _to_base36(0xD83D * 31 + 0xDE00)
        assert calculate_content_hash("\U0001F600") == expected

    def test_different_content_differs(self):
        assert calculate_content_hash("# title\n") != calculate_content_hash("# title\n\n")


@pytest.mark.unit
@pytest.mark.cache
class TestFileCacheService:
    """文件缓存服务测试类"""

    def setup_method(self):
        self.path = "notes/a.md"

    def _service(self, store, clock, max_age=300):
        return FileCacheService(store=store, max_age_seconds=max_age, cache_key="test-cache", clock=clock)

    @pytest.mark.asyncio
    async def test_put_stamps_cache_time_and_persists(self, memory_store, fake_clock):
        service = self._service(memory_store, fake_clock)

        stored = await service.put(self.path, _entry())

        assert stored.cache_time == int(fake_clock.now * 1000)
        persisted = json.loads(memory_store.data["test-cache"])
        assert persisted[self.path]["remote_revision"] == "sha-1"
        assert await service.get(self.path) == stored

    @pytest.mark.asyncio
    async def test_entry_expires(self, memory_store, fake_clock):
        service = self._service(memory_store, fake_clock, max_age=300)
        await service.put(self.path, _entry())

        fake_clock.advance(299)
        assert await service.get(self.path) is not None

        fake_clock.advance(1)
        assert await service.get(self.path) is None
        assert self.path not in json.loads(memory_store.data["test-cache"])

    @pytest.mark.asyncio
    async def test_is_cache_valid_with_custom_age(self, memory_store, fake_clock):
        service = self._service(memory_store, fake_clock)
        entry = await service.put(self.path, _entry())

        fake_clock.advance(10)
        assert service.is_cache_valid(entry, max_age=60) is True
        assert service.is_cache_valid(entry, max_age=5) is False

    @pytest.mark.asyncio
    async def test_zero_max_age_always_expired(self, memory_store, fake_clock):
        service = self._service(memory_store, fake_clock, max_age=300)
        entry = await service.put(self.path, _entry())

        assert service.is_cache_valid(entry) is True
        assert service.is_cache_valid(entry, max_age=0) is False

    @pytest.mark.asyncio
    async def test_is_modified_locally(self, memory_store, fake_clock):
        service = self._service(memory_store, fake_clock)

        assert await service.is_modified_locally(self.path, "hello") is True

        await service.put(self.path, _entry())
        assert await service.is_modified_locally(self.path, "hello") is False
        assert await service.is_modified_locally(self.path, "hello!") is True
        assert await service.is_modified_locally(self.path, None) is True

        fake_clock.advance(301)
        assert await service.is_modified_locally(self.path, "hello") is True

    @pytest.mark.asyncio
    async def test_is_modified_locally_on_error(self, memory_store, fake_clock):
        async def broken_get(key):
            raise RuntimeError("store down")

        memory_store.get = broken_get
        service = self._service(memory_store, fake_clock)

        assert await service.is_modified_locally(self.path, "hello") is True

    @pytest.mark.asyncio
    async def test_update_after_sync(self, memory_store, fake_clock):
        service = self._service(memory_store, fake_clock)

        entry = await service.update_after_sync(
            self.path, "remote/a.md", "sha-2", "2024-03-05T09:00:00Z", True, "hello"
        )

        assert entry.is_synced is True
        assert entry.is_published is True
        assert entry.remote_path == "remote/a.md"
        assert entry.remote_revision == "sha-2"
        assert entry.file_size == 5
        assert entry.content_hash == calculate_content_hash("hello")

    @pytest.mark.asyncio
    async def test_update_after_sync_missing_file(self, memory_store, fake_clock):
        service = self._service(memory_store, fake_clock)

        assert await service.update_after_sync(self.path, self.path, "", "", False, None) is None
        assert memory_store.set_calls == 0

    @pytest.mark.asyncio
    async def test_mark_modified(self, memory_store, fake_clock):
        service = self._service(memory_store, fake_clock)
        await service.put(self.path, _entry())

        assert await service.mark_modified(self.path, "hello") is False
        assert await service.mark_modified(self.path, "hello world") is True

        entry = await service.get(self.path)
        assert entry.is_synced is False
        assert entry.file_size == 11
        assert entry.content_hash == calculate_content_hash("hello world")

    @pytest.mark.asyncio
    async def test_mark_modified_without_entry(self, memory_store, fake_clock):
        service = self._service(memory_store, fake_clock)
        assert await service.mark_modified(self.path, "x") is False

    @pytest.mark.asyncio
    async def test_load_existing_blob(self, memory_store, fake_clock):
        memory_store.data["test-cache"] = json.dumps({
            self.path: _entry(cache_time=int(fake_clock.now * 1000)).to_dict()
        })
        service = self._service(memory_store, fake_clock)

        entry = await service.get(self.path)

        assert entry is not None
        assert entry.remote_revision == "sha-1"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("blob", ["{not json", "[1, 2]", '{"a.md": {"unknown": 1}}'])
    async def test_corrupt_blob_discarded(self, memory_store, fake_clock, blob):
        memory_store.data["test-cache"] = blob
        service = self._service(memory_store, fake_clock)

        assert await service.all_entries() == []
        assert "test-cache" not in memory_store.data
        assert memory_store.delete_calls == 1

    @pytest.mark.asyncio
    async def test_remove_and_clear(self, memory_store, fake_clock):
        service = self._service(memory_store, fake_clock)
        await service.put("a.md", _entry("a.md"))
        await service.put("b.md", _entry("b.md"))

        await service.remove("a.md")
        assert [e.local_path for e in await service.all_entries()] == ["b.md"]

        await service.clear()
        assert await service.all_entries() == []
        assert "test-cache" not in memory_store.data

    @pytest.mark.asyncio
    async def test_stats(self, memory_store, fake_clock):
        service = self._service(memory_store, fake_clock)
        await service.put("a.md", _entry("a.md"))
        await service.put("b.md", _entry("b.md", is_published=False, is_synced=False))
        fake_clock.advance(301)
        await service.put("c.md", _entry("c.md", is_synced=False))

        assert await service.stats() == {
            "total_files": 3,
            "published_files": 2,
            "synced_files": 1,
            "expired_caches": 2,
        }


@pytest.mark.unit
@pytest.mark.cache
class TestConcurrentAccess:
    """异步后端并发访问测试类"""

    def _service(self, store, clock):
        return FileCacheService(store=store, max_age_seconds=300, cache_key="test-cache", clock=clock)

    def _seed(self, store, clock, *paths):
        store.data["test-cache"] = json.dumps({
            path: _entry(path, cache_time=int(clock.now * 1000)).to_dict() for path in paths
        })

    @pytest.mark.asyncio
    async def test_put_during_first_load_keeps_persisted_entries(self, slow_store, fake_clock):
        self._seed(slow_store, fake_clock, "a.md")
        service = self._service(slow_store, fake_clock)

        existing, _ = await asyncio.gather(
            service.get("a.md"),
            service.put("b.md", _entry("b.md"))
        )

        assert existing is not None
        assert sorted(json.loads(slow_store.data["test-cache"])) == ["a.md", "b.md"]
        assert sorted(e.local_path for e in await service.all_entries()) == ["a.md", "b.md"]

    @pytest.mark.asyncio
    async def test_first_access_reads_store_once(self, slow_store, fake_clock):
        self._seed(slow_store, fake_clock, "a.md", "b.md")
        service = self._service(slow_store, fake_clock)

        results = await asyncio.gather(*(service.get(path) for path in ["a.md", "b.md", "a.md"]))

        assert all(entry is not None for entry in results)
        assert slow_store.get_calls == 1

    @pytest.mark.asyncio
    async def test_explicit_load_then_access(self, slow_store, fake_clock):
        self._seed(slow_store, fake_clock, "a.md")
        service = self._service(slow_store, fake_clock)

        await service.load()
        assert await service.get("a.md") is not None
        assert slow_store.get_calls == 1


@pytest.mark.unit
@pytest.mark.cache
class TestStores:
    """持久化后端测试类"""

    @pytest.mark.asyncio
    async def test_local_file_store(self, tmp_path):
        store = LocalFileStore(tmp_path / "cache")

        assert await store.get("k") is None
        await store.set("k", '{"a": 1}')
        assert await store.get("k") == '{"a": 1}'
        assert (tmp_path / "cache" / "k.json").exists()
        assert not (tmp_path / "cache" / "k.json.tmp").exists()

        await store.delete("k")
        assert await store.get("k") is None
        await store.delete("k")

    @pytest.mark.asyncio
    async def test_service_with_local_store(self, tmp_path, fake_clock):
        store = LocalFileStore(tmp_path)
        first = FileCacheService(store=store, cache_key="c", clock=fake_clock)
        await first.put("a.md", _entry("a.md"))

        second = FileCacheService(store=store, cache_key="c", clock=fake_clock)
        assert (await second.get("a.md")).remote_revision == "sha-1"

    def test_create_store(self):
        assert isinstance(create_store("local"), LocalFileStore)
        with pytest.raises(ValueError):
            create_store("memcached")
