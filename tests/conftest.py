"""
测试配置和fixtures
为所有测试提供共享的配置和fixtures

单元测试不依赖外部服务：HTTP请求通过 httpx.MockTransport 拦截，
缓存持久化使用内存存储。
"""

import asyncio
import os

# 在导入应用配置之前设置测试环境
os.environ.setdefault("APP_DEBUG", "false")
os.environ.setdefault("LOG_LEVEL", "ERROR")
os.environ.setdefault("FILE_CACHE_BACKEND", "local")

from typing import Dict, Optional

import pytest

from bucketsync.core.config.storage_config import (
    AliyunCredential,
    AwsCredential,
    CloudflareCredential,
    TencentCredential,
)


class MemoryStore:
    """内存键值存储，记录写入次数便于断言"""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})
        self.set_calls = 0
        self.delete_calls = 0

    async def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        self.set_calls += 1
        self.data[key] = value

    async def delete(self, key: str) -> None:
        self.delete_calls += 1
        self.data.pop(key, None)


class SlowStore(MemoryStore):
    """读取时让出事件循环的内存存储，模拟Redis等异步后端"""

    def __init__(self, initial: Optional[Dict[str, str]] = None, delay: float = 0.01):
        super().__init__(initial)
        self.delay = delay
        self.get_calls = 0

    async def get(self, key: str) -> Optional[str]:
        self.get_calls += 1
        await asyncio.sleep(self.delay)
        return await super().get(key)


class FakeClock:
    """可手动推进的时钟（秒）"""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def slow_store():
    return SlowStore()


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def tencent_credential():
    return TencentCredential(
        access_key_id="AKIDtest",
        access_key_secret="tencent-secret",
        bucket="b",
        region="ap-guangzhou"
    )


@pytest.fixture
def aliyun_credential():
    return AliyunCredential(
        access_key_id="LTAItest",
        access_key_secret="aliyun-secret",
        bucket="notes",
        region="cn-hangzhou"
    )


@pytest.fixture
def aws_credential():
    return AwsCredential(
        access_key_id="AKIAtest",
        access_key_secret="aws-secret",
        bucket="notes",
        region="us-east-1"
    )


@pytest.fixture
def cloudflare_credential():
    return CloudflareCredential(
        access_key_id="r2-key",
        access_key_secret="r2-secret",
        bucket="notes",
        endpoint="https://account123.r2.cloudflarestorage.com/notes"
    )


def pytest_configure(config):
    """配置pytest标记"""
    config.addinivalue_line("markers", "unit: 单元测试")
    config.addinivalue_line("markers", "signers: 签名算法测试")
    config.addinivalue_line("markers", "storage: 对象存储测试")
    config.addinivalue_line("markers", "cache: 文件缓存测试")
    config.addinivalue_line("markers", "github: GitHub同步测试")
    config.addinivalue_line("markers", "sync: 笔记同步测试")
    config.addinivalue_line("markers", "api: API端点测试")
    config.addinivalue_line("markers", "logging: 日志系统测试")
