"""
对象存储客户端
按配置的服务商分发上传、删除与连接测试，所有错误都转换为 UploadResult
"""

import time
from typing import Optional

import httpx

from bucketsync.core.config.storage_config import (
    ProviderCredential,
    get_storage_credential,
)
from bucketsync.core.log_messages import log_messages
from bucketsync.core.log_utils import get_logger
from bucketsync.core.storage.abc import BaseStorage
from bucketsync.core.storage.exceptions import ConfigurationError, StorageError
from bucketsync.core.storage.factory import create_adapter, get_adapter_class
from bucketsync.core.storage.models import UploadResult

logger = get_logger(__name__)

TEST_OBJECT_CONTENT = b"test"
TEST_OBJECT_CONTENT_TYPE = "text/plain"


class StorageClient:
    """
    对象存储客户端

    Args:
        credential: 服务商凭证，不指定则从全局配置构建
        provider: 服务商名称，仅在未指定 credential 时生效
        timeout: 请求超时时间（秒）
        transport: 自定义 httpx 传输层

    Example:
        >>> client = StorageClient()
        >>> result = await client.upload(b"...", "images/a.png", "image/png")
        >>> if result.success:
        ...     print(result.url)
    """

    def __init__(
        self,
        credential: Optional[ProviderCredential] = None,
        provider: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> None:
        self.credential = credential or get_storage_credential(provider)
        self.timeout = timeout
        self.transport = transport
        self._adapter: Optional[BaseStorage] = None

    @property
    def provider(self) -> str:
        return self.credential.provider

    @property
    def display_name(self) -> str:
        try:
            return get_adapter_class(self.provider).DISPLAY_NAME
        except StorageError:
            return self.provider

    def is_configured(self) -> bool:
        """必填凭证字段是否齐全"""
        return not self.credential.missing_fields()

    def _get_adapter(self) -> BaseStorage:
        """
        延迟创建适配器

        Raises:
            ConfigurationError: 凭证不完整时抛出，不会发起网络请求
            UnsupportedProviderError: 服务商未注册时抛出
        """
        if self._adapter is None:
            self._adapter = create_adapter(
                self.credential, timeout=self.timeout, transport=self.transport
            )
        return self._adapter

    def _public_url(self, raw_url: str, remote_path: str) -> str:
        cdn_base = self.credential.cdn_base
        if cdn_base:
            return f"{cdn_base}/{remote_path}"
        return raw_url

    async def upload(
        self,
        data: bytes,
        remote_path: str,
        content_type: str = "application/octet-stream"
    ) -> UploadResult:
        """
        上传文件

        Args:
            data: 文件内容
            remote_path: 对象存储键
            content_type: MIME类型

        Returns:
            UploadResult: 上传结果，失败时 message 包含原因
        """
        logger.info(log_messages.STORAGE_UPLOAD_START, key=remote_path)

        try:
            adapter = self._get_adapter()
            raw_url = await adapter.put_object(data, remote_path, content_type)
        except ConfigurationError as e:
            logger.warning(
                log_messages.STORAGE_CONFIG_INCOMPLETE,
                extra={"missing": e.details.get("missing", [])},
                provider=self.provider
            )
            return UploadResult(success=False, message=e.message)
        except StorageError as e:
            logger.error(log_messages.STORAGE_UPLOAD_FAILED, exception=e, key=remote_path)
            return UploadResult(success=False, message=e.message)
        except Exception as e:
            logger.error(log_messages.STORAGE_UPLOAD_FAILED, exception=e, key=remote_path)
            return UploadResult(
                success=False,
                message="{}上传失败: {}".format(self.display_name, str(e))
            )

        logger.info(log_messages.STORAGE_UPLOAD_SUCCESS, key=remote_path)
        return UploadResult(
            success=True,
            message="上传成功",
            url=self._public_url(raw_url, remote_path),
            key=remote_path
        )

    async def delete(self, remote_path: str) -> None:
        """
        删除文件

        Raises:
            StorageError: 删除失败时抛出，由调用方决定是否视为致命错误
        """
        adapter = self._get_adapter()
        await adapter.delete_object(remote_path)
        logger.info(log_messages.STORAGE_DELETE_SUCCESS, key=remote_path)

    async def test_connection(self) -> UploadResult:
        """
        测试存储连接

        上传一个带时间戳的临时对象，成功后尽力删除；删除失败不影响测试结果。

        Returns:
            UploadResult: 上传结果
        """
        test_key = "test-{}.txt".format(int(time.time() * 1000))
        result = await self.upload(TEST_OBJECT_CONTENT, test_key, TEST_OBJECT_CONTENT_TYPE)

        if result.success:
            try:
                await self.delete(test_key)
            except Exception as e:
                logger.warning(
                    log_messages.STORAGE_DELETE_FAILED,
                    extra={"error": str(e)},
                    key=test_key
                )

        return result


__all__ = ['StorageClient', 'TEST_OBJECT_CONTENT']
