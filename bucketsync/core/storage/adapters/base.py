"""
基于HTTP的存储适配器基类
负责签名请求的构建与发送，各服务商只需提供签名器和URL规则
"""

from abc import abstractmethod
from datetime import datetime
from typing import Optional

import httpx

from bucketsync.core.config import settings
from bucketsync.core.config.storage_config import ProviderCredential
from bucketsync.core.log_utils import get_logger
from bucketsync.core.storage.abc import BaseStorage, Signer, encode_object_key
from bucketsync.core.storage.exceptions import (
    ConfigurationError,
    HTTPStatusError,
    NetworkError,
)
from bucketsync.core.storage.models import SignedRequest

logger = get_logger(__name__)


class HttpStorageAdapter(BaseStorage):
    """
    HTTP存储适配器基类

    Args:
        credential: 服务商凭证
        timeout: 请求超时时间（秒），默认使用 settings.storage_timeout
        transport: 自定义 httpx 传输层（测试时注入）

    Raises:
        ConfigurationError: 凭证不完整时抛出
    """

    def __init__(
        self,
        credential: ProviderCredential,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> None:
        missing = credential.missing_fields()
        if missing:
            raise ConfigurationError(
                "{}配置不完整，缺少字段: {}".format(self.DISPLAY_NAME, ", ".join(missing)),
                details={"provider": credential.provider, "missing": missing}
            )

        self.credential = credential
        self.timeout = timeout if timeout is not None else settings.storage_timeout
        self.transport = transport
        self.signer = self._create_signer()

    @abstractmethod
    def _create_signer(self) -> Signer:
        """创建服务商对应的签名器"""
        pass

    def _object_path(self, key: str) -> str:
        return encode_object_key(key)

    def build_request(
        self,
        method: str,
        key: str,
        body: bytes = b"",
        content_type: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> SignedRequest:
        headers = self.signer.sign(method.upper(), key, now=now, content_type=content_type)
        return SignedRequest(
            method=method.upper(),
            url=self.build_url(key),
            headers=headers,
            body=body
        )

    async def _send(self, request: SignedRequest) -> httpx.Response:
        """
        发送已签名请求

        Raises:
            NetworkError: 网络或超时错误时抛出
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                return await client.request(
                    request.method,
                    request.url,
                    headers=request.headers,
                    content=request.body or None
                )
        except httpx.RequestError as e:
            logger.error(
                "{}请求网络错误".format(self.DISPLAY_NAME),
                extra={"url": request.url, "error": str(e)}
            )
            raise NetworkError(
                "{}请求失败 (网络错误): {}".format(self.DISPLAY_NAME, str(e))
            ) from e

    async def put_object(self, data: bytes, key: str, content_type: str) -> str:
        request = self.build_request("PUT", key, body=data, content_type=content_type)
        response = await self._send(request)

        if not response.is_success:
            raise HTTPStatusError(
                "{}上传失败 (HTTP {}): {}".format(
                    self.DISPLAY_NAME, response.status_code, response.text
                ),
                status_code=response.status_code,
                body=response.text
            )

        logger.info(
            "{}上传成功".format(self.DISPLAY_NAME),
            extra={"key": key, "size": len(data)}
        )
        return request.url

    async def delete_object(self, key: str) -> None:
        request = self.build_request("DELETE", key)
        response = await self._send(request)

        if not response.is_success:
            raise HTTPStatusError(
                "{}删除失败 (HTTP {}): {}".format(
                    self.DISPLAY_NAME, response.status_code, response.text
                ),
                status_code=response.status_code,
                body=response.text
            )

        logger.info("{}文件删除成功".format(self.DISPLAY_NAME), extra={"key": key})


__all__ = ['HttpStorageAdapter']
