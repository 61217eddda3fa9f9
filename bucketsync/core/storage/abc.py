"""
存储抽象基类
定义统一的签名器与存储适配器接口
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Dict, Optional
from urllib.parse import quote

from bucketsync.core.storage.models import SignedRequest


def utc_now() -> datetime:
    """当前UTC时间"""
    return datetime.now(timezone.utc)


def encode_object_key(key: str) -> str:
    """对象键URL编码，保留路径分隔符"""
    return quote(key, safe="/")


class Signer(ABC):
    """请求签名器抽象基类"""

    @abstractmethod
    def sign(
        self,
        method: str,
        key: str,
        now: Optional[datetime] = None,
        content_type: Optional[str] = None
    ) -> Dict[str, str]:
        """
        为请求生成签名相关的请求头

        Args:
            method: HTTP方法
            key: 对象存储键（不以 / 开头）
            now: 签名时间，默认当前时间
            content_type: 请求体的MIME类型（可选）

        Returns:
            Dict[str, str]: 需要附加到请求上的请求头

        Raises:
            SigningError: 签名失败时抛出
        """
        pass


class BaseStorage(ABC):
    """存储适配器抽象基类"""

    # 适配器名称，用于工厂模式注册
    ADAPTER_NAME: str = ""

    # 错误信息中显示的服务商名称
    DISPLAY_NAME: str = ""

    @abstractmethod
    def build_url(self, key: str) -> str:
        """
        构建对象的访问URL

        Args:
            key: 存储键

        Returns:
            str: 服务商原始URL
        """
        pass

    @abstractmethod
    def build_request(
        self,
        method: str,
        key: str,
        body: bytes = b"",
        content_type: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> SignedRequest:
        """
        构建已签名的请求

        Args:
            method: HTTP方法（PUT/DELETE）
            key: 存储键
            body: 请求体
            content_type: MIME类型，DELETE请求不传
            now: 签名时间

        Returns:
            SignedRequest: 已签名请求
        """
        pass

    @abstractmethod
    async def put_object(self, data: bytes, key: str, content_type: str) -> str:
        """
        上传对象

        Args:
            data: 文件数据
            key: 存储键
            content_type: MIME类型

        Returns:
            str: 服务商原始URL

        Raises:
            HTTPStatusError: 服务端返回非2xx时抛出
            NetworkError: 网络错误时抛出
        """
        pass

    @abstractmethod
    async def delete_object(self, key: str) -> None:
        """
        删除对象

        Args:
            key: 存储键

        Raises:
            StorageError: 删除失败时抛出
        """
        pass


__all__ = ['Signer', 'BaseStorage', 'utc_now', 'encode_object_key']
