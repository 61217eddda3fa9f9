"""
存储服务异常定义
定义存储模块中使用的所有异常类型
"""

from typing import Any, Dict, Optional


class StorageError(Exception):
    """
    存储操作基础异常

    所有存储相关异常的基类。

    Attributes:
        message: 错误消息
        code: 错误码
        details: 错误详情
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def __str__(self) -> str:
        if self.code:
            return f"[{self.code}] {self.message}"
        return self.message


class ConfigurationError(StorageError):
    """存储配置错误（凭证字段缺失等）"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, code="CONFIG_ERROR", details=details)


class UnsupportedProviderError(StorageError):
    """不支持的存储服务商"""

    def __init__(self, provider: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(
            "不支持的存储服务商: {}".format(provider),
            code="UNSUPPORTED_PROVIDER",
            details=details
        )
        self.provider = provider


class SigningError(StorageError):
    """请求签名错误（凭证格式错误、时钟异常等）"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, code="SIGNING_ERROR", details=details)


class EncodingError(SigningError):
    """签名输入无法编码"""


class HTTPStatusError(StorageError):
    """服务端返回非2xx状态码"""

    def __init__(
        self,
        message: str,
        status_code: int,
        body: str = "",
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(message, code="HTTP_ERROR", details=details)
        self.status_code = status_code
        self.body = body


class NetworkError(StorageError):
    """网络请求错误"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, code="NETWORK_ERROR", details=details)


class CacheCorruptError(StorageError):
    """持久化的文件缓存无法解析"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, code="CACHE_CORRUPT", details=details)


__all__ = [
    'StorageError',
    'ConfigurationError',
    'UnsupportedProviderError',
    'SigningError',
    'EncodingError',
    'HTTPStatusError',
    'NetworkError',
    'CacheCorruptError',
]
