"""
存储服务模块
提供统一的对象存储访问接口，支持阿里云OSS、腾讯云COS、AWS S3和Cloudflare R2
"""

from typing import Optional

from bucketsync.core.storage.abc import BaseStorage, Signer
from bucketsync.core.storage.adapters import (
    AliyunOssAdapter,
    AwsS3Adapter,
    CloudflareR2Adapter,
    TencentCosAdapter,
)
from bucketsync.core.storage.client import StorageClient
from bucketsync.core.storage.exceptions import *
from bucketsync.core.storage.factory import (
    create_adapter,
    list_available_adapters,
    register_adapter,
)
from bucketsync.core.storage.models import *

# 自动注册内置适配器
for _adapter_class in (AliyunOssAdapter, TencentCosAdapter, AwsS3Adapter, CloudflareR2Adapter):
    register_adapter(_adapter_class.ADAPTER_NAME, _adapter_class)


def get_storage_service(provider: Optional[str] = None) -> StorageClient:
    """
    获取存储客户端实例

    Args:
        provider: 服务商名称（如 'tencent'），不指定则使用 settings.storage_provider

    Returns:
        StorageClient: 存储客户端

    Raises:
        UnsupportedProviderError: 服务商不受支持时抛出

    Example:
        >>> client = get_storage_service()
        >>> client = get_storage_service('cloudflare')
    """
    return StorageClient(provider=provider)


__all__ = [
    # 工厂函数
    'get_storage_service',
    'create_adapter',
    'list_available_adapters',
    'register_adapter',
    # 抽象接口
    'BaseStorage',
    'Signer',
    'StorageClient',
    # 适配器类
    'AliyunOssAdapter',
    'AwsS3Adapter',
    'CloudflareR2Adapter',
    'TencentCosAdapter',
    # 异常
    'StorageError',
    'ConfigurationError',
    'UnsupportedProviderError',
    'SigningError',
    'EncodingError',
    'HTTPStatusError',
    'NetworkError',
    'CacheCorruptError',
    # 模型
    'UploadResult',
    'SignedRequest',
]
