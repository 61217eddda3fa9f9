"""
存储适配器工厂
提供适配器注册和创建功能
"""

from typing import Any, Dict, List, Type

from bucketsync.core.config.storage_config import ProviderCredential
from bucketsync.core.log_utils import get_logger
from bucketsync.core.storage.abc import BaseStorage
from bucketsync.core.storage.exceptions import UnsupportedProviderError

logger = get_logger(__name__)

# 适配器注册表
_adapter_registry: Dict[str, Type[BaseStorage]] = {}


def register_adapter(name: str, adapter_class: Type[BaseStorage]) -> None:
    """
    注册存储适配器

    Args:
        name: 服务商名称（如 'aliyun', 'tencent', 'aws', 'cloudflare'）
        adapter_class: 适配器类

    Example:
        >>> register_adapter('tencent', TencentCosAdapter)
    """
    _adapter_registry[name] = adapter_class
    logger.debug("已注册存储适配器", extra={'adapter': name})


def get_adapter_class(name: str) -> Type[BaseStorage]:
    """
    获取适配器类

    Raises:
        UnsupportedProviderError: 适配器不存在时抛出
    """
    adapter_class = _adapter_registry.get(name)
    if not adapter_class:
        raise UnsupportedProviderError(
            name, details={'available': list(_adapter_registry.keys())}
        )
    return adapter_class


def create_adapter(credential: ProviderCredential, **kwargs: Any) -> BaseStorage:
    """
    根据凭证的服务商创建适配器实例

    Args:
        credential: 服务商凭证
        **kwargs: 传给适配器构造函数的额外参数（timeout、transport）

    Returns:
        BaseStorage: 适配器实例

    Raises:
        UnsupportedProviderError: 服务商未注册时抛出
        ConfigurationError: 凭证不完整时抛出
    """
    adapter_class = get_adapter_class(credential.provider)
    return adapter_class(credential, **kwargs)


def list_available_adapters() -> List[str]:
    """列出所有已注册的适配器"""
    return list(_adapter_registry.keys())


__all__ = [
    'register_adapter',
    'get_adapter_class',
    'create_adapter',
    'list_available_adapters',
]
