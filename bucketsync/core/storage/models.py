"""
存储服务数据模型
定义存储操作中使用的所有数据结构
"""

from dataclasses import dataclass, field
from typing import Dict, Optional


@dataclass(frozen=True)
class UploadResult:
    """
    上传结果

    Attributes:
        success: 是否成功
        message: 结果描述，失败时包含状态码和服务端返回内容
        url: 最终可访问的URL（配置CDN时为CDN地址）
        key: 对象存储键
    """
    success: bool
    message: str
    url: Optional[str] = None
    key: Optional[str] = None


@dataclass(frozen=True)
class SignedRequest:
    """
    已签名的HTTP请求

    Attributes:
        method: HTTP方法
        url: 完整请求URL
        headers: 有序请求头
        body: 请求体
    """
    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""


__all__ = [
    'UploadResult',
    'SignedRequest',
]
