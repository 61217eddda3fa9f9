"""
签名用加密原语
HMAC-SHA1 / HMAC-SHA256 / SHA-1 / SHA-256 摘要以及 hex / base64 编码
"""

import base64
import hashlib
import hmac
from typing import Union

from bucketsync.core.storage.exceptions import EncodingError

BytesLike = Union[str, bytes, bytearray]


def _to_bytes(value: BytesLike) -> bytes:
    """
    将输入统一转换为字节

    字符串按 UTF-8 编码；无法编码的字符串（如孤立代理字符）
    或不支持的类型抛出 EncodingError。
    """
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, str):
        try:
            return value.encode("utf-8")
        except UnicodeEncodeError as e:
            raise EncodingError("无法按UTF-8编码签名输入: {}".format(e)) from e
    raise EncodingError("不支持的签名输入类型: {}".format(type(value).__name__))


def hmac_sha1(key: BytesLike, message: BytesLike) -> bytes:
    """HMAC-SHA1，返回二进制摘要"""
    return hmac.new(_to_bytes(key), _to_bytes(message), hashlib.sha1).digest()


def hmac_sha256(key: BytesLike, message: BytesLike) -> bytes:
    """HMAC-SHA256，返回二进制摘要"""
    return hmac.new(_to_bytes(key), _to_bytes(message), hashlib.sha256).digest()


def sha1_hex(message: BytesLike) -> str:
    """SHA-1 小写十六进制摘要"""
    return hashlib.sha1(_to_bytes(message)).hexdigest()


def sha256_hex(message: BytesLike) -> str:
    """SHA-256 小写十六进制摘要"""
    return hashlib.sha256(_to_bytes(message)).hexdigest()


def to_hex(data: bytes) -> str:
    """字节转小写十六进制字符串"""
    return data.hex()


def to_base64(data: bytes) -> str:
    """字节转标准 base64 字符串（带填充）"""
    return base64.b64encode(data).decode("ascii")


__all__ = [
    "hmac_sha1",
    "hmac_sha256",
    "sha1_hex",
    "sha256_hex",
    "to_hex",
    "to_base64",
]
