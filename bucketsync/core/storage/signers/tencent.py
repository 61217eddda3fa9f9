"""
腾讯云COS签名器
实现COS XML API v5 请求签名
参考: https://cloud.tencent.com/document/product/436/7778
"""

from datetime import datetime
from typing import Dict, Optional, Tuple
from urllib.parse import quote

from bucketsync.core.config.storage_config import TencentCredential
from bucketsync.core.storage.abc import Signer, utc_now
from bucketsync.core.storage.signers.crypto import hmac_sha1, sha1_hex, to_hex

# 签名有效期（1小时）
DEFAULT_SIGN_VALIDITY = 3600


def build_key_time(now: datetime, validity: int = DEFAULT_SIGN_VALIDITY) -> str:
    """生成签名有效时间段，格式为 起始秒;结束秒"""
    start = int(now.timestamp())
    return f"{start};{start + validity}"


def build_header_section(headers: Dict[str, str]) -> Tuple[str, str]:
    """
    生成 HeaderList 和 HttpHeaders

    两者来自同一份排序后的请求头，保证 q-header-list 与 HttpString 一致。

    Returns:
        Tuple[str, str]: (header_list, http_headers)
    """
    sorted_headers = sorted((k.lower(), v) for k, v in headers.items())
    header_list = ';'.join(k for k, _ in sorted_headers)
    http_headers = '&'.join(f"{k}={quote(v, safe='')}" for k, v in sorted_headers)
    return header_list, http_headers


def build_http_string(method: str, key: str, http_headers: str, http_parameters: str = "") -> str:
    """生成 HttpString，空行表示无查询参数"""
    return f"{method.lower()}\n/{key}\n{http_parameters}\n{http_headers}\n"


def build_string_to_sign(key_time: str, http_string: str) -> str:
    """生成 StringToSign"""
    return f"sha1\n{key_time}\n{sha1_hex(http_string)}\n"


class TencentSigner(Signer):
    """腾讯云COS签名器"""

    def __init__(self, credential: TencentCredential, validity: int = DEFAULT_SIGN_VALIDITY) -> None:
        self.credential = credential
        self.validity = validity

    @property
    def host(self) -> str:
        return f"{self.credential.bucket}.cos.{self.credential.region}.myqcloud.com"

    def authorization(self, method: str, key: str, key_time: str) -> str:
        """
        生成 Authorization 请求头的值

        Args:
            method: HTTP方法
            key: 对象存储键
            key_time: 签名有效时间段

        Returns:
            str: q-sign-algorithm=sha1&... 形式的签名串
        """
        # Step 1: 生成 SignKey
        sign_key = to_hex(hmac_sha1(self.credential.access_key_secret, key_time))

        # Step 2: 生成 HeaderList 和 HttpHeaders，只签 host
        header_list, http_headers = build_header_section({"host": self.host})

        # Step 3: 生成 HttpString 和 StringToSign
        http_string = build_http_string(method, key, http_headers)
        string_to_sign = build_string_to_sign(key_time, http_string)

        # Step 4: 生成 Signature
        signature = to_hex(hmac_sha1(sign_key, string_to_sign))

        return (
            f"q-sign-algorithm=sha1&"
            f"q-ak={self.credential.access_key_id}&"
            f"q-sign-time={key_time}&"
            f"q-key-time={key_time}&"
            f"q-header-list={header_list}&"
            f"q-url-param-list=&"
            f"q-signature={signature}"
        )

    def sign(
        self,
        method: str,
        key: str,
        now: Optional[datetime] = None,
        content_type: Optional[str] = None
    ) -> Dict[str, str]:
        key_time = build_key_time(now or utc_now(), self.validity)
        headers = {}
        if content_type:
            headers["Content-Type"] = content_type
        headers["Authorization"] = self.authorization(method, key, key_time)
        return headers


__all__ = [
    'TencentSigner',
    'build_key_time',
    'build_header_section',
    'build_http_string',
    'build_string_to_sign',
    'DEFAULT_SIGN_VALIDITY',
]
