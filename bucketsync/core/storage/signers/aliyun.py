"""
阿里云OSS签名器
实现OSS Header签名（HMAC-SHA1 + base64）
参考: https://help.aliyun.com/document_detail/31951.html
"""

from datetime import datetime
from email.utils import formatdate
from typing import Dict, Optional

from bucketsync.core.config.storage_config import AliyunCredential
from bucketsync.core.storage.abc import Signer, utc_now
from bucketsync.core.storage.signers.crypto import hmac_sha1, to_base64


def format_http_date(now: datetime) -> str:
    """格式化为 RFC 1123 GMT 时间，如 Tue, 05 Mar 2024 08:00:00 GMT"""
    return formatdate(now.timestamp(), usegmt=True)


def build_string_to_sign(
    method: str,
    bucket: str,
    key: str,
    date: str,
    content_type: Optional[str] = None
) -> str:
    """
    构建待签名字符串

    第二行是 Content-MD5 的位置，固定留空。
    """
    return f"{method.upper()}\n\n{content_type or ''}\n{date}\n/{bucket}/{key}"


class AliyunSigner(Signer):
    """阿里云OSS签名器"""

    def __init__(self, credential: AliyunCredential) -> None:
        self.credential = credential

    def signature(
        self,
        method: str,
        key: str,
        date: str,
        content_type: Optional[str] = None
    ) -> str:
        """计算签名值"""
        string_to_sign = build_string_to_sign(
            method, self.credential.bucket, key, date, content_type
        )
        return to_base64(hmac_sha1(self.credential.access_key_secret, string_to_sign))

    def authorization(
        self,
        method: str,
        key: str,
        date: str,
        content_type: Optional[str] = None
    ) -> str:
        """生成 Authorization 请求头的值"""
        signature = self.signature(method, key, date, content_type)
        return f"OSS {self.credential.access_key_id}:{signature}"

    def sign(
        self,
        method: str,
        key: str,
        now: Optional[datetime] = None,
        content_type: Optional[str] = None
    ) -> Dict[str, str]:
        date = format_http_date(now or utc_now())
        headers = {"Date": date}
        if content_type:
            headers["Content-Type"] = content_type
        headers["Authorization"] = self.authorization(method, key, date, content_type)
        return headers


__all__ = ['AliyunSigner', 'build_string_to_sign', 'format_http_date']
