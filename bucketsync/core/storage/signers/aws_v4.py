"""
AWS Signature Version 4 签名器
AWS S3 与 Cloudflare R2（region 固定为 auto）共用，请求体按 UNSIGNED-PAYLOAD 处理
参考: https://docs.aws.amazon.com/AmazonS3/latest/API/sig-v4-header-based-auth.html
"""

from datetime import datetime, timezone
from typing import Dict, Optional, Tuple

from bucketsync.core.storage.abc import Signer, encode_object_key, utc_now
from bucketsync.core.storage.exceptions import SigningError
from bucketsync.core.storage.signers.crypto import hmac_sha256, sha256_hex, to_hex

ALGORITHM = "AWS4-HMAC-SHA256"
SERVICE = "s3"
UNSIGNED_PAYLOAD = "UNSIGNED-PAYLOAD"
SIGNED_HEADERS = "host;x-amz-content-sha256;x-amz-date"


def format_amz_date(now: datetime) -> Tuple[str, str]:
    """
    生成签名时间戳

    Returns:
        Tuple[str, str]: (YYYYMMDDTHHMMSSZ, YYYYMMDD)
    """
    if now.tzinfo is None:
        raise SigningError("签名时间必须带时区信息")
    amz_date = now.astimezone(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    return amz_date, amz_date[:8]


def build_canonical_request(method: str, canonical_uri: str, host: str, amz_date: str) -> str:
    """构建规范请求，查询串为空"""
    canonical_headers = (
        f"host:{host}\n"
        f"x-amz-content-sha256:{UNSIGNED_PAYLOAD}\n"
        f"x-amz-date:{amz_date}\n"
    )
    return (
        f"{method.upper()}\n"
        f"{canonical_uri}\n"
        f"\n"
        f"{canonical_headers}\n"
        f"{SIGNED_HEADERS}\n"
        f"{UNSIGNED_PAYLOAD}"
    )


def build_credential_scope(date_stamp: str, region: str) -> str:
    return f"{date_stamp}/{region}/{SERVICE}/aws4_request"


def build_string_to_sign(amz_date: str, credential_scope: str, canonical_request: str) -> str:
    return f"{ALGORITHM}\n{amz_date}\n{credential_scope}\n{sha256_hex(canonical_request)}"


def derive_signing_key(secret_key: str, date_stamp: str, region: str) -> bytes:
    """逐级派生签名密钥：date -> region -> service -> aws4_request"""
    k_date = hmac_sha256("AWS4" + secret_key, date_stamp)
    k_region = hmac_sha256(k_date, region)
    k_service = hmac_sha256(k_region, SERVICE)
    return hmac_sha256(k_service, "aws4_request")


class AwsV4Signer(Signer):
    """
    AWS V4 签名器

    Args:
        access_key_id: AccessKey ID
        secret_key: Secret Access Key
        region: 地域，Cloudflare R2 使用 auto
        host: 请求的 Host
        path_prefix: 对象键之前的路径前缀（R2 端点自带路径时使用）
    """

    def __init__(
        self,
        access_key_id: str,
        secret_key: str,
        region: str,
        host: str,
        path_prefix: str = ""
    ) -> None:
        self.access_key_id = access_key_id
        self.secret_key = secret_key
        self.region = region
        self.host = host
        self.path_prefix = path_prefix.rstrip("/")

    def canonical_uri(self, key: str) -> str:
        return f"{self.path_prefix}/{encode_object_key(key)}"

    def sign(
        self,
        method: str,
        key: str,
        now: Optional[datetime] = None,
        content_type: Optional[str] = None
    ) -> Dict[str, str]:
        amz_date, date_stamp = format_amz_date(now or utc_now())

        canonical_request = build_canonical_request(
            method, self.canonical_uri(key), self.host, amz_date
        )
        credential_scope = build_credential_scope(date_stamp, self.region)
        string_to_sign = build_string_to_sign(amz_date, credential_scope, canonical_request)

        signing_key = derive_signing_key(self.secret_key, date_stamp, self.region)
        signature = to_hex(hmac_sha256(signing_key, string_to_sign))

        headers = {}
        if content_type:
            headers["Content-Type"] = content_type
        headers["X-Amz-Date"] = amz_date
        headers["X-Amz-Content-Sha256"] = UNSIGNED_PAYLOAD
        headers["Authorization"] = (
            f"{ALGORITHM} Credential={self.access_key_id}/{credential_scope}, "
            f"SignedHeaders={SIGNED_HEADERS}, Signature={signature}"
        )
        return headers


__all__ = [
    'AwsV4Signer',
    'format_amz_date',
    'build_canonical_request',
    'build_credential_scope',
    'build_string_to_sign',
    'derive_signing_key',
    'UNSIGNED_PAYLOAD',
    'SIGNED_HEADERS',
]
