"""
签名器单元测试
期望值使用 hashlib / hmac 独立计算，与签名器实现相互校验
"""

import base64
import hashlib
import hmac
from datetime import datetime, timedelta, timezone

import pytest

from bucketsync.core.storage.exceptions import SigningError
from bucketsync.core.storage.signers import AliyunSigner, AwsV4Signer, TencentSigner
from bucketsync.core.storage.signers.aliyun import build_string_to_sign as aliyun_string_to_sign
from bucketsync.core.storage.signers.aliyun import format_http_date
from bucketsync.core.storage.signers.aws_v4 import (
    UNSIGNED_PAYLOAD,
    build_canonical_request,
    build_credential_scope,
    derive_signing_key,
    format_amz_date,
)
from bucketsync.core.storage.signers.tencent import (
    build_header_section,
    build_http_string,
    build_key_time,
)

FIXED_NOW = datetime(2024, 3, 5, 8, 0, 0, tzinfo=timezone.utc)
FIXED_EPOCH = 1709625600


def _hmac(key, msg, algorithm):
    if isinstance(key, str):
        key = key.encode("utf-8")
    return hmac.new(key, msg.encode("utf-8"), algorithm)


@pytest.mark.unit
@pytest.mark.signers
class TestAliyunSigner:
    """阿里云OSS签名测试类"""

    def test_http_date_format(self):
        assert format_http_date(FIXED_NOW) == "Tue, 05 Mar 2024 08:00:00 GMT"

    def test_string_to_sign_layout(self):
        result = aliyun_string_to_sign(
            "put", "notes", "a/b.png", "Tue, 05 Mar 2024 08:00:00 GMT", "image/png"
        )
        assert result == "PUT\n\nimage/png\nTue, 05 Mar 2024 08:00:00 GMT\n/notes/a/b.png"

    def test_string_to_sign_without_content_type(self):
        result = aliyun_string_to_sign("DELETE", "notes", "a.png", "D")
        assert result == "DELETE\n\n\nD\n/notes/a.png"

    def test_sign_headers(self, aliyun_credential):
        headers = AliyunSigner(aliyun_credential).sign("PUT", "a/b.png", FIXED_NOW, "image/png")

        string_to_sign = "PUT\n\nimage/png\nTue, 05 Mar 2024 08:00:00 GMT\n/notes/a/b.png"
        expected = base64.b64encode(
            _hmac("aliyun-secret", string_to_sign, hashlib.sha1).digest()
        ).decode()

        assert headers["Date"] == "Tue, 05 Mar 2024 08:00:00 GMT"
        assert headers["Content-Type"] == "image/png"
        assert headers["Authorization"] == f"OSS LTAItest:{expected}"

    def test_deterministic(self, aliyun_credential):
        signer = AliyunSigner(aliyun_credential)
        assert signer.sign("PUT", "x", FIXED_NOW, "text/plain") == signer.sign("PUT", "x", FIXED_NOW, "text/plain")


@pytest.mark.unit
@pytest.mark.signers
class TestTencentSigner:
    """腾讯云COS签名测试类"""

    def test_key_time_window(self):
        assert build_key_time(FIXED_NOW) == f"{FIXED_EPOCH};{FIXED_EPOCH + 3600}"
        assert build_key_time(FIXED_NOW, validity=60) == f"{FIXED_EPOCH};{FIXED_EPOCH + 60}"

    def test_header_section_sorted_and_lowercased(self):
        header_list, http_headers = build_header_section({"Host": "h.example.com", "Content-Type": "a/b"})
        assert header_list == "content-type;host"
        assert http_headers == "content-type=a%2Fb&host=h.example.com"

    def test_http_string(self):
        assert build_http_string("PUT", "dir/a.txt", "host=h") == "put\n/dir/a.txt\n\nhost=h\n"

    def test_authorization_matches_reference(self, tencent_credential):
        signer = TencentSigner(tencent_credential)
        key_time = f"{FIXED_EPOCH};{FIXED_EPOCH + 3600}"

        sign_key = _hmac("tencent-secret", key_time, hashlib.sha1).hexdigest()
        http_string = "put\n/test.txt\n\nhost=b.cos.ap-guangzhou.myqcloud.com\n"
        string_to_sign = "sha1\n{}\n{}\n".format(
            key_time, hashlib.sha1(http_string.encode()).hexdigest()
        )
        signature = _hmac(sign_key, string_to_sign, hashlib.sha1).hexdigest()

        assert signer.authorization("PUT", "test.txt", key_time) == (
            f"q-sign-algorithm=sha1&q-ak=AKIDtest&q-sign-time={key_time}&"
            f"q-key-time={key_time}&q-header-list=host&q-url-param-list=&"
            f"q-signature={signature}"
        )

    def test_sign_returns_content_type_and_authorization(self, tencent_credential):
        headers = TencentSigner(tencent_credential).sign("PUT", "test.txt", FIXED_NOW, "text/plain")
        assert headers["Content-Type"] == "text/plain"
        assert headers["Authorization"].startswith("q-sign-algorithm=sha1&")

    def test_signature_changes_with_time(self, tencent_credential):
        signer = TencentSigner(tencent_credential)
        first = signer.sign("PUT", "a", FIXED_NOW)["Authorization"]
        later = signer.sign("PUT", "a", FIXED_NOW + timedelta(seconds=1))["Authorization"]
        assert first != later

    def test_host(self, tencent_credential):
        assert TencentSigner(tencent_credential).host == "b.cos.ap-guangzhou.myqcloud.com"


@pytest.mark.unit
@pytest.mark.signers
class TestAwsV4Signer:
    """AWS V4 签名测试类"""

    def test_amz_date(self):
        assert format_amz_date(FIXED_NOW) == ("20240305T080000Z", "20240305")

    def test_amz_date_converts_to_utc(self):
        shanghai = timezone(timedelta(hours=8))
        assert format_amz_date(datetime(2024, 3, 5, 16, 0, tzinfo=shanghai))[0] == "20240305T080000Z"

    def test_naive_datetime_rejected(self):
        with pytest.raises(SigningError):
            format_amz_date(datetime(2024, 3, 5, 8, 0))

    def test_canonical_request(self):
        assert build_canonical_request("put", "/a/b.png", "notes.s3.us-east-1.amazonaws.com", "20240305T080000Z") == (
            "PUT\n/a/b.png\n\n"
            "host:notes.s3.us-east-1.amazonaws.com\n"
            "x-amz-content-sha256:UNSIGNED-PAYLOAD\n"
            "x-amz-date:20240305T080000Z\n\n"
            "host;x-amz-content-sha256;x-amz-date\n"
            "UNSIGNED-PAYLOAD"
        )

    def test_credential_scope(self):
        assert build_credential_scope("20240305", "auto") == "20240305/auto/s3/aws4_request"

    def test_signing_key_chain(self):
        k_date = hmac.new(b"AWS4secret", b"20240305", hashlib.sha256).digest()
        k_region = hmac.new(k_date, b"us-east-1", hashlib.sha256).digest()
        k_service = hmac.new(k_region, b"s3", hashlib.sha256).digest()
        k_signing = hmac.new(k_service, b"aws4_request", hashlib.sha256).digest()
        assert derive_signing_key("secret", "20240305", "us-east-1") == k_signing

    def test_sign_headers(self):
        signer = AwsV4Signer("AKIAtest", "aws-secret", "us-east-1", "notes.s3.us-east-1.amazonaws.com")
        headers = signer.sign("PUT", "a/b.png", FIXED_NOW, "image/png")

        canonical = build_canonical_request(
            "PUT", "/a/b.png", "notes.s3.us-east-1.amazonaws.com", "20240305T080000Z"
        )
        scope = "20240305/us-east-1/s3/aws4_request"
        string_to_sign = "AWS4-HMAC-SHA256\n20240305T080000Z\n{}\n{}".format(
            scope, hashlib.sha256(canonical.encode()).hexdigest()
        )
        signing_key = derive_signing_key("aws-secret", "20240305", "us-east-1")
        signature = hmac.new(signing_key, string_to_sign.encode(), hashlib.sha256).hexdigest()

        assert headers["Content-Type"] == "image/png"
        assert headers["X-Amz-Date"] == "20240305T080000Z"
        assert headers["X-Amz-Content-Sha256"] == UNSIGNED_PAYLOAD
        assert headers["Authorization"] == (
            f"AWS4-HMAC-SHA256 Credential=AKIAtest/{scope}, "
            f"SignedHeaders=host;x-amz-content-sha256;x-amz-date, Signature={signature}"
        )

    def test_region_auto_changes_only_scope_and_host(self):
        s3 = AwsV4Signer("id", "secret", "us-east-1", "notes.s3.us-east-1.amazonaws.com")
        r2 = AwsV4Signer("id", "secret", "auto", "account.r2.cloudflarestorage.com")

        s3_request = build_canonical_request("PUT", s3.canonical_uri("a.txt"), s3.host, "20240305T080000Z")
        r2_request = build_canonical_request("PUT", r2.canonical_uri("a.txt"), r2.host, "20240305T080000Z")

        assert s3_request.replace(s3.host, "HOST") == r2_request.replace(r2.host, "HOST")
        assert "/auto/s3/aws4_request" in r2.sign("PUT", "a.txt", FIXED_NOW)["Authorization"]

    def test_canonical_uri_encodes_key_and_keeps_prefix(self):
        signer = AwsV4Signer("id", "secret", "auto", "h", path_prefix="/bucket/")
        assert signer.canonical_uri("图片/a b.png") == "/bucket/%E5%9B%BE%E7%89%87/a%20b.png"

    def test_deterministic(self):
        signer = AwsV4Signer("id", "secret", "us-east-1", "h")
        assert signer.sign("DELETE", "k", FIXED_NOW) == signer.sign("DELETE", "k", FIXED_NOW)
