"""
Cloudflare R2存储适配器
使用S3兼容接口，签名地域固定为 auto，Host 取自配置的端点
"""

from urllib.parse import urlsplit

from bucketsync.core.config.storage_config import CloudflareCredential
from bucketsync.core.storage.adapters.base import HttpStorageAdapter
from bucketsync.core.storage.exceptions import ConfigurationError
from bucketsync.core.storage.signers import AwsV4Signer

R2_REGION = "auto"


class CloudflareR2Adapter(HttpStorageAdapter):
    """Cloudflare R2存储适配器"""

    ADAPTER_NAME: str = "cloudflare"
    DISPLAY_NAME: str = "Cloudflare R2"

    credential: CloudflareCredential

    def _parse_endpoint(self) -> None:
        endpoint = self.credential.endpoint.strip()
        if "://" not in endpoint:
            endpoint = f"https://{endpoint}"

        parts = urlsplit(endpoint)
        if not parts.hostname:
            raise ConfigurationError(
                "Cloudflare R2端点格式无效: {}".format(self.credential.endpoint)
            )

        host = parts.hostname
        default_port = 443 if parts.scheme == "https" else 80
        if parts.port and parts.port != default_port:
            host = f"{host}:{parts.port}"

        self.host = host
        self.base_url = f"{parts.scheme}://{host}{parts.path.rstrip('/')}"
        self.path_prefix = parts.path.rstrip("/")

    def _create_signer(self) -> AwsV4Signer:
        self._parse_endpoint()
        return AwsV4Signer(
            access_key_id=self.credential.access_key_id,
            secret_key=self.credential.access_key_secret,
            region=R2_REGION,
            host=self.host,
            path_prefix=self.path_prefix
        )

    def build_url(self, key: str) -> str:
        return f"{self.base_url}/{self._object_path(key)}"


__all__ = ['CloudflareR2Adapter', 'R2_REGION']
