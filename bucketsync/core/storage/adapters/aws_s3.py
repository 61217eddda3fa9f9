"""
AWS S3存储适配器
使用虚拟主机风格的端点
"""

from bucketsync.core.config.storage_config import AwsCredential
from bucketsync.core.storage.adapters.base import HttpStorageAdapter
from bucketsync.core.storage.signers import AwsV4Signer


class AwsS3Adapter(HttpStorageAdapter):
    """AWS S3存储适配器"""

    ADAPTER_NAME: str = "aws"
    DISPLAY_NAME: str = "AWS S3"

    credential: AwsCredential

    @property
    def host(self) -> str:
        return f"{self.credential.bucket}.s3.{self.credential.region}.amazonaws.com"

    def _create_signer(self) -> AwsV4Signer:
        return AwsV4Signer(
            access_key_id=self.credential.access_key_id,
            secret_key=self.credential.access_key_secret,
            region=self.credential.region,
            host=self.host
        )

    def build_url(self, key: str) -> str:
        return f"https://{self.host}/{self._object_path(key)}"


__all__ = ['AwsS3Adapter']
