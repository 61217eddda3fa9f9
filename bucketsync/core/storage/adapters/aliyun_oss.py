"""
阿里云OSS存储适配器
"""

from bucketsync.core.config.storage_config import AliyunCredential
from bucketsync.core.storage.adapters.base import HttpStorageAdapter
from bucketsync.core.storage.signers import AliyunSigner


class AliyunOssAdapter(HttpStorageAdapter):
    """阿里云OSS存储适配器，端点由地域拼接"""

    ADAPTER_NAME: str = "aliyun"
    DISPLAY_NAME: str = "阿里云OSS"

    credential: AliyunCredential

    def _create_signer(self) -> AliyunSigner:
        return AliyunSigner(self.credential)

    @property
    def host(self) -> str:
        return f"{self.credential.bucket}.oss-{self.credential.region}.aliyuncs.com"

    def build_url(self, key: str) -> str:
        return f"https://{self.host}/{self._object_path(key)}"


__all__ = ['AliyunOssAdapter']
