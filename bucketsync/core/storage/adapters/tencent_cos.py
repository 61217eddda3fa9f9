"""
腾讯云COS存储适配器
"""

from bucketsync.core.config import settings
from bucketsync.core.config.storage_config import TencentCredential
from bucketsync.core.storage.adapters.base import HttpStorageAdapter
from bucketsync.core.storage.signers import TencentSigner


class TencentCosAdapter(HttpStorageAdapter):
    """腾讯云COS存储适配器"""

    ADAPTER_NAME: str = "tencent"
    DISPLAY_NAME: str = "腾讯云COS"

    credential: TencentCredential

    def _create_signer(self) -> TencentSigner:
        return TencentSigner(self.credential, validity=settings.tencent_sign_validity)

    def build_url(self, key: str) -> str:
        return f"https://{self.signer.host}/{self._object_path(key)}"


__all__ = ['TencentCosAdapter']
