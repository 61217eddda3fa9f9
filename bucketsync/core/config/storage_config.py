"""
对象存储凭证配置模块
按服务商区分的凭证模型，以及从全局配置构建凭证的工具
"""

from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from bucketsync.core.config.config import Settings, settings


class _CredentialBase(BaseModel):
    """凭证公共字段"""

    model_config = ConfigDict(frozen=True)

    access_key_id: str = Field(default="", description="AccessKey ID / SecretId")
    access_key_secret: str = Field(default="", description="AccessKey Secret / SecretKey")
    bucket: str = Field(default="", description="存储桶名称")
    region: str = Field(default="", description="地域")
    cdn_url: Optional[str] = Field(default=None, description="CDN加速域名，配置后返回CDN地址")

    def required_fields(self) -> List[str]:
        """必填字段列表"""
        return ["access_key_id", "access_key_secret", "bucket", "region"]

    def missing_fields(self) -> List[str]:
        """返回未填写的必填字段"""
        missing = []
        for field in self.required_fields():
            value = getattr(self, field)
            if not value or not str(value).strip():
                missing.append(field)
        return missing

    @property
    def cdn_base(self) -> Optional[str]:
        """去掉结尾斜杠的CDN地址"""
        if self.cdn_url and self.cdn_url.strip():
            return self.cdn_url.strip().rstrip("/")
        return None


class AliyunCredential(_CredentialBase):
    """阿里云OSS凭证"""
    provider: Literal["aliyun"] = "aliyun"


class TencentCredential(_CredentialBase):
    """腾讯云COS凭证"""
    provider: Literal["tencent"] = "tencent"


class AwsCredential(_CredentialBase):
    """AWS S3凭证"""
    provider: Literal["aws"] = "aws"


class CloudflareCredential(_CredentialBase):
    """Cloudflare R2凭证，endpoint为必填"""
    provider: Literal["cloudflare"] = "cloudflare"
    region: str = Field(default="auto", description="R2固定使用auto")
    endpoint: str = Field(default="", description="R2 S3兼容端点，如 https://<account>.r2.cloudflarestorage.com")

    def required_fields(self) -> List[str]:
        return super().required_fields() + ["endpoint"]


ProviderCredential = Annotated[
    Union[AliyunCredential, TencentCredential, AwsCredential, CloudflareCredential],
    Field(discriminator="provider"),
]


def get_storage_credential(
    provider: Optional[str] = None,
    config: Optional[Settings] = None
) -> ProviderCredential:
    """
    从全局配置构建指定服务商的凭证

    Args:
        provider: 服务商名称，不指定则使用 settings.storage_provider
        config: 配置实例，默认使用全局配置

    Returns:
        ProviderCredential: 对应服务商的凭证

    Raises:
        UnsupportedProviderError: 服务商不受支持时抛出
    """
    config = config or settings
    provider = (provider or config.storage_provider).strip().lower()

    if provider == "aliyun":
        return AliyunCredential(
            access_key_id=config.aliyun_access_key_id,
            access_key_secret=config.aliyun_access_key_secret,
            bucket=config.aliyun_bucket,
            region=config.aliyun_region,
            cdn_url=config.aliyun_cdn_url or None,
        )
    if provider == "tencent":
        return TencentCredential(
            access_key_id=config.tencent_access_key_id,
            access_key_secret=config.tencent_access_key_secret,
            bucket=config.tencent_bucket,
            region=config.tencent_region,
            cdn_url=config.tencent_cdn_url or None,
        )
    if provider == "aws":
        return AwsCredential(
            access_key_id=config.aws_access_key_id,
            access_key_secret=config.aws_access_key_secret,
            bucket=config.aws_bucket,
            region=config.aws_region,
            cdn_url=config.aws_cdn_url or None,
        )
    if provider == "cloudflare":
        return CloudflareCredential(
            access_key_id=config.cloudflare_access_key_id,
            access_key_secret=config.cloudflare_access_key_secret,
            bucket=config.cloudflare_bucket,
            region=config.cloudflare_region or "auto",
            endpoint=config.cloudflare_endpoint,
            cdn_url=config.cloudflare_cdn_url or None,
        )

    # 延迟导入，避免与存储包循环引用
    from bucketsync.core.storage.exceptions import UnsupportedProviderError
    raise UnsupportedProviderError(provider)


def validate_storage_credential(credential: ProviderCredential) -> bool:
    """验证凭证完整性"""
    return not credential.missing_fields()


__all__ = [
    "AliyunCredential",
    "TencentCredential",
    "AwsCredential",
    "CloudflareCredential",
    "ProviderCredential",
    "get_storage_credential",
    "validate_storage_credential",
]
