"""
图片上传服务
处理粘贴图片的上传：生成文件名、解析存储路径、上传到对象存储并按需保留本地副本
"""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from bucketsync.core.config import settings
from bucketsync.core.log_utils import get_logger
from bucketsync.core.storage.client import StorageClient
from bucketsync.core.storage.utils import generate_image_file_name, resolve_path

logger = get_logger(__name__)


@dataclass(frozen=True)
class ImageUploadResult:
    """
    图片上传结果

    Attributes:
        success: 是否成功
        message: 结果描述
        file_name: 生成的文件名
        url: 图片地址（远端URL或本地相对路径）
        key: 对象存储键，仅保存到本地时为None
        local_path: 本地副本的相对路径
        markdown: 可直接插入笔记的图片链接
    """
    success: bool
    message: str
    file_name: str
    url: Optional[str] = None
    key: Optional[str] = None
    local_path: Optional[str] = None
    markdown: Optional[str] = None


class ImageUploadService:
    """
    图片上传服务

    Args:
        storage: 存储客户端，为None时只保存到本地
        vault_dir: 本地笔记库目录
    """

    def __init__(
        self,
        storage: Optional[StorageClient] = None,
        vault_dir: Optional[Union[str, Path]] = None
    ) -> None:
        self.storage = storage
        self.vault_dir = Path(vault_dir or settings.absolute_vault_dir)

    @property
    def storage_configured(self) -> bool:
        return self.storage is not None and self.storage.is_configured()

    @staticmethod
    def _validate_file_type(content_type: Optional[str]) -> bool:
        """验证是否为图片类型"""
        return bool(content_type) and content_type.startswith("image/")

    def _save_local(self, data: bytes, relative_path: str) -> None:
        target = (self.vault_dir / relative_path).resolve()
        root = self.vault_dir.resolve()
        if root not in target.parents:
            raise ValueError("本地图片路径超出笔记库目录: {}".format(relative_path))
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)

    async def handle_image_upload(
        self,
        data: bytes,
        original_name: str,
        content_type: str,
        current_file_path: str,
        now: Optional[datetime] = None
    ) -> ImageUploadResult:
        """
        处理一张粘贴的图片

        存储已配置时上传并返回远端地址，开启 keep_local_images 时额外保存本地副本；
        存储未配置时只保存到本地。

        Raises:
            ValueError: 文件类型不是图片时抛出
        """
        if not self._validate_file_type(content_type):
            raise ValueError("不支持的文件类型，仅支持图片文件: {}".format(content_type))

        file_name = generate_image_file_name(original_name)

        if not settings.enable_image_processing:
            return ImageUploadResult(success=False, message="图片处理功能未开启", file_name=file_name)

        if not self.storage_configured:
            return self._save_local_only(data, file_name, current_file_path, now)

        key = resolve_path(settings.image_upload_path, current_file_path, file_name, now)
        result = await self.storage.upload(data, key, content_type)
        if not result.success:
            logger.warning("图片上传失败", extra={'key': key, 'reason': result.message})
            return ImageUploadResult(
                success=False,
                message="图片上传失败: {}".format(result.message),
                file_name=file_name,
                key=key
            )

        local_path = None
        if settings.keep_local_images and settings.local_image_path:
            local_path = resolve_path(settings.local_image_path, current_file_path, file_name, now)
            try:
                self._save_local(data, local_path)
            except (OSError, ValueError) as e:
                logger.warning("保存本地图片副本失败", extra={'local_path': local_path, 'error': str(e)})
                local_path = None

        logger.info("图片上传成功", extra={'key': key, 'size': len(data)})
        return ImageUploadResult(
            success=True,
            message="图片上传成功",
            file_name=file_name,
            url=result.url,
            key=key,
            local_path=local_path,
            markdown=f"![{file_name}]({result.url})"
        )

    def _save_local_only(
        self,
        data: bytes,
        file_name: str,
        current_file_path: str,
        now: Optional[datetime]
    ) -> ImageUploadResult:
        local_path = resolve_path(settings.local_image_path, current_file_path, file_name, now)
        try:
            self._save_local(data, local_path)
        except (OSError, ValueError) as e:
            logger.error("本地保存图片失败", exception=e, extra={'local_path': local_path})
            return ImageUploadResult(
                success=False,
                message="图片保存失败: {}".format(str(e)),
                file_name=file_name
            )

        logger.info("存储未配置，图片已保存到本地", extra={'local_path': local_path})
        return ImageUploadResult(
            success=True,
            message="图片已保存到本地",
            file_name=file_name,
            url=local_path,
            local_path=local_path,
            markdown=f"![{file_name}]({local_path})"
        )


__all__ = ['ImageUploadService', 'ImageUploadResult']
