"""
图片服务模块
包含图片相关的业务服务
"""

from .upload.service import ImageUploadResult, ImageUploadService

__all__ = [
    'ImageUploadService',
    'ImageUploadResult'
]
