"""
存储适配器模块
提供各种对象存储服务的适配器实现
"""

from bucketsync.core.storage.adapters.aliyun_oss import AliyunOssAdapter
from bucketsync.core.storage.adapters.aws_s3 import AwsS3Adapter
from bucketsync.core.storage.adapters.cloudflare_r2 import CloudflareR2Adapter
from bucketsync.core.storage.adapters.tencent_cos import TencentCosAdapter

__all__ = [
    'AliyunOssAdapter',
    'AwsS3Adapter',
    'CloudflareR2Adapter',
    'TencentCosAdapter',
]
