"""
请求签名模块
各服务商的签名算法实现
"""

from bucketsync.core.storage.signers.aliyun import AliyunSigner
from bucketsync.core.storage.signers.aws_v4 import AwsV4Signer
from bucketsync.core.storage.signers.tencent import TencentSigner

__all__ = [
    'AliyunSigner',
    'AwsV4Signer',
    'TencentSigner',
]
