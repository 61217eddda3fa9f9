"""
存储工具模块
提供存储相关的工具函数
"""

from bucketsync.core.storage.utils.path_template import (
    generate_image_file_name,
    get_file_extension,
    resolve_path,
)

__all__ = ['resolve_path', 'get_file_extension', 'generate_image_file_name']
