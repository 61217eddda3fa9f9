"""
存储路径模板工具
将上传路径模板中的占位符替换为实际值，并拼接最终的文件名
"""

import re
import time
from datetime import date as Date, datetime
from typing import Optional

DEFAULT_IMAGE_EXTENSION = "png"

_MULTI_SLASH_RE = re.compile(r"/+")
_EXTENSION_RE = re.compile(r"\.[^/.]+$")


def resolve_path(
    template: str,
    current_file_path: str,
    file_name: str,
    date: Optional[Date] = None
) -> str:
    """
    解析存储路径模板

    占位符：
        {YYYY} 四位年份，{MM}/{DD} 两位月份与日期，
        {PATH} 当前文件所在目录，{FILENAME} 当前文件名（不含扩展名），
        {FOLDER} 当前文件所在目录的最后一级

    替换完成后总是以 file_name 作为最后一段，并合并重复的 / 、去掉开头的 /。

    Args:
        template: 路径模板，如 "images/{YYYY}/{MM}/{DD}"
        current_file_path: 当前笔记的相对路径，如 "notes/a.md"
        file_name: 上传文件名
        date: 用于日期占位符的时间，默认当前本地时间

    Returns:
        str: 对象存储键

    Example:
        >>> resolve_path("images/{YYYY}/{MM}/{DD}", "notes/a.md", "pic.png", datetime(2024, 3, 5))
        'images/2024/03/05/pic.png'
    """
    date = date or datetime.now()

    parts = current_file_path.split("/")
    leaf = parts.pop() if parts else ""
    base_name = _EXTENSION_RE.sub("", leaf)
    folder_path = "/".join(parts)
    folder_name = parts[-1] if parts else ""

    result = (
        template
        .replace("{YYYY}", "{:04d}".format(date.year))
        .replace("{MM}", "{:02d}".format(date.month))
        .replace("{DD}", "{:02d}".format(date.day))
        .replace("{PATH}", folder_path)
        .replace("{FILENAME}", base_name)
        .replace("{FOLDER}", folder_name)
    )

    if not result.endswith("/"):
        result += "/"
    result += file_name

    result = _MULTI_SLASH_RE.sub("/", result)
    if result.startswith("/"):
        result = result[1:]
    return result


def get_file_extension(file_name: str, default: str = DEFAULT_IMAGE_EXTENSION) -> str:
    """获取文件扩展名，没有扩展名时返回默认值"""
    if "." not in file_name:
        return default
    extension = file_name.rsplit(".", 1)[1]
    return extension or default


def generate_image_file_name(original_name: str, timestamp_ms: Optional[int] = None) -> str:
    """
    生成唯一的图片文件名

    Args:
        original_name: 原始文件名，用于提取扩展名
        timestamp_ms: 毫秒时间戳，默认当前时间

    Returns:
        str: 形如 image-1709600000000.png 的文件名
    """
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return "image-{}.{}".format(timestamp_ms, get_file_extension(original_name))


__all__ = [
    'resolve_path',
    'get_file_extension',
    'generate_image_file_name',
]
