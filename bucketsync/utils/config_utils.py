"""
配置工具模块
处理工作目录定位与配置值解析
"""

import json
import logging
import os
from pathlib import Path
from typing import List

logger = logging.getLogger(__name__)

# 设置后覆盖默认的 <项目根目录>/workspace
WORKSPACE_ENV = "BUCKETSYNC_WORKSPACE"


def get_project_root() -> Path:
    """获取项目根目录路径"""
    return Path(__file__).resolve().parent.parent.parent


def get_workspace_path(sub_path: str = "") -> Path:
    """
    获取workspace目录下的路径

    日志、笔记库、缓存文件都放在workspace下；sub_path 为绝对路径时原样返回。
    """
    override = os.environ.get(WORKSPACE_ENV, "").strip()
    workspace_dir = Path(override) if override else get_project_root() / "workspace"
    if not sub_path:
        return workspace_dir
    path = Path(sub_path)
    return path if path.is_absolute() else workspace_dir / path


def get_config_path(sub_path: str = "") -> Path:
    """获取config目录路径"""
    config_dir = get_project_root() / "config"
    return config_dir / sub_path if sub_path else config_dir


def parse_list_config(value: str, separator: str = ",") -> List[str]:
    """解析逗号分隔的配置字符串，忽略空项"""
    if not value:
        return []
    return [item.strip() for item in value.split(separator) if item.strip()]


def parse_json_config(value: str) -> List[str]:
    """
    解析列表配置

    优先按JSON数组解析，例如 '["http://localhost:3000"]'；
    不是合法JSON时退回逗号分隔格式。
    """
    if not value:
        return []
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError:
        logger.warning("列表配置不是JSON数组，按逗号分隔解析: %s", value)
        return parse_list_config(value)

    if isinstance(parsed, list):
        return [str(item) for item in parsed]
    return [str(parsed)]
