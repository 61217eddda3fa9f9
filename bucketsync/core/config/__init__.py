"""
配置模块
包含应用所有配置信息和工具
"""

from bucketsync.core.config.config import settings, get_settings

__all__ = ["settings", "get_settings"]
