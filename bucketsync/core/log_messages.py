"""
日志消息模板模块
统一管理所有业务日志消息模板，便于维护和国际化
"""

from typing import Dict, Any


class LogMessages:
    """日志消息模板类"""

    # ==================== 通用日志消息 ====================
    START_OPERATION = "开始执行操作: {operation_name}"
    OPERATION_SUCCESS = "操作成功完成: {operation_name}"
    OPERATION_FAILED = "操作执行失败: {operation_name}"

    # ==================== 对象存储相关 ====================
    STORAGE_UPLOAD_START = "开始上传对象: {key}"
    STORAGE_UPLOAD_SUCCESS = "对象上传成功: {key}"
    STORAGE_UPLOAD_FAILED = "对象上传失败: {key}"
    STORAGE_DELETE_SUCCESS = "对象删除成功: {key}"
    STORAGE_DELETE_FAILED = "对象删除失败: {key}"
    STORAGE_CONFIG_INCOMPLETE = "存储配置不完整: {provider}"

    # ==================== 文件缓存相关 ====================
    CACHE_LOADED = "已加载 {count} 条文件缓存"
    CACHE_HIT = "文件 {path} 使用缓存"
    CACHE_MISS = "文件 {path} 无缓存"
    CACHE_EXPIRED = "文件 {path} 缓存已过期"
    CACHE_UPDATED = "文件 {path} 缓存已更新"
    CACHE_REMOVED = "文件 {path} 缓存已移除"
    CACHE_CLEARED = "已清空全部文件缓存"

    # ==================== 同步相关 ====================
    SYNC_FILE_SUCCESS = "文件同步成功: {path}"
    SYNC_FILE_FAILED = "文件同步失败: {path}"

    @classmethod
    def format_message(cls, message_template: str, **kwargs: Any) -> str:
        """格式化日志消息模板"""
        return message_template.format(**kwargs)

    @classmethod
    def get_structured_data(cls, **kwargs: Any) -> Dict[str, Any]:
        """获取结构化日志数据"""
        return kwargs


# 全局实例
log_messages = LogMessages()
