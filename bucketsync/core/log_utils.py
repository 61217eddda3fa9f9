"""
统一日志管理模块
提供标准化的结构化日志记录功能
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Dict, Any

from bucketsync.core.config import settings
from bucketsync.core.log_messages import log_messages


class UnifiedLogger:
    """统一的业务日志记录器，提供结构化日志记录功能"""

    def __init__(self, name: str):
        """初始化日志记录器"""
        self.logger = logging.getLogger(name)
        self.name = name

    def _format_extra_data(self, extra: Optional[Dict[str, Any]] = None, **kwargs: Any) -> Dict[str, Any]:
        """格式化日志额外数据，extra 中的字段平铺到结构化数据里"""
        data = log_messages.get_structured_data(log_module=self.name, **kwargs)
        if extra:
            for key, value in extra.items():
                data.setdefault(key, value)
        return data

    def _build_message(self, message_template: str, **kwargs: Any) -> str:
        """
        构建日志消息

        只有提供了格式化参数时才进行格式化，避免双重格式化问题；
        格式化失败时使用原始消息。
        """
        if not kwargs:
            return message_template
        try:
            return log_messages.format_message(message_template, **kwargs)
        except (KeyError, ValueError, IndexError):
            return message_template

    def info(self, message_template: str, extra: Optional[Dict[str, Any]] = None, **kwargs: Any) -> None:
        """
        记录信息级别日志

        Args:
            message_template: 日志消息，可以是格式化模板或已格式化的字符串
            extra: 附加的结构化字段（可选）
            **kwargs: 格式化参数（可选）

        示例:
            logger.info("简单消息")
            logger.info("{operation_name} 完成", operation_name="上传")
            logger.info("上传成功", extra={"key": key})
        """
        message = self._build_message(message_template, **kwargs)
        self.logger.info(message, extra=self._format_extra_data(extra, **kwargs))

    def error(
        self,
        message_template: str,
        exception: Optional[Exception] = None,
        extra: Optional[Dict[str, Any]] = None,
        **kwargs: Any
    ) -> None:
        """
        记录错误级别日志

        Args:
            message_template: 日志消息
            exception: 异常对象（可选）
            extra: 附加的结构化字段（可选）
            **kwargs: 格式化参数（可选）
        """
        message = self._build_message(message_template, **kwargs)
        extra_data = self._format_extra_data(extra, **kwargs)

        if exception:
            extra_data.update({
                "exception_type": type(exception).__name__,
                "exception_message": str(exception)
            })
            self.logger.error(message, extra=extra_data, exc_info=exception)
        else:
            self.logger.error(message, extra=extra_data)

    def warning(self, message_template: str, extra: Optional[Dict[str, Any]] = None, **kwargs: Any) -> None:
        """记录警告级别日志"""
        message = self._build_message(message_template, **kwargs)
        self.logger.warning(message, extra=self._format_extra_data(extra, **kwargs))

    def debug(self, message_template: str, extra: Optional[Dict[str, Any]] = None, **kwargs: Any) -> None:
        """记录调试级别日志，仅在 app_debug 开启时输出"""
        if settings.app_debug:
            message = self._build_message(message_template, **kwargs)
            self.logger.debug(message, extra=self._format_extra_data(extra, **kwargs))

    def critical(self, message_template: str, extra: Optional[Dict[str, Any]] = None, **kwargs: Any) -> None:
        """记录严重错误级别日志"""
        message = self._build_message(message_template, **kwargs)
        self.logger.critical(message, extra=self._format_extra_data(extra, **kwargs))


_loggers_cache: Dict[str, UnifiedLogger] = {}

# 由 setup_logging 安装的处理器带有此属性，重复配置时只替换这些处理器
_HANDLER_MARK = "_bucketsync_handler"


def get_logger(name: str = __name__) -> UnifiedLogger:
    """获取（并缓存）指定名称的业务日志记录器"""
    logger = _loggers_cache.get(name)
    if logger is None:
        logger = _loggers_cache[name] = UnifiedLogger(name)
    return logger


def _build_file_handler(log_path: Path) -> logging.Handler:
    if settings.log_max_bytes > 0:
        return RotatingFileHandler(
            log_path,
            maxBytes=settings.log_max_bytes,
            backupCount=settings.log_backup_count,
            encoding="utf-8"
        )
    return logging.FileHandler(log_path, encoding="utf-8")


def setup_logging() -> None:
    """
    配置全局日志系统

    日志同时写入 workspace/<log_dir>/<log_file> 和标准输出；文件日志按大小轮转。
    app_debug 开启时控制台输出DEBUG级别。
    """
    log_dir = Path(settings.absolute_log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    level = logging.DEBUG if settings.app_debug else logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in [h for h in root_logger.handlers if getattr(h, _HANDLER_MARK, False)]:
        root_logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(settings.log_format)
    file_handler = _build_file_handler(log_dir / settings.log_file)
    file_handler.setLevel(logging.INFO)
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)

    for handler in (file_handler, console_handler):
        handler.setFormatter(formatter)
        setattr(handler, _HANDLER_MARK, True)
        root_logger.addHandler(handler)

    # 第三方库只保留警告以上
    for noisy in ("uvicorn", "fastapi", "httpx", "httpcore", "redis"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    get_logger(__name__).info(log_messages.OPERATION_SUCCESS, operation_name="日志系统配置")
