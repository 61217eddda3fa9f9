"""
应用配置管理模块
统一管理所有配置信息，包括环境变量和文件配置
"""

from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import field_validator, ConfigDict

from bucketsync.utils.config_utils import (
    get_workspace_path, get_config_path, parse_list_config, parse_json_config
)


class Settings(BaseSettings):
    """应用配置类 - 统一管理所有配置信息"""

    # ==================== 基础配置 ====================
    app_name: str = "BucketSync"
    app_version: str = "1.0.0"
    app_debug: bool = False
    app_env: str = "development"

    # ==================== API配置 ====================
    api_v1_str: str = "/api/v1"
    project_name: str = "BucketSync API"

    # ==================== Redis配置 ====================
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: Optional[str] = None
    # 与其他应用共用同一个库时用于区分键
    redis_key_prefix: str = "bucketsync:"

    # ==================== 对象存储配置 ====================
    # 当前使用的存储服务商: aliyun / tencent / aws / cloudflare
    storage_provider: str = "aliyun"
    storage_timeout: int = 30

    aliyun_access_key_id: str = ""
    aliyun_access_key_secret: str = ""
    aliyun_bucket: str = ""
    aliyun_region: str = ""
    aliyun_cdn_url: str = ""

    tencent_access_key_id: str = ""
    tencent_access_key_secret: str = ""
    tencent_bucket: str = ""
    tencent_region: str = ""
    tencent_cdn_url: str = ""
    tencent_sign_validity: int = 3600

    aws_access_key_id: str = ""
    aws_access_key_secret: str = ""
    aws_bucket: str = ""
    aws_region: str = ""
    aws_cdn_url: str = ""

    cloudflare_access_key_id: str = ""
    cloudflare_access_key_secret: str = ""
    cloudflare_bucket: str = ""
    cloudflare_region: str = "auto"
    cloudflare_endpoint: str = ""
    cloudflare_cdn_url: str = ""

    # ==================== 图片上传配置 ====================
    enable_image_processing: bool = True
    # 路径模板占位符: {PATH} {FILENAME} {FOLDER} {YYYY} {MM} {DD}
    image_upload_path: str = "images/{YYYY}/{MM}/{DD}"
    keep_local_images: bool = False
    local_image_path: str = "assets"

    # ==================== 同步配置 ====================
    vault_dir: str = "vault"
    github_token: str = ""
    repository_url: str = ""
    github_api_url: str = "https://api.github.com"
    github_timeout: int = 30
    sync_excluded_dirs: str = ".obsidian,.git"

    # ==================== 文件缓存配置 ====================
    # 缓存持久化后端: local / redis
    file_cache_backend: str = "local"
    file_cache_key: str = "file-sync-cache"
    file_cache_max_age: int = 300
    file_cache_dir: str = "cache"
    modify_debounce_seconds: float = 2.0

    # ==================== 日志配置 ====================
    log_level: str = "INFO"
    log_dir: str = "log"
    log_file: str = "bucketsync.log"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    # 单个日志文件上限（字节），0 表示不轮转
    log_max_bytes: int = 10 * 1024 * 1024
    log_backup_count: int = 5

    # ==================== 应用服务配置 ====================
    app_port: int = 8080
    app_host: str = "0.0.0.0"

    # ==================== CORS配置 ====================
    cors_origins: str = '["*"]'

    # ==================== 验证器 ====================
    @field_validator("sync_excluded_dirs")
    @classmethod
    def split_excluded_dirs(cls, value: str) -> List[str]:
        """将同步排除目录字符串转换为列表"""
        return parse_list_config(value)

    @field_validator("cors_origins")
    @classmethod
    def parse_cors_origins(cls, value: str) -> List[str]:
        """解析CORS origins配置"""
        return parse_json_config(value)

    @field_validator("storage_provider")
    @classmethod
    def normalize_provider(cls, value: str) -> str:
        """统一存储服务商名称为小写"""
        return value.strip().lower()

    # ==================== 计算属性 ====================
    @property
    def redis_url(self) -> str:
        """构建Redis连接URL"""
        if self.redis_password:
            return (
                f"redis://:{self.redis_password}@{self.redis_host}:"
                f"{self.redis_port}/{self.redis_db}"
            )
        return f"redis://{self.redis_host}:{self.redis_port}/{self.redis_db}"

    @property
    def absolute_log_dir(self) -> str:
        """获取绝对日志目录路径"""
        return str(get_workspace_path(self.log_dir))

    @property
    def absolute_vault_dir(self) -> str:
        """获取笔记库绝对路径"""
        return str(get_workspace_path(self.vault_dir))

    @property
    def absolute_file_cache_dir(self) -> str:
        """获取文件缓存持久化目录的绝对路径"""
        return str(get_workspace_path(self.file_cache_dir))

    @property
    def github_enabled(self) -> bool:
        """检查GitHub同步是否已配置"""
        return bool(self.github_token and self.repository_url)

    model_config = ConfigDict(
        env_file=get_config_path(".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="allow",
        validate_default=True
    )


def get_settings() -> Settings:
    """获取应用配置实例"""
    # 环境变量文件加载由外部环境控制，这里只返回配置实例
    return Settings()


# 全局配置实例
settings = get_settings()
