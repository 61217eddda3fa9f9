"""
BucketSync - FastAPI主应用
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from bucketsync.api.deps import get_file_cache, get_modification_watcher
from bucketsync.api.v1.router import api_router
from bucketsync.core.config import settings
from bucketsync.core.log_utils import get_logger, setup_logging
from bucketsync.core.redis import redis_client
from bucketsync.core.storage import list_available_adapters

# 初始化日志系统
setup_logging()

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    """应用生命周期管理"""
    logger.info("应用启动中...")
    logger.info(
        "存储服务配置",
        extra={
            'storage_provider': settings.storage_provider,
            'available_adapters': list_available_adapters(),
            'file_cache_backend': settings.file_cache_backend
        }
    )
    if not settings.github_enabled:
        logger.warning("GitHub Token或仓库地址未配置，同步功能不可用")

    # 预加载文件缓存，失败时在首次访问时重试
    try:
        await get_file_cache().load()
    except Exception as e:
        logger.warning("文件缓存预加载失败", extra={'error': str(e)})

    logger.info("应用启动完成")

    yield

    await get_modification_watcher().aclose()
    if settings.file_cache_backend == "redis":
        await redis_client.close()
    logger.info("应用关闭")


app = FastAPI(
    title=settings.project_name,
    version=settings.app_version,
    description="笔记库对象存储上传与GitHub同步服务",
    openapi_url=f"{settings.api_v1_str}/openapi.json",
    docs_url=f"{settings.api_v1_str}/docs",
    redoc_url=f"{settings.api_v1_str}/redoc",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"]
)

# 注册API路由
app.include_router(api_router, prefix=settings.api_v1_str)


@app.get("/")
def read_root():
    """根路径"""
    return {
        "message": "BucketSync API",
        "version": settings.app_version,
        "docs": f"{settings.api_v1_str}/docs"
    }


@app.get("/health")
def health_check():
    """健康检查"""
    return {
        "status": "healthy",
        "storage_provider": settings.storage_provider,
        "github_enabled": settings.github_enabled
    }


def run() -> None:
    """命令行入口"""
    import uvicorn

    uvicorn.run(
        "bucketsync.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.app_debug,
        log_level=settings.log_level.lower()
    )


if __name__ == "__main__":
    run()
