"""
API路由聚合模块
将所有v1版本的路由统一注册

路由管理规范：
1. 所有路由文件内部使用相对路径
2. 所有前缀统一在router.py中管理
3. Tags统一使用中文，与端点文件定义保持一致
"""

from fastapi import APIRouter

from bucketsync.api.v1.endpoints import cache, images, storage, sync

api_router = APIRouter()

# ==================== 对象存储路由 ====================
api_router.include_router(storage.router, prefix="/storage", tags=["对象存储"])
api_router.include_router(images.router, prefix="/images", tags=["图片上传"])

# ==================== 文件缓存路由 ====================
api_router.include_router(cache.router, prefix="/cache", tags=["文件缓存"])

# ==================== 笔记同步路由 ====================
api_router.include_router(sync.router, prefix="/sync", tags=["笔记同步"])
