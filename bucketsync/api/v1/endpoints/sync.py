"""
笔记库同步API端点
采用薄路由、重服务的结构，业务逻辑在 SyncService 中
"""

from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, Query, status

from bucketsync.api.deps import get_github_client, get_sync_service
from bucketsync.core.github import GitHubContentClient, SyncResult
from bucketsync.schemas.common import StandardResponse
from bucketsync.schemas.sync import (
    FileStatusData,
    RateLimitData,
    SyncFileRequest,
    SyncResultData,
)
from bucketsync.services.sync import SyncService

router = APIRouter(tags=["笔记同步"])


def _sync_response(result: SyncResult) -> StandardResponse:
    return StandardResponse(
        status="success" if result.success else "error",
        message=result.message,
        data=SyncResultData(
            success=result.success,
            message=result.message,
            files_processed=result.files_processed,
            files_failed=result.files_failed
        )
    )


def _bad_request(error: ValueError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))


@router.post("/push", response_model=StandardResponse, summary="推送单个文件")
async def push_file(
    request: SyncFileRequest,
    service: SyncService = Depends(get_sync_service)
) -> StandardResponse:
    try:
        return _sync_response(await service.sync_file_to_remote(request.path))
    except ValueError as e:
        raise _bad_request(e) from e


@router.post("/pull", response_model=StandardResponse, summary="拉取单个文件")
async def pull_file(
    request: SyncFileRequest,
    service: SyncService = Depends(get_sync_service)
) -> StandardResponse:
    try:
        return _sync_response(await service.pull_remote_to_file(request.path))
    except ValueError as e:
        raise _bad_request(e) from e


@router.post("/push-all", response_model=StandardResponse, summary="推送全部文件")
async def push_all(service: SyncService = Depends(get_sync_service)) -> StandardResponse:
    return _sync_response(await service.force_sync_local_to_remote())


@router.post("/pull-all", response_model=StandardResponse, summary="拉取全部文件")
async def pull_all(service: SyncService = Depends(get_sync_service)) -> StandardResponse:
    return _sync_response(await service.force_sync_remote_to_local())


@router.post("/initialize", response_model=StandardResponse, summary="从远端初始化空笔记库")
async def initialize(service: SyncService = Depends(get_sync_service)) -> StandardResponse:
    return _sync_response(await service.initialize_repository())


@router.get("/status", response_model=StandardResponse, summary="查询文件同步状态")
async def file_status(
    path: str = Query(..., min_length=1, description="笔记库内的相对路径"),
    service: SyncService = Depends(get_sync_service)
) -> StandardResponse:
    try:
        file_state = await service.file_status(path)
    except ValueError as e:
        raise _bad_request(e) from e

    return StandardResponse(
        status="success",
        message=file_state.message or "获取文件状态成功",
        data=FileStatusData(**asdict(file_state))
    )


@router.get("/rate-limit", response_model=StandardResponse, summary="查询GitHub速率限制")
async def rate_limit(github: GitHubContentClient = Depends(get_github_client)) -> StandardResponse:
    result = await github.check_rate_limit()
    return StandardResponse(
        status="success" if result.can_proceed else "error",
        message=result.message or "GitHub API可正常调用",
        data=RateLimitData(**asdict(result))
    )
