"""
对象存储API端点
上传文件、测试存储配置、解析存储路径
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from bucketsync.api.deps import get_storage_client
from bucketsync.core.log_utils import get_logger
from bucketsync.core.storage import StorageClient, UploadResult
from bucketsync.core.storage.utils import resolve_path
from bucketsync.schemas.common import StandardResponse
from bucketsync.schemas.storage import ResolvePathRequest, UploadResultData

logger = get_logger(__name__)

router = APIRouter(tags=["对象存储"])


def _result_response(result: UploadResult) -> StandardResponse:
    return StandardResponse(
        status="success" if result.success else "error",
        message=result.message,
        data=UploadResultData(
            success=result.success,
            message=result.message,
            url=result.url,
            key=result.key
        )
    )


@router.post(
    "/upload",
    response_model=StandardResponse,
    summary="上传文件",
    description="将文件上传到当前配置的对象存储，remote_path 为对象存储键"
)
async def upload_file(
    file: UploadFile = File(..., description="要上传的文件"),
    remote_path: str = Form(..., min_length=1, description="对象存储键"),
    content_type: Optional[str] = Form(None, description="MIME类型，默认取上传文件的类型"),
    client: StorageClient = Depends(get_storage_client)
) -> StandardResponse:
    data = await file.read()
    result = await client.upload(
        data,
        remote_path.lstrip("/"),
        content_type or file.content_type or "application/octet-stream"
    )
    return _result_response(result)


@router.post(
    "/test",
    response_model=StandardResponse,
    summary="测试存储配置",
    description="上传一个临时测试对象，验证凭证是否可用"
)
async def test_storage(client: StorageClient = Depends(get_storage_client)) -> StandardResponse:
    result = await client.test_connection()
    if result.success:
        logger.info("存储配置测试成功", extra={'provider': client.provider})
    return _result_response(result)


@router.post(
    "/resolve-path",
    response_model=StandardResponse,
    summary="解析存储路径",
    description="将路径模板中的占位符替换为实际值"
)
async def resolve_storage_path(request: ResolvePathRequest) -> StandardResponse:
    key = resolve_path(
        request.template,
        request.current_file_path,
        request.file_name,
        request.date
    )
    return StandardResponse(status="success", message="路径解析成功", data={"key": key})
