"""
图片上传API端点
处理笔记中粘贴的图片
"""

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status

from bucketsync.api.deps import get_image_upload_service
from bucketsync.core.log_utils import get_logger
from bucketsync.schemas.common import StandardResponse
from bucketsync.schemas.storage import ImageUploadData
from bucketsync.services.image import ImageUploadService

logger = get_logger(__name__)

router = APIRouter(tags=["图片上传"])


@router.post(
    "/upload",
    response_model=StandardResponse,
    summary="上传粘贴的图片",
    description="生成唯一文件名并按模板上传，返回可插入笔记的Markdown图片链接"
)
async def upload_image(
    file: UploadFile = File(..., description="图片文件"),
    current_file_path: str = Form("", description="当前笔记的相对路径"),
    service: ImageUploadService = Depends(get_image_upload_service)
) -> StandardResponse:
    data = await file.read()
    try:
        result = await service.handle_image_upload(
            data=data,
            original_name=file.filename or "",
            content_type=file.content_type or "",
            current_file_path=current_file_path
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    return StandardResponse(
        status="success" if result.success else "error",
        message=result.message,
        data=ImageUploadData(
            success=result.success,
            message=result.message,
            file_name=result.file_name,
            url=result.url,
            key=result.key,
            local_path=result.local_path,
            markdown=result.markdown
        )
    )
