"""
对象存储相关的Pydantic模型
"""

from datetime import date as Date
from typing import Optional

from pydantic import BaseModel, Field


class ResolvePathRequest(BaseModel):
    """存储路径解析请求"""
    template: str = Field(..., description="路径模板，如 images/{YYYY}/{MM}/{DD}")
    current_file_path: str = Field("", description="当前笔记的相对路径")
    file_name: str = Field(..., min_length=1, description="上传文件名")
    date: Optional[Date] = Field(None, description="日期占位符使用的日期，默认今天")


class UploadResultData(BaseModel):
    """上传结果"""
    success: bool
    message: str
    url: Optional[str] = None
    key: Optional[str] = None


class ImageUploadData(BaseModel):
    """图片上传结果"""
    success: bool
    message: str
    file_name: str
    url: Optional[str] = None
    key: Optional[str] = None
    local_path: Optional[str] = None
    markdown: Optional[str] = None
