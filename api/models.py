"""
API data models for the quotes API.
Pydantic models describing response bodies.
"""

from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field

from database.models import Quote


class LanguageEnum(str, Enum):
    """语言枚举"""
    FR = "fr"
    EN = "en"


class HealthResponse(BaseModel):
    """健康检查响应模型"""
    status: str = Field("OK", description="服务状态")
    timestamp: str = Field(..., description="ISO 8601 时间戳")


class QuotesResponse(BaseModel):
    """全部引言响应模型"""
    total: int = Field(..., description="引言数量", ge=0)
    quotes: List[Quote] = Field(..., description="引言列表")


class LanguageQuotesResponse(BaseModel):
    """指定语言引言响应模型"""
    language: LanguageEnum = Field(..., description="语言代码")
    total: int = Field(..., description="引言数量", ge=0)
    quotes: List[Quote] = Field(..., description="引言列表")


class QuoteCreatedResponse(BaseModel):
    """新增引言响应模型"""
    message: str = Field(..., description="确认信息")
    quote: Quote = Field(..., description="已保存的引言（不含 id）")


class BulkImportResponse(BaseModel):
    """批量导入响应模型"""
    success: bool = Field(..., description="是否全部导入")
    message: str = Field(..., description="结果信息")
    error: Optional[str] = Field(None, description="失败原因")
