"""
统一异常定义模块
提供项目特定的异常类和错误处理机制
"""

from typing import Optional, Dict, Any


class QuoteSystemError(Exception):
    """引言系统基础异常类"""

    def __init__(self, message: str, error_code: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.context = context or {}

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"


class ConfigurationError(QuoteSystemError):
    """配置相关错误"""
    pass


class ValidationError(QuoteSystemError):
    """请求数据验证错误，对应 400"""
    pass


class NotFoundError(QuoteSystemError):
    """查询成功但没有匹配的记录，对应 404"""
    pass


class DatabaseError(QuoteSystemError):
    """数据库相关错误"""
    pass


class ConstraintViolation(DatabaseError):
    """写入违反语言约束（验证被绕过）"""
    pass


class StorageUnavailable(DatabaseError):
    """存储引擎无法执行查询"""
    pass


# 错误代码常量
class ErrorCodes:
    """错误代码常量"""

    # 配置错误
    CONFIG_NOT_FOUND = "CONFIG_001"
    CONFIG_INVALID_FORMAT = "CONFIG_002"
    CONFIG_MISSING_KEY = "CONFIG_003"

    # 数据库错误
    DB_CONNECTION_FAILED = "DB_001"
    DB_QUERY_FAILED = "DB_002"
    DB_TRANSACTION_FAILED = "DB_003"
    DB_INTEGRITY_ERROR = "DB_004"

    # 验证错误
    VALIDATION_UNSUPPORTED_LANGUAGE = "VAL_001"
    VALIDATION_MISSING_REQUIRED_FIELD = "VAL_002"
    VALIDATION_INVALID_FORMAT = "VAL_003"

    # 未找到
    NOT_FOUND_QUOTES = "NF_001"
    NOT_FOUND_ROUTE = "NF_002"


def create_error_response(error: QuoteSystemError,
                          include_details: bool = False) -> Dict[str, Any]:
    """创建标准化的错误响应"""
    response = {"error": error.message}
    response.update(error.context)

    if include_details:
        response["details"] = {
            "error_code": error.error_code,
            "cause": str(error.__cause__) if error.__cause__ else None
        }

    return response
