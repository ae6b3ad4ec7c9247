"""
工具模块包
提供项目所需的通用工具和功能
"""

# 导出核心工具
from .config_manager import config_manager, UnifiedConfigManager
from .exceptions import (
    QuoteSystemError,
    ConfigurationError,
    ValidationError,
    NotFoundError,
    DatabaseError,
    ConstraintViolation,
    StorageUnavailable,
    ErrorCodes,
    create_error_response
)
from .logging_manager import (
    LogContext,
    log_performance,
    logging_manager,
    LogConfig,
    initialize_logging,
    db_logger,
    api_logger,
    config_logger,
    validation_logger,
    main_logger
)
from .date_utils import get_utc_now, get_iso_timestamp
from .path_utils import BASE_DIR, CONFIG_DIR, LOG_DIR, DATA_DIR

# 版本信息
__version__ = "1.0.0"

__all__ = [
    # 配置管理
    "config_manager",
    "UnifiedConfigManager",

    # 异常处理
    "QuoteSystemError",
    "ConfigurationError",
    "ValidationError",
    "NotFoundError",
    "DatabaseError",
    "ConstraintViolation",
    "StorageUnavailable",
    "ErrorCodes",
    "create_error_response",

    # 日志工具
    "LogContext",
    "log_performance",
    "logging_manager",
    "LogConfig",
    "initialize_logging",
    "db_logger",
    "api_logger",
    "config_logger",
    "validation_logger",
    "main_logger",

    # 时间工具
    "get_utc_now",
    "get_iso_timestamp",

    # 路径工具
    "BASE_DIR",
    "CONFIG_DIR",
    "LOG_DIR",
    "DATA_DIR",
]
