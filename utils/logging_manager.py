"""
Logging setup for the quotes API.
Configures the root logger once (console plus size-rotated file), exposes one
named logger per component, and provides timing helpers for storage calls.
"""

import logging
import sys
import os
import time
import asyncio
import functools
import threading
from pathlib import Path
from logging.handlers import RotatingFileHandler
from typing import Optional, Dict, Callable
from dataclasses import dataclass

from .exceptions import QuoteSystemError, ErrorCodes
from .config_manager import config_manager, LoggingModuleConfig
from .path_utils import BASE_DIR, LOG_DIR

logger = logging.getLogger("LoggingManager")


@dataclass
class LogConfig:
    """根日志器设置"""
    level: str = "INFO"
    format: str = "[%(levelname)s][%(asctime)s][%(filename)s:%(lineno)d] - %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"
    file_max_bytes: int = 10 * 1024 * 1024
    file_backup_count: int = 5
    enable_console: bool = True
    enable_file: bool = True
    log_directory: Optional[str] = None
    log_filename: str = "sys.log"


class LoggingManager:
    """进程级日志管理器（单例）"""

    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        with cls._lock:
            if cls._instance is None:
                cls._instance = super().__new__(cls)
                cls._instance._config = LogConfig()
        return cls._instance

    def configure(self, config: LogConfig = None):
        """按 LogConfig 重建根日志器的处理器"""
        self._config = config or self._config
        if self._config.log_directory is None:
            self._config.log_directory = str(LOG_DIR)

        root_logger = logging.getLogger()
        root_logger.setLevel(getattr(logging, self._config.level.upper(), logging.INFO))

        for handler in root_logger.handlers[:]:
            handler.close()
            root_logger.removeHandler(handler)

        formatter = logging.Formatter(self._config.format, datefmt=self._config.date_format)

        if self._config.enable_console:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setFormatter(formatter)
            root_logger.addHandler(console_handler)

        if self._config.enable_file:
            log_directory = Path(self._config.log_directory)
            log_directory.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                filename=log_directory / self._config.log_filename,
                maxBytes=self._config.file_max_bytes,
                backupCount=self._config.file_backup_count,
                encoding="utf-8"
            )
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)

    def configure_from_config_file(self):
        """读取 logging_config 段并应用"""
        try:
            logging_config = config_manager.get_logging_config()
            file_config = logging_config.file_config
            rotation = file_config.rotation or {}

            log_directory = file_config.directory
            if not os.path.isabs(log_directory):
                log_directory = str(BASE_DIR / log_directory)

            self.configure(LogConfig(
                level=logging_config.level,
                format=logging_config.format,
                date_format=logging_config.date_format,
                file_max_bytes=rotation.get('max_bytes_mb', 10) * 1024 * 1024,
                file_backup_count=rotation.get('backup_count', 5),
                enable_console=logging_config.console_config.enabled,
                enable_file=file_config.enabled,
                log_directory=log_directory,
                log_filename=file_config.filename
            ))
            self.apply_module_levels(logging_config.modules)
            return logging_config

        except Exception as e:
            raise QuoteSystemError(
                f"Failed to configure logging from config file: {e}",
                ErrorCodes.CONFIG_INVALID_FORMAT
            ) from e

    def apply_module_levels(self, modules: Dict[str, LoggingModuleConfig]):
        """设置各组件日志级别，禁用的组件只保留 CRITICAL"""
        for name, module_config in modules.items():
            level = logging.CRITICAL
            if module_config.enabled:
                level = getattr(logging, module_config.level.upper(), logging.INFO)
            self.get_logger(name).setLevel(level)

    def get_logger(self, name: str) -> logging.Logger:
        return logging.getLogger(name)


class LogContext:
    """记录一次操作的开始、完成或失败及耗时"""

    def __init__(self, module: str, operation: str = None, **extra_context):
        self.logger = logging_manager.get_logger(module)
        parts = [module] + ([operation] if operation else [])
        parts += [f"{key}:{value}" for key, value in extra_context.items()]
        self.context = ".".join(parts)
        self.start_time = None

    def __enter__(self):
        self.start_time = time.time()
        self.logger.info(f"[{self.context}] Starting operation")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        duration = time.time() - self.start_time
        if exc_type is None:
            self.logger.info(f"[{self.context}] Operation completed in {duration:.2f}s")
        else:
            self.logger.error(f"[{self.context}] Operation failed in {duration:.2f}s: {exc_val}")


def log_performance(module: str, threshold: float = 1.0):
    """超过阈值（秒）的调用记 WARNING，其余记 DEBUG"""
    def decorator(func: Callable) -> Callable:
        if asyncio.iscoroutinefunction(func):
            @functools.wraps(func)
            async def async_wrapper(*args, **kwargs):
                start_time = time.time()
                try:
                    return await func(*args, **kwargs)
                finally:
                    _log_duration(module, func.__name__, time.time() - start_time, threshold)
            return async_wrapper

        @functools.wraps(func)
        def sync_wrapper(*args, **kwargs):
            start_time = time.time()
            try:
                return func(*args, **kwargs)
            finally:
                _log_duration(module, func.__name__, time.time() - start_time, threshold)
        return sync_wrapper

    return decorator


def _log_duration(module: str, name: str, duration: float, threshold: float):
    module_logger = logging_manager.get_logger(module)
    if duration > threshold:
        module_logger.warning(f"[{module}] Slow operation: {name} took {duration:.2f}s")
    else:
        module_logger.debug(f"[{module}] {name} completed in {duration:.3f}s")


logging_manager = LoggingManager()

# 各组件日志器
db_logger = logging_manager.get_logger("Database")
api_logger = logging_manager.get_logger("API")
config_logger = logging_manager.get_logger("Config")
validation_logger = logging_manager.get_logger("Validation")
main_logger = logging_manager.get_logger("Main")


def initialize_logging(use_config_file: bool = True):
    """初始化日志；配置文件无法应用时退回到仅控制台输出"""
    if not use_config_file:
        logging_manager.configure()
        logger.info("Logging system initialized with default config")
        return True

    try:
        logging_config = logging_manager.configure_from_config_file()
        logger.info(f"Logging system initialized from config file (level={logging_config.level})")
    except QuoteSystemError as e:
        logging_manager.configure(LogConfig(enable_file=False))
        logger.warning(f"{e.message}; falling back to console logging")
    return True
