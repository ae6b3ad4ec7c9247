"""
统一的配置管理模块
整合JSON配置文件、环境变量和类型安全访问
"""

import os
import json
import logging
from typing import Any, Optional, Dict, List, TypeVar
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from .exceptions import ConfigurationError, ErrorCodes
from .path_utils import CONFIG_DIR, ENV_FILE

# 获取配置专用日志器
config_logger = logging.getLogger("Config")

# 为泛型类型定义一个TypeVar
T = TypeVar('T')

# 环境变量 -> 配置路径
ENV_OVERRIDES = {
    'PORT': ('api_config.port', int),
    'HOST': ('api_config.host', str),
    'API_URL': ('api_config.public_url', str),
    'APP_ENV': ('app_config.env', str),
    'QUOTES_DB_PATH': ('database_config.db_path', str),
    'LOG_LEVEL': ('logging_config.level', str),
}

# ============================================================================
# 配置数据类型定义
# ============================================================================

@dataclass
class LoggingModuleConfig:
    """模块日志配置"""
    level: str = "INFO"
    enabled: bool = True

@dataclass
class FileLoggingConfig:
    """文件日志配置"""
    enabled: bool = True
    directory: str = "log"
    filename: str = "sys.log"
    rotation: Optional[Dict[str, Any]] = None

@dataclass
class ConsoleLoggingConfig:
    """控制台日志配置"""
    enabled: bool = True

@dataclass
class LoggingConfig:
    """完整日志配置"""
    level: str = "INFO"
    format: str = "[%(levelname)s][%(asctime)s][%(filename)s:%(lineno)d] - %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"
    file_config: FileLoggingConfig = field(default_factory=FileLoggingConfig)
    console_config: ConsoleLoggingConfig = field(default_factory=ConsoleLoggingConfig)
    modules: Dict[str, LoggingModuleConfig] = field(default_factory=dict)

@dataclass
class DatabaseConfig:
    """数据库配置"""
    db_path: str = "data/quotes.db"
    echo: bool = False

@dataclass
class ApiConfig:
    """API配置"""
    host: str = "0.0.0.0"
    port: int = 3000
    reload: bool = False
    public_url: Optional[str] = None
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    cors_methods: List[str] = field(default_factory=lambda: ["GET", "POST"])
    cors_headers: List[str] = field(default_factory=lambda: [
        "Origin", "X-Requested-With", "Content-Type", "Accept"
    ])


# ============================================================================
# 统一配置管理器
# ============================================================================

class UnifiedConfigManager:
    """统一配置管理器"""

    def __init__(self, config_dir: str = CONFIG_DIR, env_file: Optional[str] = ENV_FILE,
                 use_env: bool = True):
        self._config_dir = Path(config_dir)
        self._env_file = env_file
        self._use_env = use_env
        self._config_data: Dict[str, Any] = {}

        # 类型化配置缓存
        self._typed_cache: Dict[str, Any] = {}

        # 初始化配置
        self._load_config()

    def _load_config(self) -> None:
        """加载配置文件并应用环境变量"""
        merged_config = {}
        try:
            config_logger.info(f"Loading configuration from directory: {self._config_dir}")

            if not self._config_dir.is_dir():
                raise ConfigurationError(
                    f"Configuration path is not a directory: {self._config_dir}",
                    ErrorCodes.CONFIG_NOT_FOUND
                )

            # 按文件名排序加载，确保加载顺序一致
            config_files = sorted(self._config_dir.glob('*.json'))
            for config_file in config_files:
                try:
                    with open(config_file, 'r', encoding='utf-8') as f:
                        merged_config.update(json.load(f))
                    config_logger.debug(f"Loaded and merged: {config_file.name}")
                except json.JSONDecodeError as e:
                    raise ConfigurationError(
                        f"Invalid JSON in configuration file {config_file.name}: {e}",
                        ErrorCodes.CONFIG_INVALID_FORMAT
                    ) from e

            self._config_data = merged_config
            config_logger.info(f"Configuration loaded and merged from {len(config_files)} files.")

        except ConfigurationError:
            raise
        except Exception as e:
            raise ConfigurationError(
                f"Failed to load configuration: {e}",
                ErrorCodes.CONFIG_INVALID_FORMAT
            ) from e

        if self._use_env:
            self._apply_env_overrides()

        # 清除类型化缓存
        self._typed_cache.clear()

    def _apply_env_overrides(self) -> None:
        """从 .env 和进程环境变量覆盖配置，进程环境变量优先"""
        if self._env_file and Path(self._env_file).exists():
            load_dotenv(self._env_file, override=False)

        for env_name, (path, cast) in ENV_OVERRIDES.items():
            raw = os.getenv(env_name)
            if raw is None or raw == "":
                continue
            try:
                self.set_nested(path, cast(raw))
                config_logger.debug(f"Config override from environment: {env_name} -> {path}")
            except ValueError as e:
                raise ConfigurationError(
                    f"Invalid value for environment variable {env_name}: {raw!r}",
                    ErrorCodes.CONFIG_INVALID_FORMAT
                ) from e

    def get_nested(self, path: str, default: Optional[T] = None) -> Optional[T]:
        """获取嵌套配置值，支持点分隔路径"""
        keys = path.split('.')
        current = self._config_data

        for key in keys:
            if isinstance(current, dict) and key in current:
                current = current[key]
            else:
                return default

        return current

    def set_nested(self, path: str, value: Any) -> None:
        """设置嵌套配置值"""
        keys = path.split('.')
        current = self._config_data

        for key in keys[:-1]:
            if not isinstance(current.get(key), dict):
                current[key] = {}
            current = current[key]

        current[keys[-1]] = value
        self._typed_cache.pop(keys[0], None)

    # ========================================================================
    # 类型安全访问方法
    # ========================================================================

    def get_logging_config(self) -> LoggingConfig:
        """获取日志配置（类型安全）"""
        if 'logging_config' not in self._typed_cache:
            try:
                logging_data = self.get_nested('logging_config', {})

                file_data = logging_data.get('file_config', {})
                file_config = FileLoggingConfig(
                    enabled=file_data.get('enabled', True),
                    directory=file_data.get('directory', 'log'),
                    filename=file_data.get('filename', 'sys.log'),
                    rotation=file_data.get('rotation')
                )

                console_data = logging_data.get('console_config', {})
                console_config = ConsoleLoggingConfig(
                    enabled=console_data.get('enabled', True)
                )

                modules = {}
                for module_name, module_data in logging_data.get('modules', {}).items():
                    modules[module_name] = LoggingModuleConfig(
                        level=module_data.get('level', 'INFO'),
                        enabled=module_data.get('enabled', True)
                    )

                self._typed_cache['logging_config'] = LoggingConfig(
                    level=logging_data.get('level', 'INFO'),
                    file_config=file_config,
                    console_config=console_config,
                    modules=modules
                )
            except Exception as e:
                config_logger.error(f"Failed to parse logging config: {e}")
                self._typed_cache['logging_config'] = LoggingConfig()

        return self._typed_cache['logging_config']

    def get_database_config(self) -> DatabaseConfig:
        """获取数据库配置（类型安全）"""
        if 'database_config' not in self._typed_cache:
            try:
                db_data = self.get_nested('database_config', {})
                self._typed_cache['database_config'] = DatabaseConfig(
                    db_path=db_data.get('db_path', 'data/quotes.db'),
                    echo=db_data.get('echo', False)
                )
            except Exception as e:
                config_logger.error(f"Failed to parse database config: {e}")
                self._typed_cache['database_config'] = DatabaseConfig()

        return self._typed_cache['database_config']

    def get_api_config(self) -> ApiConfig:
        """获取API配置（类型安全）"""
        if 'api_config' not in self._typed_cache:
            try:
                api_data = self.get_nested('api_config', {})
                defaults = ApiConfig()
                self._typed_cache['api_config'] = ApiConfig(
                    host=api_data.get('host', defaults.host),
                    port=int(api_data.get('port', defaults.port)),
                    reload=api_data.get('reload', defaults.reload),
                    public_url=api_data.get('public_url'),
                    cors_origins=api_data.get('cors_origins', defaults.cors_origins),
                    cors_methods=api_data.get('cors_methods', defaults.cors_methods),
                    cors_headers=api_data.get('cors_headers', defaults.cors_headers)
                )
            except Exception as e:
                config_logger.error(f"Failed to parse api config: {e}")
                self._typed_cache['api_config'] = ApiConfig()

        return self._typed_cache['api_config']

    # ========================================================================
    # 便捷方法
    # ========================================================================

    def get_env(self) -> str:
        """运行环境，默认 production"""
        return self.get_nested('app_config.env', 'production')

    def is_development(self) -> bool:
        """是否为开发模式（错误响应中包含细节）"""
        return self.get_env() == 'development'

    def is_production(self) -> bool:
        return self.get_env() == 'production'

    def get_db_path(self) -> str:
        """数据库文件路径，相对路径基于配置目录的上级目录"""
        db_path = self.get_database_config().db_path
        if db_path == ':memory:' or os.path.isabs(db_path):
            return db_path
        return str(self._config_dir.parent / db_path)


# ============================================================================
# 全局单例实例
# ============================================================================

config_manager = UnifiedConfigManager()
