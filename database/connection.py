"""
Database connection management.
Provides the SQLite engine (async, aiosqlite driver) and session factory
for one embedded database file, opened once and held for the process lifetime.
Write transactions are serialized through a single lock so a batch never
shares uncommitted state with a concurrent insert.
"""

import asyncio
import os
from typing import AsyncGenerator, Optional

from contextlib import asynccontextmanager
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from utils import db_logger, config_manager

MEMORY_DB = ':memory:'


class DatabaseManager:
    """数据库管理器"""

    def __init__(self, db_path: Optional[str] = None, echo: Optional[bool] = None):
        self.db_path = db_path or config_manager.get_db_path()
        self.echo = config_manager.get_database_config().echo if echo is None else echo
        self.async_engine: Optional[AsyncEngine] = None
        self.AsyncSessionLocal: Optional[async_sessionmaker] = None
        self.write_lock: Optional[asyncio.Lock] = None

    @property
    def is_initialized(self) -> bool:
        return self.async_engine is not None

    def initialize(self):
        """初始化数据库连接"""
        if self.is_initialized:
            return

        try:
            engine_options = {
                "connect_args": {"check_same_thread": False},
                "echo": self.echo
            }
            if self.db_path == MEMORY_DB:
                # 内存库只存在于单个连接中
                engine_options["poolclass"] = StaticPool
            else:
                # 确保数据目录存在；文件库每个会话使用独立连接
                directory = os.path.dirname(os.path.abspath(self.db_path))
                os.makedirs(directory, exist_ok=True)

            db_logger.info(f"[Database] Using database path: {self.db_path}")
            self.async_engine = create_async_engine(
                f"sqlite+aiosqlite:///{self.db_path}",
                **engine_options
            )
            event.listen(self.async_engine.sync_engine, "connect", self._on_connect)

            self.AsyncSessionLocal = async_sessionmaker(
                bind=self.async_engine,
                class_=AsyncSession,
                autoflush=False,
                expire_on_commit=False
            )
            self.write_lock = asyncio.Lock()

            db_logger.info("[Database] Database connection initialized successfully")

        except Exception as e:
            db_logger.error(f"[Database] Failed to initialize database: {e}")
            raise

    def _on_connect(self, dbapi_connection, connection_record):
        """设置 SQLite PRAGMA"""
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys = ON")  # 确保约束生效
        if self.db_path != MEMORY_DB:
            cursor.execute("PRAGMA journal_mode = WAL")  # 读操作不被写操作阻塞
            cursor.execute("PRAGMA synchronous = NORMAL")  # WAL 模式下安全的折衷
        cursor.close()

    async def create_tables(self):
        """创建数据库表（已存在则跳过）"""
        if not self.is_initialized:
            raise RuntimeError("Database not initialized")

        try:
            from .models import Base

            async with self.async_engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            db_logger.info("[Database] Database tables created successfully")

        except Exception as e:
            db_logger.error(f"[Database] Failed to create tables: {e}")
            raise

    def get_async_session(self) -> AsyncSession:
        """获取异步数据库会话（只读查询）"""
        if not self.AsyncSessionLocal:
            raise RuntimeError("Database not initialized")
        return self.AsyncSessionLocal()

    @asynccontextmanager
    async def session_scope(self) -> AsyncGenerator[AsyncSession, None]:
        """写事务范围：持有写锁，成功提交，异常回滚"""
        session = self.get_async_session()
        async with self.write_lock:
            async with session:
                try:
                    yield session
                    await session.commit()
                except Exception:
                    await session.rollback()
                    raise

    async def close(self):
        """关闭数据库连接"""
        try:
            if self.async_engine:
                await self.async_engine.dispose()
            db_logger.info("[Database] Database connections closed")
        except Exception as e:
            db_logger.error(f"[Database] Error closing database connections: {e}")
        finally:
            self.async_engine = None
            self.AsyncSessionLocal = None
            self.write_lock = None
