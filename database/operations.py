"""
database operations for the quotes API.
Every statement is built from SQLAlchemy constructs with bound parameters.
"""

from typing import List, Dict, Any, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.future import select

from utils import db_logger, LogContext, log_performance
from utils.exceptions import ConstraintViolation, StorageUnavailable, ErrorCodes
from .connection import DatabaseManager
from .models import QuoteDB, SUPPORTED_LANGUAGES


class QuoteOperations:
    """quote storage operations"""

    def __init__(self, db_manager: DatabaseManager):
        self.db = db_manager
        self.db_logger = db_logger

    async def initialize(self):
        """初始化连接并创建表"""
        try:
            self.db_logger.info("Initializing QuoteOperations...")
            self.db.initialize()
            await self.db.create_tables()
            self.db_logger.info("QuoteOperations initialized successfully")
        except Exception as e:
            self.db_logger.error(f"Failed to initialize QuoteOperations: {e}")
            raise

    async def close(self):
        await self.db.close()

    # === Read Operations ===

    @log_performance("Database", threshold=0.5)
    async def list_all(self) -> List[Dict[str, Any]]:
        """获取所有引言，按语言、作者排序"""
        stmt = select(QuoteDB).order_by(QuoteDB.language, QuoteDB.author)
        return await self._fetch_all(stmt, "list all quotes")

    @log_performance("Database", threshold=0.5)
    async def list_by_language(self, language: str) -> List[Dict[str, Any]]:
        """获取指定语言的引言，按作者排序"""
        stmt = (
            select(QuoteDB)
            .filter(QuoteDB.language == language)
            .order_by(QuoteDB.author)
        )
        return await self._fetch_all(stmt, f"list quotes for {language}")

    @log_performance("Database", threshold=0.5)
    async def get_random(self, language: str) -> Optional[Dict[str, Any]]:
        """随机获取一条指定语言的引言，没有匹配时返回 None"""
        # ORDER BY RANDOM() 在全部匹配行上均匀选择
        stmt = (
            select(QuoteDB)
            .filter(QuoteDB.language == language)
            .order_by(func.random())
            .limit(1)
        )
        try:
            async with self.db.get_async_session() as session:
                result = await session.execute(stmt)
                quote = result.scalars().first()
                return quote.to_dict() if quote else None

        except SQLAlchemyError as e:
            self.db_logger.error(f"Failed to get random quote for {language}: {e}")
            raise StorageUnavailable(
                "Stockage indisponible / Storage unavailable",
                ErrorCodes.DB_QUERY_FAILED
            ) from e

    async def count_quotes(self, language: str = None) -> int:
        """统计引言数量"""
        stmt = select(func.count(QuoteDB.id))
        if language:
            stmt = stmt.filter(QuoteDB.language == language)

        try:
            async with self.db.get_async_session() as session:
                result = await session.execute(stmt)
                return result.scalar_one()

        except SQLAlchemyError as e:
            self.db_logger.error(f"Failed to count quotes: {e}")
            raise StorageUnavailable(
                "Stockage indisponible / Storage unavailable",
                ErrorCodes.DB_QUERY_FAILED
            ) from e

    async def _fetch_all(self, stmt, description: str) -> List[Dict[str, Any]]:
        try:
            async with self.db.get_async_session() as session:
                result = await session.execute(stmt)
                return [quote.to_dict() for quote in result.scalars().all()]

        except SQLAlchemyError as e:
            self.db_logger.error(f"Failed to {description}: {e}")
            raise StorageUnavailable(
                "Stockage indisponible / Storage unavailable",
                ErrorCodes.DB_QUERY_FAILED
            ) from e

    # === Write Operations ===

    @log_performance("Database", threshold=0.5)
    async def add_quote(self, quote: str, author: str, language: str) -> int:
        """新增一条引言，返回新记录的 id"""
        if language not in SUPPORTED_LANGUAGES:
            self.db_logger.error(f"Refusing to store quote with unsupported language {language!r}")
            raise ConstraintViolation(
                f"Unsupported language code: {language!r}",
                ErrorCodes.DB_INTEGRITY_ERROR
            )

        try:
            async with self.db.session_scope() as session:
                db_quote = QuoteDB(quote=quote, author=author, language=language)
                session.add(db_quote)
                await session.flush()
                quote_id = db_quote.id

            self.db_logger.info(f"Stored quote {quote_id} ({language})")
            return quote_id

        except IntegrityError as e:
            self.db_logger.error(f"Constraint violation while storing quote: {e}")
            raise ConstraintViolation(
                f"Constraint violation: {e.orig}",
                ErrorCodes.DB_INTEGRITY_ERROR
            ) from e
        except SQLAlchemyError as e:
            self.db_logger.error(f"Failed to store quote: {e}")
            raise StorageUnavailable(
                "Stockage indisponible / Storage unavailable",
                ErrorCodes.DB_QUERY_FAILED
            ) from e

    async def add_many_quotes(self, quotes: List[Dict[str, Any]]) -> Dict[str, Any]:
        """批量导入引言：单个事务，全部成功或全部回滚"""
        try:
            with LogContext("Database", "add_many_quotes", count=len(quotes)):
                async with self.db.session_scope() as session:
                    for record in quotes:
                        session.add(QuoteDB(
                            quote=record['quote'],
                            author=record['author'],
                            language=record['language']
                        ))
                        # 逐条 flush，失败时定位到具体记录
                        await session.flush()

            return {'success': True, 'count': len(quotes)}

        except (SQLAlchemyError, KeyError) as e:
            cause = str(e.orig) if isinstance(e, IntegrityError) else str(e)
            self.db_logger.error(f"Bulk import rolled back: {cause}")
            return {'success': False, 'error': cause}
