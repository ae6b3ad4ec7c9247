"""
database models for the quotes API.
One table, quotes, plus the pydantic shapes exchanged with the API layer.
"""

from pydantic import BaseModel, Field
from sqlalchemy import Column, Integer, Text, CheckConstraint, Index
from sqlalchemy.orm import declarative_base

# 支持的语言代码
SUPPORTED_LANGUAGES = ('fr', 'en')

Base = declarative_base()


class QuoteDB(Base):
    """database model for quotes"""
    __tablename__ = 'quotes'

    id = Column(Integer, primary_key=True, autoincrement=True)
    quote = Column(Text, nullable=False)
    author = Column(Text, nullable=False)
    language = Column(Text, nullable=False)

    __table_args__ = (
        CheckConstraint(
            "language IN ({})".format(", ".join(f"'{code}'" for code in SUPPORTED_LANGUAGES)),
            name='ck_quotes_language'
        ),
        Index('idx_quotes_language_author', 'language', 'author'),
        # AUTOINCREMENT 保证 id 不被复用
        {'sqlite_autoincrement': True},
    )

    def to_dict(self) -> dict:
        """公开字段，不包含 id"""
        return {
            'quote': self.quote,
            'author': self.author,
            'language': self.language
        }


class Quote(BaseModel):
    """quote API model"""
    quote: str = Field(..., description="引言内容")
    author: str = Field(..., description="作者")
    language: str = Field(..., description="语言代码 fr|en")


class NewQuote(BaseModel):
    """single quote submission body"""
    quote: str = Field(..., description="引言内容")
    author: str = Field(..., description="作者")
