"""
Database module for the quotes API.
Provides SQLite storage for quotes with async support.
"""

from .connection import DatabaseManager
from .models import Base, QuoteDB, Quote, NewQuote, SUPPORTED_LANGUAGES
from .operations import QuoteOperations

__all__ = [
    'models', 'connection', 'operations',
    'DatabaseManager', 'QuoteOperations',
    'Base', 'QuoteDB', 'Quote', 'NewQuote', 'SUPPORTED_LANGUAGES'
]
