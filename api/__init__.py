"""
API module for the quotes API.
Provides the FastAPI-based REST API over the quote storage.
"""

__all__ = ['app', 'routes', 'models', 'middleware']
