"""
Quotes API Test Suite
=====================

This package contains tests for the quotes API including:
- Unit tests for storage, validation, configuration and routes
- Integration tests for complete request flows against a real SQLite file
"""
