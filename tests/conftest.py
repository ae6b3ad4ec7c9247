"""
pytest configuration and fixtures for quotes API tests
"""

import json
import sys
from pathlib import Path
from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from api.app import create_app
from database.connection import DatabaseManager
from database.operations import QuoteOperations
from utils.config_manager import UnifiedConfigManager
from tests.factories import QuoteFactory


def write_config(config_dir: Path, env: str = "production", port: int = 3000,
                 public_url: str = None) -> Path:
    """Write a minimal config directory for tests"""
    config_dir.mkdir(parents=True, exist_ok=True)
    api_config = {"port": port}
    if public_url:
        api_config["public_url"] = public_url
    config = {
        "app_config": {"env": env},
        "api_config": api_config,
        "database_config": {"db_path": "quotes.db"},
        "logging_config": {
            "level": "WARNING",  # Reduce noise in tests
            "file_config": {"enabled": False}
        }
    }
    with open(config_dir / "config.json", "w", encoding="utf-8") as f:
        json.dump(config, f)
    return config_dir


@pytest.fixture
def test_config(tmp_path):
    """Production-mode configuration isolated from the environment"""
    config_dir = write_config(tmp_path / "config", public_url="https://quotes.example.com")
    return UnifiedConfigManager(config_dir, env_file=None, use_env=False)


@pytest.fixture
def dev_config(tmp_path):
    """Development-mode configuration (error details enabled)"""
    config_dir = write_config(tmp_path / "dev_config", env="development", port=4000)
    return UnifiedConfigManager(config_dir, env_file=None, use_env=False)


@pytest.fixture
def db_path(tmp_path):
    """Path of a temporary SQLite database file"""
    return str(tmp_path / "data" / "quotes.db")


@pytest.fixture
async def quote_ops(db_path):
    """Initialized storage operations against a temporary database"""
    ops = QuoteOperations(DatabaseManager(db_path))
    await ops.initialize()
    yield ops
    await ops.close()


@pytest.fixture
def test_app(db_path, test_config):
    """Application wired to a temporary database"""
    return create_app(db_manager=DatabaseManager(db_path), config=test_config)


@pytest.fixture
def client(test_app):
    """Test client; entering the context runs the lifespan (schema creation)"""
    with TestClient(test_app) as test_client:
        yield test_client


@pytest.fixture
def mock_logger():
    """Mock logger for testing"""
    mock = Mock()
    mock.debug = Mock()
    mock.info = Mock()
    mock.warning = Mock()
    mock.error = Mock()
    return mock


@pytest.fixture
def sample_quotes():
    """A small mixed-language batch, deliberately unsorted"""
    return [
        {"quote": "Stay hungry, stay foolish", "author": "Steve Jobs", "language": "en"},
        {"quote": "Je pense, donc je suis", "author": "René Descartes", "language": "fr"},
        {"quote": "Simplicity is the ultimate sophistication", "author": "Leonardo da Vinci", "language": "en"},
        {"quote": "L'enfer, c'est les autres", "author": "Jean-Paul Sartre", "language": "fr"},
        {"quote": "Imagination is more important than knowledge", "author": "Albert Einstein", "language": "en"},
    ]


@pytest.fixture
def create_test_quote():
    """Factory to create test quote records"""
    return QuoteFactory.create_quote


# Pytest configuration
def pytest_configure(config):
    """Configure pytest"""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )
