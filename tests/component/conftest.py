"""
Component Test Layer Configuration

Structure:
    tests/component/
    ├── identity/    Repositories, service, API and client of identity_service
    ├── cms_kit/     Blog post repository, public service, API and client
    ├── docs/        Document repository, API and client
    └── mocks/       Mock implementations (in-memory Mongo, httpx transport)

Usage:
    pytest tests/component -v
    pytest tests/component/identity -v
"""
import os
import sys
from unittest.mock import MagicMock

import pytest

# Set testing environment BEFORE any imports
os.environ["ENV"] = "testing"
os.environ["ENVIRONMENT"] = "testing"
os.environ["CONSUL_ENABLED"] = "false"

# Add project root
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from tests.component.mocks import MockMongoDatabase, MockServiceTransport


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Configure custom markers"""
    config.addinivalue_line(
        "markers", "component: marks tests as component tests"
    )


# =============================================================================
# Database Mocks
# =============================================================================

@pytest.fixture
def mock_mongo() -> MockMongoDatabase:
    """In-memory stand-in for MongoClientWrapper"""
    return MockMongoDatabase()


# =============================================================================
# HTTP Mocks
# =============================================================================

@pytest.fixture
def mock_transport() -> MockServiceTransport:
    """httpx transport serving canned responses to service clients"""
    return MockServiceTransport()


# =============================================================================
# Config Mocks
# =============================================================================

@pytest.fixture
def mock_config() -> MagicMock:
    """Mock ConfigManager"""
    config = MagicMock()
    config.discover_service = MagicMock(return_value=("localhost", 27017))
    config.settings.infrastructure.consul_enabled = False
    return config
