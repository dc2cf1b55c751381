"""
Root conftest.py - Global fixtures and configuration for all test layers.

Test Layers:
    - component/  : Component tests (in-memory Mongo, mocked HTTP transport)
    - unit/       : Unit tests (pure functions, no I/O)
"""
import os
import sys
from typing import Any, Dict, List

import pytest

# Add project root to path
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, PROJECT_ROOT)

os.environ.setdefault("ENV", "testing")
os.environ.setdefault("CONSUL_ENABLED", "false")


# =============================================================================
# Assertion Helpers
# =============================================================================

class AssertionHelpers:
    """Custom assertion helpers for tests"""

    @staticmethod
    def assert_http_success(response, expected_status: int = 200):
        """Assert HTTP response is successful"""
        assert response.status_code == expected_status, \
            f"Expected {expected_status}, got {response.status_code}: {response.text}"

    @staticmethod
    def assert_has_fields(data: Dict, fields: List[str]):
        """Assert dict has required fields"""
        missing = [f for f in fields if f not in data]
        assert not missing, f"Missing fields: {missing}"

    @staticmethod
    def assert_paged(data: Dict[str, Any], total_count: int, item_count: int):
        """Assert a PagedResultDto payload"""
        assert data["total_count"] == total_count, f"total_count {data['total_count']} != {total_count}"
        assert len(data["items"]) == item_count, f"{len(data['items'])} items != {item_count}"


@pytest.fixture
def assert_helpers() -> AssertionHelpers:
    """Provide assertion helpers"""
    return AssertionHelpers()
