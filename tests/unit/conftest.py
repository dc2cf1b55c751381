"""
Unit Test Layer Configuration

Structure:
    tests/unit/
    ├── core/        Query composition, sorting, client params
    ├── identity/    Code helpers, models, user filter building
    ├── cms_kit/     Post filter building, DTO mapping
    └── docs/        Filter item pipeline

Usage:
    pytest tests/unit -v                 # All unit tests
    pytest tests/unit -m unit -v         # By marker
"""
import os
import sys

# Add project root
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))


def pytest_configure(config):
    """Configure custom markers"""
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
