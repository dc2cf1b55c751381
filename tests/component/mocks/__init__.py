"""
Component Test Mocks

Shared mock implementations for component testing.
These mocks replace real I/O dependencies (MongoDB, HTTP).
"""

from .mongo_mock import MockMongoDatabase, MockMongoCollection, MockCursor, matches
from .http_mock import MockServiceTransport

__all__ = [
    'MockMongoDatabase',
    'MockMongoCollection',
    'MockCursor',
    'MockServiceTransport',
    'matches',
]
