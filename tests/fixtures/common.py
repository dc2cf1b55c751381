"""
Common/Shared Fixtures

Base factories and generators used across multiple services.
"""
import uuid
from datetime import datetime, timezone, timedelta


def make_id() -> str:
    """Generate a unique entity ID"""
    return str(uuid.uuid4())


def make_timestamp(days_ago: int = 0) -> datetime:
    """UTC timestamp, optionally in the past"""
    return datetime.now(timezone.utc) - timedelta(days=days_ago)
