"""
Docs Service Models
"""

from typing import Optional, List
from datetime import datetime, timezone
import uuid

from pydantic import BaseModel, Field


def new_id() -> str:
    return str(uuid.uuid4())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Document(BaseModel):
    """A stored document of one project version, format and language"""
    id: str = Field(default_factory=new_id)
    project_id: str
    name: str
    file_name: Optional[str] = None
    version: str
    format: str = "md"
    language_code: str = "en"
    content: Optional[str] = None
    creation_time: datetime = Field(default_factory=utc_now)


class FilterVersionItem(BaseModel):
    """One available (project, version, format, language) combination"""
    version: str
    format: str
    language_code: str
    project_id: str


class FilterItemsResponse(BaseModel):
    items: List[FilterVersionItem] = Field(default_factory=list)


class HealthResponse(BaseModel):
    status: str
    service: str
    port: int
    version: str
    database: Optional[str] = None


__all__ = ['Document', 'FilterVersionItem', 'FilterItemsResponse', 'HealthResponse']
