"""
Docs Service Protocols (Interfaces)

NO import-time I/O dependencies - safe to import anywhere.
"""
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from .models import Document, FilterVersionItem


class DocsServiceError(Exception):
    """Base exception for docs service errors"""
    pass


@runtime_checkable
class DocumentRepositoryProtocol(Protocol):
    """Interface for the document repository"""

    async def initialize(self) -> None:
        ...

    async def health_check(self) -> Dict[str, Any]:
        ...

    async def insert(self, document: Document) -> Document:
        ...

    async def get_filter_version_items(self, project_id: Optional[str] = None) -> List[FilterVersionItem]:
        ...
