"""
Docs Service Factory

Factory for creating DocsService with real dependencies.
This is the ONLY module that imports concrete implementations.
"""

import logging
from typing import Optional

from core.config_manager import ConfigManager

from .document_repository import DocumentRepository
from .docs_service import DocsService

logger = logging.getLogger(__name__)


def create_docs_service(config: Optional[ConfigManager] = None) -> DocsService:
    """Create DocsService with all real dependencies"""
    if config is None:
        config = ConfigManager("docs_service")

    repository = DocumentRepository(config=config)

    logger.info("DocsService created with real dependencies")

    return DocsService(repository=repository)


__all__ = ["create_docs_service"]
