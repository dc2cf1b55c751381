"""
Docs Service Business Logic
"""

from typing import Optional, Dict, Any
import logging

from .protocols import DocumentRepositoryProtocol, DocsServiceError
from .models import FilterItemsResponse

logger = logging.getLogger(__name__)


class DocsService:
    """Document filter lookups"""

    def __init__(self, repository: DocumentRepositoryProtocol):
        self.repository = repository
        logger.info("DocsService initialized with dependency injection")

    async def initialize(self):
        await self.repository.initialize()

    async def get_filter_items(self, project_id: Optional[str] = None) -> FilterItemsResponse:
        """
        Available version/format/language combinations

        Args:
            project_id: Restrict to one project (all projects when None)

        Raises:
            DocsServiceError: Operation failed
        """
        try:
            items = await self.repository.get_filter_version_items(project_id)
            return FilterItemsResponse(items=items)
        except Exception as e:
            logger.error(f"Failed to get filter items for project {project_id}: {e}")
            raise DocsServiceError(f"Failed to get filter items: {str(e)}")

    async def check_health(self) -> Dict[str, Any]:
        try:
            return await self.repository.health_check()
        except Exception as e:
            logger.error(f"Health check failed: {e}")
            return {"status": "unhealthy", "error": str(e)}
