"""
Docs Service Client

Client library for other microservices to interact with the docs service.
"""

from typing import Optional

from core.service_client_base import BaseServiceClient
from .models import FilterItemsResponse
from .routes_registry import BASE_PATH


class DocsServiceClient(BaseServiceClient):
    """Docs Service HTTP client"""

    service_name = "docs_service"
    default_port = 8303

    async def get_filter_items(self, project_id: Optional[str] = None) -> Optional[FilterItemsResponse]:
        return await self.request_model(
            "GET",
            f"{BASE_PATH}/filter-items",
            FilterItemsResponse,
            params={"project_id": project_id}
        )


__all__ = ["DocsServiceClient"]
