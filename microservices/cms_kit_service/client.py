"""
Blog Post Public Client

Client proxy for the public blog post API. Each method maps its arguments
onto the route path and query string, calls the endpoint and returns the
typed DTO, or None when the call fails.
"""

import logging
from typing import Optional
from urllib.parse import quote

from core.dtos import PagedResultDto
from core.service_client_base import BaseServiceClient
from .models import (
    BlogPostGetListInput,
    BlogPostFilteredPagedAndSortedResultRequestDto,
    BlogPostCommonDto,
    CmsUserDto,
)
from .routes_registry import BASE_PATH

logger = logging.getLogger(__name__)


class BlogPostPublicClient(BaseServiceClient):
    """Public blog post HTTP client"""

    service_name = "cms_kit_service"
    default_port = 8302

    async def get(self, blog_slug: str, blog_post_slug: str) -> Optional[BlogPostCommonDto]:
        """
        Get a published post

        Example:
            >>> async with BlogPostPublicClient() as client:
            ...     post = await client.get("tech", "hello-world")
        """
        return await self.request_model(
            "GET",
            f"{BASE_PATH}/{quote(blog_slug, safe='')}/{quote(blog_post_slug, safe='')}",
            BlogPostCommonDto
        )

    async def get_list(
        self,
        blog_slug: str,
        params: Optional[BlogPostGetListInput] = None
    ) -> Optional[PagedResultDto[BlogPostCommonDto]]:
        params = params or BlogPostGetListInput()
        return await self.request_model(
            "GET",
            f"{BASE_PATH}/{quote(blog_slug, safe='')}",
            PagedResultDto[BlogPostCommonDto],
            params=params.model_dump(mode="json")
        )

    async def get_authors_has_blog_posts(
        self,
        params: Optional[BlogPostFilteredPagedAndSortedResultRequestDto] = None
    ) -> Optional[PagedResultDto[CmsUserDto]]:
        params = params or BlogPostFilteredPagedAndSortedResultRequestDto()
        return await self.request_model(
            "GET",
            f"{BASE_PATH}/authors",
            PagedResultDto[CmsUserDto],
            params=params.model_dump(mode="json")
        )

    async def get_author_has_blog_post(self, id: str) -> Optional[CmsUserDto]:
        return await self.request_model("GET", f"{BASE_PATH}/authors/{quote(id, safe='')}", CmsUserDto)


__all__ = ["BlogPostPublicClient"]
