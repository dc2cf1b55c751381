"""
CMS Kit Service Protocols (Interfaces)

These interfaces define contracts for dependency injection.
NO import-time I/O dependencies - safe to import anywhere.
"""
from typing import Any, Dict, Iterable, List, Optional, Protocol, runtime_checkable

from .models import Blog, BlogPost, BlogPostStatus, CmsUser


class CmsKitServiceError(Exception):
    """Base exception for CMS kit service errors"""
    pass


class CmsKitValidationError(CmsKitServiceError):
    """Invalid input, e.g. an unknown sorting field"""
    pass


class BlogNotFoundError(CmsKitServiceError):
    """No blog with the given slug"""
    pass


class BlogPostNotFoundError(CmsKitServiceError):
    """No published post with the given slug"""
    pass


class AuthorNotFoundError(CmsKitServiceError):
    """User unknown or without published posts"""
    pass


@runtime_checkable
class BlogPostRepositoryProtocol(Protocol):
    """
    Interface for the blog post repository.

    Used for dependency injection to enable testing.
    """

    async def initialize(self) -> None:
        ...

    async def health_check(self) -> Dict[str, Any]:
        ...

    async def get_blog_by_slug(self, slug: str) -> Optional[Blog]:
        ...

    async def get_by_slug(self, blog_id: str, slug: str) -> Optional[BlogPost]:
        ...

    async def get_list(
        self,
        blog_id: Optional[str] = None,
        author_id: Optional[str] = None,
        tag_id: Optional[str] = None,
        status: Optional[BlogPostStatus] = None,
        filter: Optional[str] = None,
        sorting: Optional[str] = None,
        max_result_count: Optional[int] = None,
        skip_count: int = 0,
    ) -> List[BlogPost]:
        ...

    async def get_count(
        self,
        blog_id: Optional[str] = None,
        author_id: Optional[str] = None,
        tag_id: Optional[str] = None,
        status: Optional[BlogPostStatus] = None,
        filter: Optional[str] = None,
    ) -> int:
        ...

    async def get_authors_has_blog_posts(
        self,
        filter: Optional[str] = None,
        sorting: Optional[str] = None,
        skip_count: int = 0,
        max_result_count: Optional[int] = None,
    ) -> List[CmsUser]:
        ...

    async def get_authors_has_blog_posts_count(self, filter: Optional[str] = None) -> int:
        ...

    async def get_author_has_blog_post(self, author_id: str) -> Optional[CmsUser]:
        ...

    async def get_users_by_ids(self, ids: Iterable[str]) -> List[CmsUser]:
        ...
