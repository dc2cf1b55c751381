"""
Blog Post Public Service

Read-only public view of blogs: published posts with their authors, and
the authors that have published posts.
"""

from typing import Dict, Any
import logging

from core.dtos import PagedResultDto
from core.mongo_query import InvalidSortingError
from .protocols import (
    BlogPostRepositoryProtocol,
    CmsKitServiceError,
    CmsKitValidationError,
    BlogNotFoundError,
    BlogPostNotFoundError,
    AuthorNotFoundError,
)
from .models import (
    Blog,
    BlogPostStatus,
    BlogPostGetListInput,
    BlogPostFilteredPagedAndSortedResultRequestDto,
    BlogPostCommonDto,
    CmsUserDto,
)

logger = logging.getLogger(__name__)


class BlogPostPublicService:
    """Public blog post operations"""

    def __init__(self, repository: BlogPostRepositoryProtocol):
        self.repository = repository
        logger.info("BlogPostPublicService initialized with dependency injection")

    async def initialize(self):
        await self.repository.initialize()

    async def _get_blog(self, blog_slug: str) -> Blog:
        blog = await self.repository.get_blog_by_slug(blog_slug)
        if blog is None:
            raise BlogNotFoundError(f"Blog not found: {blog_slug}")
        return blog

    async def get(self, blog_slug: str, blog_post_slug: str) -> BlogPostCommonDto:
        """
        Get a published post by blog and post slug

        Raises:
            BlogNotFoundError: Unknown blog
            BlogPostNotFoundError: Unknown or unpublished post
        """
        blog = await self._get_blog(blog_slug)

        post = await self.repository.get_by_slug(blog.id, blog_post_slug)
        if post is None or not post.is_published():
            raise BlogPostNotFoundError(f"Blog post not found: {blog_slug}/{blog_post_slug}")

        authors = await self.repository.get_users_by_ids([post.author_id])
        return BlogPostCommonDto.from_post(post, authors[0] if authors else None)

    async def get_list(self, blog_slug: str, params: BlogPostGetListInput) -> PagedResultDto[BlogPostCommonDto]:
        """
        Published posts of a blog, newest first unless sorted otherwise

        Raises:
            BlogNotFoundError: Unknown blog
            CmsKitValidationError: Unknown sorting field
        """
        blog = await self._get_blog(blog_slug)

        filters = dict(
            blog_id=blog.id,
            author_id=params.author_id,
            tag_id=params.tag_id,
            status=BlogPostStatus.PUBLISHED,
        )
        try:
            posts = await self.repository.get_list(
                sorting=params.sorting,
                max_result_count=params.max_result_count,
                skip_count=params.skip_count,
                **filters
            )
            total_count = await self.repository.get_count(**filters)
            authors = await self.repository.get_users_by_ids(p.author_id for p in posts)

        except InvalidSortingError as e:
            raise CmsKitValidationError(str(e))
        except Exception as e:
            logger.error(f"Failed to list blog posts of {blog_slug}: {e}")
            raise CmsKitServiceError(f"Failed to list blog posts: {str(e)}")

        authors_by_id = {a.id: a for a in authors}
        return PagedResultDto[BlogPostCommonDto](
            total_count=total_count,
            items=[BlogPostCommonDto.from_post(p, authors_by_id.get(p.author_id)) for p in posts]
        )

    async def get_authors_has_blog_posts(
        self,
        params: BlogPostFilteredPagedAndSortedResultRequestDto
    ) -> PagedResultDto[CmsUserDto]:
        """Authors with at least one published post"""
        try:
            authors = await self.repository.get_authors_has_blog_posts(
                filter=params.filter,
                sorting=params.sorting,
                skip_count=params.skip_count,
                max_result_count=params.max_result_count,
            )
            total_count = await self.repository.get_authors_has_blog_posts_count(filter=params.filter)

        except InvalidSortingError as e:
            raise CmsKitValidationError(str(e))
        except Exception as e:
            logger.error(f"Failed to list blog authors: {e}")
            raise CmsKitServiceError(f"Failed to list blog authors: {str(e)}")

        return PagedResultDto[CmsUserDto](
            total_count=total_count,
            items=[CmsUserDto.from_user(a) for a in authors]
        )

    async def get_author_has_blog_post(self, id: str) -> CmsUserDto:
        """
        Raises:
            AuthorNotFoundError: Unknown user, or no published post
        """
        author = await self.repository.get_author_has_blog_post(id)
        if author is None:
            raise AuthorNotFoundError(f"Author not found: {id}")
        return CmsUserDto.from_user(author)

    async def check_health(self) -> Dict[str, Any]:
        try:
            return await self.repository.health_check()
        except Exception as e:
            logger.error(f"Health check failed: {e}")
            return {"status": "unhealthy", "error": str(e)}
