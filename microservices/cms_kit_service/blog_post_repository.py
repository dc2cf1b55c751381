"""
Blog Post Repository

Data access layer for blogs, blog posts and CMS users over MongoDB.
"""

from typing import Optional, List, Dict, Any, Iterable
import logging

from pymongo import ASCENDING

from core.mongo_client import MongoClientWrapper, doc_to_model, model_to_doc
from core.mongo_query import MongoQuery, is_blank, contains_regex, sort_fields
from .models import Blog, BlogPost, BlogPostStatus, CmsUser

logger = logging.getLogger(__name__)

BLOGS_COLLECTION = "blogs"
BLOG_POSTS_COLLECTION = "blog_posts"
USERS_COLLECTION = "cms_users"

POST_SORT_FIELDS = sort_fields(["id", "title", "slug", "creation_time", "last_modification_time"])
DEFAULT_POST_SORTING = "creation_time desc"

AUTHOR_SORT_FIELDS = sort_fields(["id", "user_name", "name", "surname"])
DEFAULT_AUTHOR_SORTING = "user_name"


def build_post_query(
    blog_id: Optional[str] = None,
    author_id: Optional[str] = None,
    tag_id: Optional[str] = None,
    status: Optional[BlogPostStatus] = None,
    filter: Optional[str] = None,
) -> MongoQuery:
    return (
        MongoQuery()
        .where_if(blog_id is not None, lambda: {"blog_id": blog_id})
        .where_if(author_id is not None, lambda: {"author_id": author_id})
        .where_if(tag_id is not None, lambda: {"tag_ids": tag_id})
        .where_if(status is not None, lambda: {"status": BlogPostStatus(status).value})
        .where_if(not is_blank(filter), lambda: {"title": contains_regex(filter)})
    )


def author_filter_clause(filter: Optional[str]) -> Optional[Dict[str, Any]]:
    if is_blank(filter):
        return None
    return {"$or": [
        {"user_name": contains_regex(filter)},
        {"name": contains_regex(filter)},
        {"surname": contains_regex(filter)},
    ]}


class BlogPostRepository:
    """
    Blog post repository

    Authors are the CMS users referenced by published posts.
    """

    def __init__(self, db: Optional[MongoClientWrapper] = None, config=None):
        if db is None:
            db = MongoClientWrapper("cms_kit_service", config=config)

        self.db = db
        self.blogs = db.collection(BLOGS_COLLECTION)
        self.blog_posts = db.collection(BLOG_POSTS_COLLECTION)
        self.users = db.collection(USERS_COLLECTION)

    async def initialize(self):
        await self.blogs.create_index("slug", unique=True)
        await self.blog_posts.create_index([("blog_id", ASCENDING), ("slug", ASCENDING)], unique=True)
        await self.blog_posts.create_index([("author_id", ASCENDING), ("status", ASCENDING)])
        await self.blog_posts.create_index("tag_ids")
        logger.info("Blog post repository indexes ensured")

    async def health_check(self) -> Dict[str, Any]:
        return await self.db.health_check()

    async def close(self):
        self.db.close()

    # =========================================================================
    # Blogs and posts
    # =========================================================================

    async def get_blog_by_slug(self, slug: str) -> Optional[Blog]:
        doc = await self.blogs.find_one({"slug": slug})
        return doc_to_model(doc, Blog) if doc else None

    async def get_by_slug(self, blog_id: str, slug: str) -> Optional[BlogPost]:
        doc = await self.blog_posts.find_one({"blog_id": blog_id, "slug": slug})
        return doc_to_model(doc, BlogPost) if doc else None

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
        """
        Filtered, sorted and paged post list (newest first by default)

        Raises:
            InvalidSortingError: sorting names an unknown field
        """
        docs = await (
            build_post_query(blog_id, author_id, tag_id, status, filter)
            .order_by_sorting(sorting, POST_SORT_FIELDS, DEFAULT_POST_SORTING)
            .page_by(skip_count, max_result_count)
            .to_list(self.blog_posts)
        )
        return [doc_to_model(doc, BlogPost) for doc in docs]

    async def get_count(
        self,
        blog_id: Optional[str] = None,
        author_id: Optional[str] = None,
        tag_id: Optional[str] = None,
        status: Optional[BlogPostStatus] = None,
        filter: Optional[str] = None,
    ) -> int:
        return await build_post_query(blog_id, author_id, tag_id, status, filter).count(self.blog_posts)

    # =========================================================================
    # Authors
    # =========================================================================

    async def _published_author_ids(self) -> List[str]:
        return await self.blog_posts.distinct("author_id", {"status": BlogPostStatus.PUBLISHED.value})

    async def get_authors_has_blog_posts(
        self,
        filter: Optional[str] = None,
        sorting: Optional[str] = None,
        skip_count: int = 0,
        max_result_count: Optional[int] = None,
    ) -> List[CmsUser]:
        """Distinct authors of published posts"""
        author_ids = await self._published_author_ids()
        if not author_ids:
            return []

        clause = author_filter_clause(filter)
        docs = await (
            MongoQuery({"_id": {"$in": author_ids}})
            .where_if(clause is not None, clause)
            .order_by_sorting(sorting, AUTHOR_SORT_FIELDS, DEFAULT_AUTHOR_SORTING)
            .page_by(skip_count, max_result_count)
            .to_list(self.users)
        )
        return [doc_to_model(doc, CmsUser) for doc in docs]

    async def get_authors_has_blog_posts_count(self, filter: Optional[str] = None) -> int:
        author_ids = await self._published_author_ids()
        if not author_ids:
            return 0

        clause = author_filter_clause(filter)
        return await (
            MongoQuery({"_id": {"$in": author_ids}})
            .where_if(clause is not None, clause)
            .count(self.users)
        )

    async def get_author_has_blog_post(self, author_id: str) -> Optional[CmsUser]:
        """The author, or None when they have no published post"""
        post = await self.blog_posts.find_one(
            {"author_id": author_id, "status": BlogPostStatus.PUBLISHED.value},
            {"_id": 1}
        )
        if post is None:
            return None

        doc = await self.users.find_one({"_id": author_id})
        return doc_to_model(doc, CmsUser) if doc else None

    async def get_users_by_ids(self, ids: Iterable[str]) -> List[CmsUser]:
        ids = list(dict.fromkeys(ids))
        if not ids:
            return []
        docs = await MongoQuery({"_id": {"$in": ids}}).to_list(self.users)
        return [doc_to_model(doc, CmsUser) for doc in docs]

    # =========================================================================
    # Writes
    # =========================================================================

    async def insert_blog(self, blog: Blog) -> Blog:
        await self.blogs.insert_one(model_to_doc(blog))
        logger.info(f"Blog created: {blog.id} ({blog.slug})")
        return blog

    async def insert_post(self, post: BlogPost) -> BlogPost:
        await self.blog_posts.insert_one(model_to_doc(post))
        logger.info(f"Blog post created: {post.id} ({post.slug})")
        return post

    async def insert_user(self, user: CmsUser) -> CmsUser:
        await self.users.replace_one({"_id": user.id}, model_to_doc(user), upsert=True)
        return user


__all__ = ["BlogPostRepository", "build_post_query"]
