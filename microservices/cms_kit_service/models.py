"""
CMS Kit Service Models

Blogs, blog posts and their authors, plus the public DTOs.
"""

from typing import Optional, List
from datetime import datetime, timezone
from enum import Enum
import uuid

from pydantic import BaseModel, ConfigDict, Field

from core.dtos import PagedAndSortedResultRequest


def new_id() -> str:
    return str(uuid.uuid4())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class BlogPostStatus(str, Enum):
    """Blog post publication status"""
    DRAFT = "draft"
    PUBLISHED = "published"
    WAITING_FOR_REVIEW = "waiting_for_review"


# =============================================================================
# Entities
# =============================================================================

class Blog(BaseModel):
    id: str = Field(default_factory=new_id)
    tenant_id: Optional[str] = None
    name: str
    slug: str
    creation_time: datetime = Field(default_factory=utc_now)


class BlogPost(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    id: str = Field(default_factory=new_id)
    tenant_id: Optional[str] = None
    blog_id: str
    title: str
    slug: str
    short_description: Optional[str] = None
    content: Optional[str] = None
    cover_image_media_id: Optional[str] = None
    author_id: str
    status: BlogPostStatus = BlogPostStatus.DRAFT
    tag_ids: List[str] = Field(default_factory=list)
    creation_time: datetime = Field(default_factory=utc_now)
    last_modification_time: Optional[datetime] = None

    def is_published(self) -> bool:
        return self.status == BlogPostStatus.PUBLISHED


class CmsUser(BaseModel):
    """Read copy of an identity user, as seen by the CMS"""
    id: str
    tenant_id: Optional[str] = None
    user_name: str
    email: Optional[str] = None
    name: Optional[str] = None
    surname: Optional[str] = None


# =============================================================================
# Request Models
# =============================================================================

class BlogPostGetListInput(PagedAndSortedResultRequest):
    """Blog post list filters"""
    author_id: Optional[str] = None
    tag_id: Optional[str] = None


class BlogPostFilteredPagedAndSortedResultRequestDto(PagedAndSortedResultRequest):
    """Author list filter"""
    filter: Optional[str] = Field(None, max_length=256, description="Matches user name, name or surname")


# =============================================================================
# Response Models
# =============================================================================

class CmsUserDto(BaseModel):
    id: str
    tenant_id: Optional[str] = None
    user_name: str
    name: Optional[str] = None
    surname: Optional[str] = None

    @classmethod
    def from_user(cls, user: CmsUser) -> 'CmsUserDto':
        return cls.model_validate(user.model_dump(exclude={"email"}))


class BlogPostCommonDto(BaseModel):
    id: str
    blog_id: str
    title: str
    slug: str
    short_description: Optional[str] = None
    content: Optional[str] = None
    cover_image_media_id: Optional[str] = None
    author: Optional[CmsUserDto] = None
    creation_time: Optional[datetime] = None
    last_modification_time: Optional[datetime] = None

    @classmethod
    def from_post(cls, post: BlogPost, author: Optional[CmsUser] = None) -> 'BlogPostCommonDto':
        return cls(
            id=post.id,
            blog_id=post.blog_id,
            title=post.title,
            slug=post.slug,
            short_description=post.short_description,
            content=post.content,
            cover_image_media_id=post.cover_image_media_id,
            author=CmsUserDto.from_user(author) if author else None,
            creation_time=post.creation_time,
            last_modification_time=post.last_modification_time,
        )


class HealthResponse(BaseModel):
    status: str
    service: str
    port: int
    version: str
    database: Optional[str] = None


__all__ = [
    'BlogPostStatus', 'Blog', 'BlogPost', 'CmsUser',
    'BlogPostGetListInput', 'BlogPostFilteredPagedAndSortedResultRequestDto',
    'CmsUserDto', 'BlogPostCommonDto', 'HealthResponse',
    'new_id', 'utc_now',
]
