"""
Blog Post Query and DTO Unit Tests
"""
import pytest

from microservices.cms_kit_service.blog_post_repository import build_post_query, author_filter_clause
from microservices.cms_kit_service.models import (
    BlogPost,
    BlogPostStatus,
    BlogPostCommonDto,
    CmsUser,
)

pytestmark = pytest.mark.unit


class TestBuildPostQuery:

    def test_no_inputs(self):
        assert build_post_query().to_filter() == {}

    def test_status_stored_as_value(self):
        flt = build_post_query(status=BlogPostStatus.PUBLISHED).to_filter()
        assert flt == {"status": "published"}

    def test_tag_matches_array_member(self):
        assert build_post_query(tag_id="t1").to_filter() == {"tag_ids": "t1"}

    def test_combined_clauses(self):
        flt = build_post_query(blog_id="b1", author_id="a1", status=BlogPostStatus.PUBLISHED).to_filter()
        assert flt == {"$and": [
            {"blog_id": "b1"},
            {"author_id": "a1"},
            {"status": "published"},
        ]}

    def test_blank_title_filter_ignored(self):
        assert build_post_query(filter=" ").to_filter() == {}


class TestAuthorFilter:

    def test_blank_gives_none(self):
        assert author_filter_clause(None) is None
        assert author_filter_clause("") is None

    def test_matches_name_fields(self):
        clause = author_filter_clause("ann")
        assert [next(iter(c)) for c in clause["$or"]] == ["user_name", "name", "surname"]


class TestBlogPostDto:

    def test_status_kept_as_plain_value(self):
        post = BlogPost(blog_id="b1", title="T", slug="t", author_id="a1", status=BlogPostStatus.PUBLISHED)
        assert post.status == "published"
        assert post.is_published()

    def test_draft_is_not_published(self):
        post = BlogPost(blog_id="b1", title="T", slug="t", author_id="a1")
        assert not post.is_published()

    def test_author_attached_without_email(self):
        post = BlogPost(blog_id="b1", title="T", slug="t", author_id="a1")
        author = CmsUser(id="a1", user_name="ann", email="ann@example.com")
        dto = BlogPostCommonDto.from_post(post, author)
        assert dto.author.user_name == "ann"
        assert "email" not in dto.author.model_dump()

    def test_missing_author(self):
        post = BlogPost(blog_id="b1", title="T", slug="t", author_id="a1")
        assert BlogPostCommonDto.from_post(post).author is None
