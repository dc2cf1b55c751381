"""
Blog Post Public Service Component Tests

Published-post visibility, author lookups and paging over the
in-memory Mongo double.
"""
import pytest
import pytest_asyncio

from microservices.cms_kit_service.blog_post_repository import BlogPostRepository
from microservices.cms_kit_service.blog_post_public_service import BlogPostPublicService
from microservices.cms_kit_service.models import (
    BlogPostStatus,
    BlogPostGetListInput,
    BlogPostFilteredPagedAndSortedResultRequestDto,
)
from microservices.cms_kit_service.protocols import (
    CmsKitServiceError,
    CmsKitValidationError,
    BlogNotFoundError,
    BlogPostNotFoundError,
    AuthorNotFoundError,
)
from tests.fixtures import make_blog, make_blog_post, make_cms_user

pytestmark = [pytest.mark.component, pytest.mark.asyncio]


@pytest.fixture
def repository(mock_mongo):
    return BlogPostRepository(db=mock_mongo)


@pytest.fixture
def service(repository):
    return BlogPostPublicService(repository)


@pytest_asyncio.fixture
async def blog_data(repository):
    """
    Blog "tech" with:
        ann:   two published posts (one tagged), one draft
        bob:   one post waiting for review
        carla: one published post
    Blog "other" with one published post by ann.
    """
    tech = await repository.insert_blog(make_blog("tech"))
    other = await repository.insert_blog(make_blog("other"))
    ann = await repository.insert_user(make_cms_user("ann"))
    bob = await repository.insert_user(make_cms_user("bob"))
    carla = await repository.insert_user(make_cms_user("carla"))

    await repository.insert_post(make_blog_post(tech.id, ann.id, "first", days_ago=3, tag_ids=["python"]))
    await repository.insert_post(make_blog_post(tech.id, ann.id, "second", days_ago=2))
    await repository.insert_post(make_blog_post(tech.id, ann.id, "draft", status=BlogPostStatus.DRAFT))
    await repository.insert_post(make_blog_post(
        tech.id, bob.id, "pending", status=BlogPostStatus.WAITING_FOR_REVIEW
    ))
    await repository.insert_post(make_blog_post(tech.id, carla.id, "third", days_ago=1))
    await repository.insert_post(make_blog_post(other.id, ann.id, "elsewhere"))

    return {"tech": tech, "other": other, "ann": ann, "bob": bob, "carla": carla}


# =============================================================================
# Repository
# =============================================================================

class TestBlogPostRepository:

    async def test_get_by_slug_scoped_to_blog(self, repository, blog_data):
        assert await repository.get_by_slug(blog_data["tech"].id, "first") is not None
        assert await repository.get_by_slug(blog_data["other"].id, "first") is None

    async def test_count_by_status(self, repository, blog_data):
        tech_id = blog_data["tech"].id
        assert await repository.get_count(blog_id=tech_id) == 5
        assert await repository.get_count(blog_id=tech_id, status=BlogPostStatus.PUBLISHED) == 3

    async def test_title_filter(self, repository, blog_data):
        posts = await repository.get_list(filter="Thi")
        assert [p.slug for p in posts] == ["third"]

    async def test_published_authors_distinct(self, repository, blog_data):
        authors = await repository.get_authors_has_blog_posts()
        assert [a.user_name for a in authors] == ["ann", "carla"]
        assert await repository.get_authors_has_blog_posts_count() == 2

    async def test_no_published_posts_no_authors(self, repository):
        assert await repository.get_authors_has_blog_posts() == []
        assert await repository.get_authors_has_blog_posts_count() == 0

    async def test_users_by_ids_dedupes(self, repository, blog_data):
        ann_id = blog_data["ann"].id
        users = await repository.get_users_by_ids(i for i in [ann_id, ann_id])
        assert len(users) == 1

    async def test_insert_user_upserts(self, repository, blog_data):
        ann = blog_data["ann"]
        ann.name = "Annabel"
        await repository.insert_user(ann)
        assert (await repository.get_users_by_ids([ann.id]))[0].name == "Annabel"


# =============================================================================
# Single post
# =============================================================================

class TestGetPost:

    async def test_published_post_with_author(self, service, blog_data):
        post = await service.get("tech", "first")
        assert post.slug == "first"
        assert post.author.user_name == "ann"

    async def test_unknown_blog(self, service, blog_data):
        with pytest.raises(BlogNotFoundError):
            await service.get("nope", "first")

    async def test_unknown_post(self, service, blog_data):
        with pytest.raises(BlogPostNotFoundError):
            await service.get("tech", "nope")

    async def test_draft_is_hidden(self, service, blog_data):
        with pytest.raises(BlogPostNotFoundError):
            await service.get("tech", "draft")

    async def test_waiting_for_review_is_hidden(self, service, blog_data):
        with pytest.raises(BlogPostNotFoundError):
            await service.get("tech", "pending")

    async def test_author_missing_from_user_store(self, service, repository, blog_data):
        await repository.insert_post(make_blog_post(blog_data["tech"].id, "ghost", "orphan"))
        post = await service.get("tech", "orphan")
        assert post.author is None


# =============================================================================
# Post list
# =============================================================================

class TestGetList:

    async def test_published_only_newest_first(self, service, blog_data):
        result = await service.get_list("tech", BlogPostGetListInput())
        assert result.total_count == 3
        assert [p.slug for p in result.items] == ["third", "second", "first"]

    async def test_authors_attached(self, service, blog_data):
        result = await service.get_list("tech", BlogPostGetListInput())
        assert [p.author.user_name for p in result.items] == ["carla", "ann", "ann"]

    async def test_paging(self, service, blog_data):
        result = await service.get_list("tech", BlogPostGetListInput(skip_count=1, max_result_count=1))
        assert result.total_count == 3
        assert [p.slug for p in result.items] == ["second"]

    async def test_author_filter(self, service, blog_data):
        result = await service.get_list("tech", BlogPostGetListInput(author_id=blog_data["ann"].id))
        assert [p.slug for p in result.items] == ["second", "first"]

    async def test_tag_filter(self, service, blog_data):
        result = await service.get_list("tech", BlogPostGetListInput(tag_id="python"))
        assert [p.slug for p in result.items] == ["first"]

    async def test_custom_sorting(self, service, blog_data):
        result = await service.get_list("tech", BlogPostGetListInput(sorting="Title"))
        assert [p.slug for p in result.items] == ["first", "second", "third"]

    async def test_invalid_sorting(self, service, blog_data):
        with pytest.raises(CmsKitValidationError):
            await service.get_list("tech", BlogPostGetListInput(sorting="content"))

    async def test_unknown_blog(self, service):
        with pytest.raises(BlogNotFoundError):
            await service.get_list("nope", BlogPostGetListInput())

    async def test_database_failure(self, service, mock_mongo, blog_data):
        mock_mongo.collection("blog_posts").set_error(RuntimeError("connection lost"))
        with pytest.raises(CmsKitServiceError):
            await service.get_list("tech", BlogPostGetListInput())


# =============================================================================
# Authors
# =============================================================================

class TestAuthors:

    async def test_authors_with_published_posts(self, service, blog_data):
        result = await service.get_authors_has_blog_posts(BlogPostFilteredPagedAndSortedResultRequestDto())
        assert result.total_count == 2
        assert [a.user_name for a in result.items] == ["ann", "carla"]

    async def test_author_filter_and_sorting(self, service, blog_data):
        params = BlogPostFilteredPagedAndSortedResultRequestDto(filter="car", sorting="userName desc")
        result = await service.get_authors_has_blog_posts(params)
        assert result.total_count == 1
        assert result.items[0].user_name == "carla"

    async def test_author_paging_keeps_total(self, service, blog_data):
        params = BlogPostFilteredPagedAndSortedResultRequestDto(max_result_count=1, sorting="userName desc")
        result = await service.get_authors_has_blog_posts(params)
        assert result.total_count == 2
        assert [a.user_name for a in result.items] == ["carla"]

    async def test_author_invalid_sorting(self, service, blog_data):
        with pytest.raises(CmsKitValidationError):
            await service.get_authors_has_blog_posts(
                BlogPostFilteredPagedAndSortedResultRequestDto(sorting="email")
            )

    async def test_get_author(self, service, blog_data):
        author = await service.get_author_has_blog_post(blog_data["ann"].id)
        assert author.user_name == "ann"

    async def test_author_without_published_post(self, service, blog_data):
        with pytest.raises(AuthorNotFoundError):
            await service.get_author_has_blog_post(blog_data["bob"].id)

    async def test_unknown_author(self, service, blog_data):
        with pytest.raises(AuthorNotFoundError):
            await service.get_author_has_blog_post("missing")
