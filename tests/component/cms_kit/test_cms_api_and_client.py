"""
Component Tests for the Public Blog Post API and Client
"""
import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from core.mongo_client import model_to_doc
from microservices.cms_kit_service import main
from microservices.cms_kit_service.blog_post_repository import BlogPostRepository
from microservices.cms_kit_service.blog_post_public_service import BlogPostPublicService
from microservices.cms_kit_service.client import BlogPostPublicClient
from microservices.cms_kit_service.models import BlogPostGetListInput, BlogPostStatus
from tests.fixtures import make_blog, make_blog_post, make_cms_user

BASE = "/api/cms-kit-public/blog-posts"


@pytest.fixture
def repository(mock_mongo):
    return BlogPostRepository(db=mock_mongo)


@pytest.fixture
def seeded(mock_mongo):
    blog = make_blog("tech")
    ann = make_cms_user("ann")
    bob = make_cms_user("bob")
    mock_mongo.collection("blogs").seed(model_to_doc(blog))
    mock_mongo.collection("cms_users").seed(model_to_doc(ann), model_to_doc(bob))
    posts = [
        make_blog_post(blog.id, ann.id, "hello-world", days_ago=1),
        make_blog_post(blog.id, ann.id, "second-post"),
        make_blog_post(blog.id, bob.id, "unfinished", status=BlogPostStatus.DRAFT),
    ]
    mock_mongo.collection("blog_posts").seed(*(model_to_doc(p) for p in posts))
    return {"blog": blog, "ann": ann, "bob": bob}


@pytest.fixture
def client(repository):
    main.app.dependency_overrides[main.get_blog_post_service] = lambda: BlogPostPublicService(repository)
    yield TestClient(main.app)
    main.app.dependency_overrides.clear()


@pytest.mark.component
class TestBlogPostPublicApi:
    """Public routes need no caller identity"""

    def test_get_post(self, client, seeded):
        response = client.get(f"{BASE}/tech/hello-world")
        assert response.status_code == 200
        data = response.json()
        assert data["slug"] == "hello-world"
        assert data["author"]["user_name"] == "ann"
        assert "email" not in data["author"]

    def test_draft_is_404(self, client, seeded):
        assert client.get(f"{BASE}/tech/unfinished").status_code == 404

    def test_unknown_blog_is_404(self, client, seeded):
        assert client.get(f"{BASE}/nope/hello-world").status_code == 404
        assert client.get(f"{BASE}/nope").status_code == 404

    def test_list(self, client, seeded, assert_helpers):
        response = client.get(f"{BASE}/tech", params={"max_result_count": 1})
        assert_helpers.assert_http_success(response)
        data = response.json()
        assert_helpers.assert_paged(data, total_count=2, item_count=1)
        assert data["items"][0]["slug"] == "second-post"

    def test_list_invalid_sorting_is_400(self, client, seeded):
        assert client.get(f"{BASE}/tech", params={"sorting": "content"}).status_code == 400

    def test_authors(self, client, seeded):
        response = client.get(f"{BASE}/authors")
        assert response.status_code == 200
        assert [a["user_name"] for a in response.json()["items"]] == ["ann"]

    def test_author(self, client, seeded):
        assert client.get(f"{BASE}/authors/{seeded['ann'].id}").json()["user_name"] == "ann"
        assert client.get(f"{BASE}/authors/{seeded['bob'].id}").status_code == 404

    def test_health(self, repository, monkeypatch):
        monkeypatch.setattr(main, "blog_post_service", BlogPostPublicService(repository))
        response = TestClient(main.app).get("/health")
        assert response.json()["status"] == "healthy"


@pytest_asyncio.fixture
async def public_client(mock_transport):
    client = BlogPostPublicClient(base_url="http://cms-kit", transport=mock_transport)
    yield client
    await client.close()


@pytest.mark.component
@pytest.mark.asyncio
class TestBlogPostPublicClient:

    async def test_get(self, public_client, mock_transport):
        mock_transport.set_response("GET", f"{BASE}/tech/hello-world", {
            "id": "p1", "blog_id": "b1", "title": "Hello", "slug": "hello-world",
            "author": {"id": "u1", "user_name": "ann"},
        })
        post = await public_client.get("tech", "hello-world")
        assert post.author.user_name == "ann"

    async def test_get_missing(self, public_client):
        assert await public_client.get("tech", "nope") is None

    async def test_get_list_params(self, public_client, mock_transport):
        mock_transport.set_response("GET", f"{BASE}/tech", {"total_count": 0, "items": []})
        result = await public_client.get_list("tech", BlogPostGetListInput(tag_id="python"))
        assert result.total_count == 0
        params = mock_transport.get_last_request().url.params
        assert params["tag_id"] == "python"
        assert "author_id" not in params

    async def test_authors(self, public_client, mock_transport):
        mock_transport.set_response("GET", f"{BASE}/authors", {
            "total_count": 1, "items": [{"id": "u1", "user_name": "ann"}]
        })
        result = await public_client.get_authors_has_blog_posts()
        assert result.items[0].id == "u1"

    async def test_author(self, public_client, mock_transport):
        mock_transport.set_response("GET", f"{BASE}/authors/u1", {"id": "u1", "user_name": "ann"})
        assert (await public_client.get_author_has_blog_post("u1")).user_name == "ann"
