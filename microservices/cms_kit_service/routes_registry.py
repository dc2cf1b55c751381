"""
CMS Kit Service Routes Registry

Defines service metadata and routes for Consul registration.
"""

SERVICE_METADATA = {
    "service_name": "cms_kit_service",
    "version": "1.0.0",
    "tags": ["v1", "cms", "blog", "public", "microservice"],
    "capabilities": [
        "public_blog_posts",
        "blog_authors",
    ],
}

BASE_PATH = "/api/cms-kit-public/blog-posts"

# Author routes come before the slug routes they would otherwise collide with
ROUTES = [
    {"path": "/health", "methods": ["GET"], "description": "Health check"},
    {"path": f"{BASE_PATH}/authors", "methods": ["GET"], "description": "Authors with published posts"},
    {"path": f"{BASE_PATH}/authors/{{id}}", "methods": ["GET"], "description": "Author with published posts"},
    {"path": f"{BASE_PATH}/{{blog_slug}}/{{blog_post_slug}}", "methods": ["GET"], "description": "Published post"},
    {"path": f"{BASE_PATH}/{{blog_slug}}", "methods": ["GET"], "description": "Published posts of a blog"},
]


def get_routes_for_consul():
    """Get route metadata for Consul registration"""
    route_paths = [r["path"] for r in ROUTES]
    return {
        "route_count": str(len(ROUTES)),
        "routes": ",".join(route_paths[:10]),
        "api_version": "v1",
        "base_path": BASE_PATH,
    }


__all__ = ["SERVICE_METADATA", "ROUTES", "BASE_PATH", "get_routes_for_consul"]
