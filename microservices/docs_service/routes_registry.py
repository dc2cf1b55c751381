"""
Docs Service Routes Registry

Defines service metadata and routes for Consul registration.
"""

SERVICE_METADATA = {
    "service_name": "docs_service",
    "version": "1.0.0",
    "tags": ["v1", "docs", "microservice"],
    "capabilities": ["document_filters"],
}

BASE_PATH = "/api/docs/documents"

ROUTES = [
    {"path": "/health", "methods": ["GET"], "description": "Health check"},
    {"path": f"{BASE_PATH}/filter-items", "methods": ["GET"], "description": "Version/format/language filter items"},
]


def get_routes_for_consul():
    """Get route metadata for Consul registration"""
    return {
        "route_count": str(len(ROUTES)),
        "routes": ",".join(r["path"] for r in ROUTES),
        "api_version": "v1",
        "base_path": BASE_PATH,
    }


__all__ = ["SERVICE_METADATA", "ROUTES", "BASE_PATH", "get_routes_for_consul"]
