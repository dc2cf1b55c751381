"""
Identity Service Routes Registry

Defines service metadata and routes for Consul registration.
"""

SERVICE_METADATA = {
    "service_name": "identity_service",
    "version": "1.0.0",
    "tags": ["v1", "identity", "users", "microservice"],
    "capabilities": [
        "user_management",
        "role_management",
        "organization_unit_management",
        "user_search",
    ],
}

BASE_PATH = "/api/identity"

ROUTES = [
    # Health
    {"path": "/health", "methods": ["GET"], "description": "Health check"},
    {"path": f"{BASE_PATH}/health", "methods": ["GET"], "description": "Service health check"},

    # Users
    {"path": f"{BASE_PATH}/users", "methods": ["POST"], "description": "Create user"},
    {"path": f"{BASE_PATH}/users", "methods": ["GET"], "description": "Filtered, paged user list"},
    {"path": f"{BASE_PATH}/users/by-username/{{user_name}}", "methods": ["GET"], "description": "Find user by user name"},
    {"path": f"{BASE_PATH}/users/by-email/{{email}}", "methods": ["GET"], "description": "Find user by email"},
    {"path": f"{BASE_PATH}/users/by-login", "methods": ["GET"], "description": "Find user by external login"},
    {"path": f"{BASE_PATH}/users/by-claim", "methods": ["GET"], "description": "Users having a claim"},
    {"path": f"{BASE_PATH}/users/{{user_id}}", "methods": ["GET"], "description": "Get user"},
    {"path": f"{BASE_PATH}/users/{{user_id}}/roles", "methods": ["GET"], "description": "Roles of a user"},
    {"path": f"{BASE_PATH}/users/{{user_id}}/role-names", "methods": ["GET"], "description": "Role names of a user"},
    {"path": f"{BASE_PATH}/users/{{user_id}}/organization-units", "methods": ["GET"], "description": "Organization units of a user"},
    {"path": f"{BASE_PATH}/users/{{user_id}}/roles/{{role_id}}", "methods": ["PUT", "DELETE"], "description": "Add/remove user role"},
    {"path": f"{BASE_PATH}/users/{{user_id}}/organization-units/{{organization_unit_id}}", "methods": ["PUT", "DELETE"], "description": "Add/remove user organization unit"},

    # Roles
    {"path": f"{BASE_PATH}/roles", "methods": ["POST", "GET"], "description": "Create/list roles"},
    {"path": f"{BASE_PATH}/roles/by-name/{{role_name}}/users", "methods": ["GET"], "description": "Users in role"},
    {"path": f"{BASE_PATH}/roles/{{role_id}}", "methods": ["DELETE"], "description": "Delete role, moving its users"},

    # Organization units
    {"path": f"{BASE_PATH}/organization-units", "methods": ["POST"], "description": "Create organization unit"},
    {"path": f"{BASE_PATH}/organization-units/{{organization_unit_id}}/roles/{{role_id}}", "methods": ["PUT"], "description": "Add role to organization unit"},
    {"path": f"{BASE_PATH}/organization-units/{{organization_unit_id}}/users", "methods": ["GET"], "description": "Users in organization unit"},
    {"path": f"{BASE_PATH}/organization-units/{{organization_unit_id}}", "methods": ["DELETE"], "description": "Delete organization unit subtree"},
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
