"""
Internal Service Authentication

Service-to-service calls carry a shared-secret header pair and bypass user
authentication. User calls carry a `user-id` header set by the gateway.

Usage:
    @app.get("/api/identity/users/{id}")
    async def get_user(id: str, caller: str = Depends(require_auth_or_internal_service)):
        ...
"""

from fastapi import Request, HTTPException, status
import os
import logging

logger = logging.getLogger(__name__)

INTERNAL_SERVICE_SECRET = os.getenv("INTERNAL_SERVICE_SECRET", "dev-internal-secret-change-in-production")
INTERNAL_SERVICE_HEADER = "X-Internal-Service"
INTERNAL_SERVICE_SECRET_HEADER = "X-Internal-Service-Secret"
INTERNAL_SERVICE_USER_ID = "internal-service"


class InternalServiceAuth:
    """Internal service authentication helpers"""

    @staticmethod
    def get_internal_service_headers() -> dict:
        """Headers a client adds to mark an internal call"""
        return {
            INTERNAL_SERVICE_HEADER: "true",
            INTERNAL_SERVICE_SECRET_HEADER: INTERNAL_SERVICE_SECRET
        }

    @staticmethod
    def is_internal_service_request(request: Request) -> bool:
        """Both headers present and the secret matches"""
        internal_service = request.headers.get(INTERNAL_SERVICE_HEADER)
        secret = request.headers.get(INTERNAL_SERVICE_SECRET_HEADER)

        if internal_service == "true" and secret == INTERNAL_SERVICE_SECRET:
            logger.debug("Valid internal service request detected")
            return True

        return False


async def require_auth_or_internal_service(request: Request) -> str:
    """
    FastAPI dependency accepting either an internal service or a user

    Returns:
        The calling user id, or "internal-service"

    Raises:
        HTTPException: 401 when neither is present
    """
    if InternalServiceAuth.is_internal_service_request(request):
        return INTERNAL_SERVICE_USER_ID

    user_id = request.headers.get("user-id") or request.headers.get("X-User-Id")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User authentication required"
        )

    return user_id


__all__ = [
    "InternalServiceAuth",
    "require_auth_or_internal_service",
    "INTERNAL_SERVICE_HEADER",
    "INTERNAL_SERVICE_SECRET_HEADER",
    "INTERNAL_SERVICE_USER_ID",
]
