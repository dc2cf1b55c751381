"""
Base Service Client for Internal Service Communication

Base class of every service client. Handles discovery, internal auth
headers and the typed request/response round trip.
"""

import httpx
import logging
from typing import Optional, Dict, Any, List, Type, TypeVar
from abc import ABC

from pydantic import BaseModel, TypeAdapter, ValidationError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def clean_params(params: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Drop None values and render booleans the way FastAPI parses them"""
    if not params:
        return None
    cleaned = {}
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, bool):
            value = "true" if value else "false"
        cleaned[key] = value
    return cleaned


class BaseServiceClient(ABC):
    """
    Service client base class

    Handles:
    1. Service discovery
    2. Internal service authentication
    3. HTTP client management
    4. Typed response deserialization

    Example:
        class IdentityServiceClient(BaseServiceClient):
            service_name = "identity_service"
            default_port = 8301

            async def get_user(self, user_id: str):
                return await self.request_model("GET", f"/api/identity/users/{user_id}", IdentityUserDto)
    """

    # Subclasses define these
    service_name: str = None
    default_port: int = None

    def __init__(
        self,
        base_url: Optional[str] = None,
        use_internal_auth: bool = True,
        timeout: float = 30.0,
        config=None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize service client

        Args:
            base_url: Service base URL (service discovery when omitted)
            use_internal_auth: Send internal service auth headers
            timeout: Request timeout in seconds
            config: Optional ConfigManager used for discovery
            transport: Optional httpx transport
        """
        if not self.service_name:
            raise ValueError(f"{self.__class__.__name__} must define 'service_name'")

        if base_url:
            self.base_url = base_url.rstrip('/')
        else:
            self.base_url = self._discover_service(config)

        self.client = httpx.AsyncClient(
            timeout=timeout,
            headers=self._build_default_headers(use_internal_auth),
            transport=transport
        )

        logger.debug(
            f"Initialized {self.service_name} client: {self.base_url} "
            f"(internal_auth={'enabled' if use_internal_auth else 'disabled'})"
        )

    def _discover_service(self, config=None) -> str:
        """
        Resolve the service URL

        Priority: Consul (when enabled) → configured service URL → localhost
        """
        default_url = f"http://localhost:{self.default_port}" if self.default_port else "http://localhost:8000"
        try:
            if config is None:
                from core.config_manager import ConfigManager
                config = ConfigManager(f"{self.service_name}_client")

            if config.settings.infrastructure.consul_enabled:
                host, port = config.discover_service(
                    service_name=self.service_name,
                    default_host="localhost",
                    default_port=self.default_port or 8000,
                )
                return f"http://{host}:{port}"

            url = config.settings.services.get_service_url(self.service_name)
            logger.debug(f"Discovered {self.service_name} at {url}")
            return url.rstrip('/')
        except Exception as e:
            logger.warning(
                f"Service discovery failed for {self.service_name}, "
                f"using default: {default_url}. Error: {e}"
            )
            return default_url

    def _build_default_headers(self, use_internal_auth: bool) -> Dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "User-Agent": f"platform-internal-client/{self.service_name}"
        }

        if use_internal_auth:
            from core.internal_service_auth import InternalServiceAuth
            headers.update(InternalServiceAuth.get_internal_service_headers())

        return headers

    async def close(self):
        """Close the HTTP client"""
        await self.client.aclose()
        logger.debug(f"Closed {self.service_name} client")

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    # ========================================
    # HTTP helpers
    # ========================================

    async def get(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> httpx.Response:
        return await self.client.get(f"{self.base_url}{path}", params=clean_params(params), headers=headers)

    async def request_model(
        self,
        method: str,
        path: str,
        response_model: Type[ModelT],
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None
    ) -> Optional[ModelT]:
        """
        Call an endpoint and deserialize the typed response

        Returns:
            Parsed response model, or None when the call fails (404 included)
        """
        try:
            response = await self.client.request(
                method,
                f"{self.base_url}{path}",
                params=clean_params(params),
                json=json
            )
            response.raise_for_status()
            return response_model.model_validate(response.json())

        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                return None
            logger.error(f"{self.service_name} {method} {path} failed: {e.response.status_code}")
            return None
        except (httpx.HTTPError, ValidationError, ValueError) as e:
            logger.error(f"Error calling {self.service_name} {method} {path}: {e}")
            return None

    async def request_list(
        self,
        method: str,
        path: str,
        item_model: Type[ModelT],
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None
    ) -> Optional[List[ModelT]]:
        """Call an endpoint returning a JSON array of item_model"""
        try:
            response = await self.client.request(
                method,
                f"{self.base_url}{path}",
                params=clean_params(params),
                json=json
            )
            response.raise_for_status()
            return TypeAdapter(List[item_model]).validate_python(response.json())

        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                return None
            logger.error(f"{self.service_name} {method} {path} failed: {e.response.status_code}")
            return None
        except (httpx.HTTPError, ValidationError, ValueError) as e:
            logger.error(f"Error calling {self.service_name} {method} {path}: {e}")
            return None

    async def health_check(self) -> bool:
        try:
            response = await self.get("/health")
            return response.status_code == 200
        except Exception as e:
            logger.warning(f"{self.service_name} health check failed: {e}")
            return False


__all__ = ["BaseServiceClient", "clean_params"]
