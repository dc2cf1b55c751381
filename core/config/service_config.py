#!/usr/bin/env python3
"""Service configuration for platform services

Ports and base URLs of the identity, CMS kit and docs services. Clients use
the URLs when no explicit base_url is given and Consul discovery is off.
"""
import os
from dataclasses import dataclass

def _int(val: str, default: int) -> int:
    try:
        return int(val) if val else default
    except ValueError:
        return default


# Port registry
SERVICE_PORTS = {
    "identity_service": 8301,
    "cms_kit_service": 8302,
    "docs_service": 8303,
}


@dataclass
class ServiceConfig:
    """Platform service endpoints"""

    identity_service_url: str = "http://localhost:8301"
    cms_kit_service_url: str = "http://localhost:8302"
    docs_service_url: str = "http://localhost:8303"

    def get_service_url(self, service_name: str) -> str:
        """Base URL for a known service"""
        url = getattr(self, f"{service_name}_url", None)
        if not url:
            raise ValueError(f"Unknown service: {service_name}")
        return url

    @classmethod
    def from_env(cls) -> 'ServiceConfig':
        """Load service configuration from environment variables"""
        return cls(
            identity_service_url=os.getenv(
                "IDENTITY_SERVICE_URL", f"http://localhost:{SERVICE_PORTS['identity_service']}"
            ),
            cms_kit_service_url=os.getenv(
                "CMS_KIT_SERVICE_URL", f"http://localhost:{SERVICE_PORTS['cms_kit_service']}"
            ),
            docs_service_url=os.getenv(
                "DOCS_SERVICE_URL", f"http://localhost:{SERVICE_PORTS['docs_service']}"
            ),
        )
