#!/usr/bin/env python3
"""
Core Module for the Platform Services

Shared components for the identity, CMS kit and docs services.

COMPONENTS:
    - config/: Environment-driven configuration dataclasses
    - config_manager.py: Per-service configuration and dependency discovery
    - logger.py: Service logger setup
    - mongo_client.py: motor client wrapper
    - mongo_query.py: Conditional filter composition, sorting and paging
    - dtos.py: Shared paging DTOs
    - service_client_base.py: Base class of the HTTP service clients
    - internal_service_auth.py: Service-to-service authentication
    - consul_registry.py: Consul service discovery

USAGE:
    from core.config_manager import ConfigManager

    config = ConfigManager("identity_service")
"""

from .config_manager import ConfigManager, ServiceSettings
from .dtos import PagedResultDto, ListResultDto, PagedAndSortedResultRequest
from .mongo_query import MongoQuery, InvalidSortingError

__all__ = [
    "ConfigManager",
    "ServiceSettings",
    "PagedResultDto",
    "ListResultDto",
    "PagedAndSortedResultRequest",
    "MongoQuery",
    "InvalidSortingError",
]

__version__ = "1.0.0"
