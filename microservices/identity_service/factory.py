"""
Identity Service Factory

Factory for creating IdentityService with real dependencies.
This is the ONLY module that imports concrete implementations.
"""

import logging
from typing import Optional

from core.config_manager import ConfigManager
from core.mongo_client import MongoClientWrapper

from .identity_user_repository import IdentityUserRepository
from .identity_role_repository import IdentityRoleRepository
from .organization_unit_repository import OrganizationUnitRepository
from .identity_service import IdentityService

logger = logging.getLogger(__name__)


def create_identity_service(
    config: Optional[ConfigManager] = None,
    db: Optional[MongoClientWrapper] = None,
) -> IdentityService:
    """
    Create IdentityService with all real dependencies

    The three repositories share one Mongo client.

    Args:
        config: Optional config manager (creates default if not provided)
        db: Optional Mongo client wrapper

    Returns:
        IdentityService instance (call initialize() to ensure indexes)
    """
    if config is None:
        config = ConfigManager("identity_service")

    if db is None:
        db = MongoClientWrapper("identity_service", config=config)

    logger.info("IdentityService created with real dependencies")

    return IdentityService(
        user_repository=IdentityUserRepository(db=db),
        role_repository=IdentityRoleRepository(db=db),
        organization_unit_repository=OrganizationUnitRepository(db=db),
    )


__all__ = ["create_identity_service"]
