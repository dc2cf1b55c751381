"""
CMS Kit Service Factory

Factory for creating BlogPostPublicService with real dependencies.
This is the ONLY module that imports concrete implementations.
"""

import logging
from typing import Optional

from core.config_manager import ConfigManager

from .blog_post_repository import BlogPostRepository
from .blog_post_public_service import BlogPostPublicService

logger = logging.getLogger(__name__)


def create_blog_post_public_service(config: Optional[ConfigManager] = None) -> BlogPostPublicService:
    """
    Create BlogPostPublicService with all real dependencies

    Args:
        config: Optional config manager (creates default if not provided)
    """
    if config is None:
        config = ConfigManager("cms_kit_service")

    repository = BlogPostRepository(config=config)

    logger.info("BlogPostPublicService created with real dependencies")

    return BlogPostPublicService(repository=repository)


__all__ = ["create_blog_post_public_service"]
