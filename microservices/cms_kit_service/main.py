"""
CMS Kit Public Microservice API

Public, read-only blog post endpoints.
"""

import logging
import os
import sys
from contextlib import asynccontextmanager
from typing import Annotated, Optional

import uvicorn
from fastapi import Depends, FastAPI, HTTPException, Query, status
from fastapi.responses import JSONResponse

# Add parent directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../.."))
from core.config_manager import ConfigManager
from core.consul_registry import ConsulRegistry
from core.dtos import PagedResultDto
from core.logger import setup_service_logger

from .factory import create_blog_post_public_service
from .blog_post_public_service import BlogPostPublicService
from .protocols import (
    CmsKitServiceError,
    CmsKitValidationError,
    BlogNotFoundError,
    BlogPostNotFoundError,
    AuthorNotFoundError,
)
from .models import (
    BlogPostGetListInput,
    BlogPostFilteredPagedAndSortedResultRequestDto,
    BlogPostCommonDto,
    CmsUserDto,
    HealthResponse,
)
from .routes_registry import SERVICE_METADATA, BASE_PATH, get_routes_for_consul

config_manager = ConfigManager("cms_kit_service")
config = config_manager.get_service_config()

logger = setup_service_logger("cms_kit_service", level=config.log_level.upper())

if config.debug:
    config_manager.print_config_summary(show_secrets=False)

blog_post_service: Optional[BlogPostPublicService] = None
consul_registry: Optional[ConsulRegistry] = None
SERVICE_PORT = config.service_port or 8302


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle management"""
    global blog_post_service, consul_registry

    try:
        blog_post_service = create_blog_post_public_service(config=config_manager)
        await blog_post_service.initialize()

        if config.consul_enabled:
            try:
                consul_registry = ConsulRegistry(
                    service_name=SERVICE_METADATA["service_name"],
                    service_port=config.service_port,
                    consul_host=config.consul_host,
                    consul_port=config.consul_port,
                    tags=SERVICE_METADATA["tags"],
                    meta={"version": SERVICE_METADATA["version"], **get_routes_for_consul()},
                )
                consul_registry.register()
            except Exception as e:
                logger.warning(f"Failed to register with Consul: {e}")
                consul_registry = None

        logger.info(f"CMS kit service started on port {SERVICE_PORT}")
        yield

    except Exception as e:
        logger.error(f"Failed to initialize CMS kit service: {e}")
        raise
    finally:
        if consul_registry:
            consul_registry.deregister()

        if blog_post_service:
            await blog_post_service.repository.close()
            logger.info("CMS kit service database connections closed")


app = FastAPI(
    title="CMS Kit Public Service",
    description="Public blog posts and authors",
    version="1.0.0",
    lifespan=lifespan,
)


async def get_blog_post_service() -> BlogPostPublicService:
    """Get blog post service instance"""
    if not blog_post_service:
        raise HTTPException(status_code=503, detail="CMS kit service not initialized")
    return blog_post_service


# ====================
# Error handlers
# ====================


@app.exception_handler(CmsKitValidationError)
async def validation_error_handler(request, exc):
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})


@app.exception_handler(BlogNotFoundError)
@app.exception_handler(BlogPostNotFoundError)
@app.exception_handler(AuthorNotFoundError)
async def not_found_error_handler(request, exc):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})


@app.exception_handler(CmsKitServiceError)
async def service_error_handler(request, exc):
    logger.error(f"CMS kit service error on {request.url.path}: {exc}")
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"detail": str(exc)})


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check"""
    database = None
    health_status = "healthy"
    if blog_post_service:
        result = await blog_post_service.check_health()
        database = result.get("database")
        health_status = result.get("status", "unhealthy")

    return HealthResponse(
        status=health_status,
        service=SERVICE_METADATA["service_name"],
        port=SERVICE_PORT,
        version=SERVICE_METADATA["version"],
        database=database,
    )


# ====================
# Authors
# ====================


@app.get(f"{BASE_PATH}/authors", response_model=PagedResultDto[CmsUserDto])
async def get_authors_has_blog_posts(
    params: Annotated[BlogPostFilteredPagedAndSortedResultRequestDto, Query()],
    service: BlogPostPublicService = Depends(get_blog_post_service)
):
    """Authors with at least one published post"""
    return await service.get_authors_has_blog_posts(params)


@app.get(f"{BASE_PATH}/authors/{{id}}", response_model=CmsUserDto)
async def get_author_has_blog_post(
    id: str,
    service: BlogPostPublicService = Depends(get_blog_post_service)
):
    return await service.get_author_has_blog_post(id)


# ====================
# Blog posts
# ====================


@app.get(f"{BASE_PATH}/{{blog_slug}}/{{blog_post_slug}}", response_model=BlogPostCommonDto)
async def get_blog_post(
    blog_slug: str,
    blog_post_slug: str,
    service: BlogPostPublicService = Depends(get_blog_post_service)
):
    return await service.get(blog_slug, blog_post_slug)


@app.get(f"{BASE_PATH}/{{blog_slug}}", response_model=PagedResultDto[BlogPostCommonDto])
async def get_blog_post_list(
    blog_slug: str,
    params: Annotated[BlogPostGetListInput, Query()],
    service: BlogPostPublicService = Depends(get_blog_post_service)
):
    """Published posts of a blog"""
    return await service.get_list(blog_slug, params)


if __name__ == "__main__":
    uvicorn.run(
        "microservices.cms_kit_service.main:app",
        host=config.service_host,
        port=SERVICE_PORT,
        reload=config.debug,
        log_level=config.log_level.lower()
    )
