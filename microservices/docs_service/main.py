"""
Docs Microservice API

Document filter items: the versions, formats and languages available per project.
"""

import logging
import os
import sys
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import Depends, FastAPI, HTTPException, Query, status
from fastapi.responses import JSONResponse

# Add parent directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../.."))
from core.config_manager import ConfigManager
from core.consul_registry import ConsulRegistry
from core.logger import setup_service_logger

from .factory import create_docs_service
from .docs_service import DocsService
from .protocols import DocsServiceError
from .models import FilterItemsResponse, HealthResponse
from .routes_registry import SERVICE_METADATA, BASE_PATH, get_routes_for_consul

config_manager = ConfigManager("docs_service")
config = config_manager.get_service_config()

logger = setup_service_logger("docs_service", level=config.log_level.upper())

docs_service: Optional[DocsService] = None
consul_registry: Optional[ConsulRegistry] = None
SERVICE_PORT = config.service_port or 8303


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle management"""
    global docs_service, consul_registry

    try:
        docs_service = create_docs_service(config=config_manager)
        await docs_service.initialize()

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

        logger.info(f"Docs service started on port {SERVICE_PORT}")
        yield

    except Exception as e:
        logger.error(f"Failed to initialize docs service: {e}")
        raise
    finally:
        if consul_registry:
            consul_registry.deregister()

        if docs_service:
            await docs_service.repository.close()


app = FastAPI(
    title="Docs Service",
    description="Documentation filter items",
    version="1.0.0",
    lifespan=lifespan,
)


async def get_docs_service() -> DocsService:
    """Get docs service instance"""
    if not docs_service:
        raise HTTPException(status_code=503, detail="Docs service not initialized")
    return docs_service


@app.exception_handler(DocsServiceError)
async def service_error_handler(request, exc):
    logger.error(f"Docs service error on {request.url.path}: {exc}")
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"detail": str(exc)})


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check"""
    database = None
    health_status = "healthy"
    if docs_service:
        result = await docs_service.check_health()
        database = result.get("database")
        health_status = result.get("status", "unhealthy")

    return HealthResponse(
        status=health_status,
        service=SERVICE_METADATA["service_name"],
        port=SERVICE_PORT,
        version=SERVICE_METADATA["version"],
        database=database,
    )


@app.get(f"{BASE_PATH}/filter-items", response_model=FilterItemsResponse)
async def get_filter_items(
    project_id: Optional[str] = Query(default=None),
    service: DocsService = Depends(get_docs_service)
):
    """Available versions, formats and languages"""
    return await service.get_filter_items(project_id)


if __name__ == "__main__":
    uvicorn.run(
        "microservices.docs_service.main:app",
        host=config.service_host,
        port=SERVICE_PORT,
        reload=config.debug,
        log_level=config.log_level.lower()
    )
