"""
Identity Microservice API

Users, roles and organization units, with filtered user search and
bulk role/organization unit reassignment.
"""

import logging
import os
import sys
from contextlib import asynccontextmanager
from typing import Annotated, List, Optional

import uvicorn
from fastapi import Depends, FastAPI, HTTPException, Query, status
from fastapi.responses import JSONResponse

# Add parent directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../.."))
from core.config_manager import ConfigManager
from core.consul_registry import ConsulRegistry
from core.dtos import PagedResultDto, ListResultDto
from core.internal_service_auth import require_auth_or_internal_service
from core.logger import setup_service_logger

from .factory import create_identity_service
from .identity_service import IdentityService
from .protocols import IdentityServiceError, IdentityValidationError, IdentityNotFoundError
from .models import (
    IdentityUserCreateRequest,
    IdentityRoleCreateRequest,
    OrganizationUnitCreateRequest,
    GetIdentityUsersInput,
    IdentityUserDto,
    IdentityRoleDto,
    OrganizationUnitDto,
    UserRoleNamesResponse,
    UserMoveResponse,
    HealthResponse,
)
from .routes_registry import SERVICE_METADATA, BASE_PATH, get_routes_for_consul

# Initialize config manager
config_manager = ConfigManager("identity_service")
config = config_manager.get_service_config()

# Configure logger
logger = setup_service_logger("identity_service", level=config.log_level.upper())

if config.debug:
    config_manager.print_config_summary(show_secrets=False)

# Global variables
identity_service: Optional[IdentityService] = None
consul_registry: Optional[ConsulRegistry] = None
SERVICE_PORT = config.service_port or 8301


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle management"""
    global identity_service, consul_registry

    try:
        identity_service = create_identity_service(config=config_manager)
        await identity_service.initialize()

        if config.consul_enabled:
            try:
                consul_registry = ConsulRegistry(
                    service_name=SERVICE_METADATA["service_name"],
                    service_port=config.service_port,
                    consul_host=config.consul_host,
                    consul_port=config.consul_port,
                    tags=SERVICE_METADATA["tags"],
                    meta={
                        "version": SERVICE_METADATA["version"],
                        "capabilities": ",".join(SERVICE_METADATA["capabilities"]),
                        **get_routes_for_consul(),
                    },
                )
                consul_registry.register()
            except Exception as e:
                logger.warning(f"Failed to register with Consul: {e}")
                consul_registry = None

        logger.info(f"Identity service started on port {SERVICE_PORT}")
        yield

    except Exception as e:
        logger.error(f"Failed to initialize identity service: {e}")
        raise
    finally:
        if consul_registry:
            consul_registry.deregister()

        if identity_service:
            await identity_service.user_repository.close()
            logger.info("Identity service database connections closed")


app = FastAPI(
    title="Identity Service",
    description="Users, roles and organization units",
    version="1.0.0",
    lifespan=lifespan,
)


# ====================
# Dependency Injection
# ====================


async def get_identity_service() -> IdentityService:
    """Get identity service instance"""
    if not identity_service:
        raise HTTPException(status_code=503, detail="Identity service not initialized")
    return identity_service


# ====================
# Error handlers
# ====================


@app.exception_handler(IdentityValidationError)
async def validation_error_handler(request, exc):
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})


@app.exception_handler(IdentityNotFoundError)
async def not_found_error_handler(request, exc):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})


@app.exception_handler(IdentityServiceError)
async def service_error_handler(request, exc):
    logger.error(f"Identity service error on {request.url.path}: {exc}")
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"detail": str(exc)})


# ====================
# Health
# ====================


@app.get(f"{BASE_PATH}/health", response_model=HealthResponse)
@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check"""
    database = None
    health_status = "healthy"
    if identity_service:
        result = await identity_service.check_health()
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
# Users
# ====================


@app.post(f"{BASE_PATH}/users", response_model=IdentityUserDto, status_code=status.HTTP_201_CREATED)
async def create_user(
    request: IdentityUserCreateRequest,
    caller: str = Depends(require_auth_or_internal_service),
    service: IdentityService = Depends(get_identity_service)
):
    """Create a user"""
    return await service.create_user(request)


@app.get(f"{BASE_PATH}/users", response_model=PagedResultDto[IdentityUserDto])
async def get_user_list(
    params: Annotated[GetIdentityUsersInput, Query()],
    caller: str = Depends(require_auth_or_internal_service),
    service: IdentityService = Depends(get_identity_service)
):
    """Filtered, sorted and paged user list"""
    return await service.get_user_list(params)


@app.get(f"{BASE_PATH}/users/by-username/{{user_name}}", response_model=IdentityUserDto)
async def find_by_user_name(
    user_name: str,
    caller: str = Depends(require_auth_or_internal_service),
    service: IdentityService = Depends(get_identity_service)
):
    user = await service.find_by_user_name(user_name)
    if not user:
        raise HTTPException(status_code=404, detail=f"User not found: {user_name}")
    return user


@app.get(f"{BASE_PATH}/users/by-email/{{email}}", response_model=IdentityUserDto)
async def find_by_email(
    email: str,
    caller: str = Depends(require_auth_or_internal_service),
    service: IdentityService = Depends(get_identity_service)
):
    user = await service.find_by_email(email)
    if not user:
        raise HTTPException(status_code=404, detail=f"User not found: {email}")
    return user


@app.get(f"{BASE_PATH}/users/by-login", response_model=IdentityUserDto)
async def find_by_login(
    login_provider: str = Query(...),
    provider_key: str = Query(...),
    caller: str = Depends(require_auth_or_internal_service),
    service: IdentityService = Depends(get_identity_service)
):
    user = await service.find_by_login(login_provider, provider_key)
    if not user:
        raise HTTPException(status_code=404, detail=f"No user for login {login_provider}")
    return user


@app.get(f"{BASE_PATH}/users/by-claim", response_model=List[IdentityUserDto])
async def get_users_by_claim(
    claim_type: str = Query(...),
    claim_value: Optional[str] = Query(default=None),
    caller: str = Depends(require_auth_or_internal_service),
    service: IdentityService = Depends(get_identity_service)
):
    return await service.get_users_by_claim(claim_type, claim_value)


@app.get(f"{BASE_PATH}/users/{{user_id}}", response_model=IdentityUserDto)
async def get_user(
    user_id: str,
    caller: str = Depends(require_auth_or_internal_service),
    service: IdentityService = Depends(get_identity_service)
):
    return await service.get_user(user_id)


@app.get(f"{BASE_PATH}/users/{{user_id}}/roles", response_model=List[IdentityRoleDto])
async def get_user_roles(
    user_id: str,
    caller: str = Depends(require_auth_or_internal_service),
    service: IdentityService = Depends(get_identity_service)
):
    """Direct roles plus roles inherited from organization units"""
    return await service.get_roles(user_id)


@app.get(f"{BASE_PATH}/users/{{user_id}}/role-names", response_model=UserRoleNamesResponse)
async def get_user_role_names(
    user_id: str,
    organization_units_only: bool = Query(default=False),
    caller: str = Depends(require_auth_or_internal_service),
    service: IdentityService = Depends(get_identity_service)
):
    return await service.get_role_names(user_id, organization_units_only=organization_units_only)


@app.get(f"{BASE_PATH}/users/{{user_id}}/organization-units", response_model=List[OrganizationUnitDto])
async def get_user_organization_units(
    user_id: str,
    caller: str = Depends(require_auth_or_internal_service),
    service: IdentityService = Depends(get_identity_service)
):
    return await service.get_organization_units(user_id)


@app.put(f"{BASE_PATH}/users/{{user_id}}/roles/{{role_id}}", response_model=IdentityUserDto)
async def add_user_to_role(
    user_id: str,
    role_id: str,
    caller: str = Depends(require_auth_or_internal_service),
    service: IdentityService = Depends(get_identity_service)
):
    return await service.add_to_role(user_id, role_id)


@app.delete(f"{BASE_PATH}/users/{{user_id}}/roles/{{role_id}}", response_model=IdentityUserDto)
async def remove_user_from_role(
    user_id: str,
    role_id: str,
    caller: str = Depends(require_auth_or_internal_service),
    service: IdentityService = Depends(get_identity_service)
):
    return await service.remove_from_role(user_id, role_id)


@app.put(
    f"{BASE_PATH}/users/{{user_id}}/organization-units/{{organization_unit_id}}",
    response_model=IdentityUserDto
)
async def add_user_to_organization_unit(
    user_id: str,
    organization_unit_id: str,
    caller: str = Depends(require_auth_or_internal_service),
    service: IdentityService = Depends(get_identity_service)
):
    return await service.add_to_organization_unit(user_id, organization_unit_id)


@app.delete(
    f"{BASE_PATH}/users/{{user_id}}/organization-units/{{organization_unit_id}}",
    response_model=IdentityUserDto
)
async def remove_user_from_organization_unit(
    user_id: str,
    organization_unit_id: str,
    caller: str = Depends(require_auth_or_internal_service),
    service: IdentityService = Depends(get_identity_service)
):
    return await service.remove_from_organization_unit(user_id, organization_unit_id)


# ====================
# Roles
# ====================


@app.post(f"{BASE_PATH}/roles", response_model=IdentityRoleDto, status_code=status.HTTP_201_CREATED)
async def create_role(
    request: IdentityRoleCreateRequest,
    caller: str = Depends(require_auth_or_internal_service),
    service: IdentityService = Depends(get_identity_service)
):
    return await service.create_role(request)


@app.get(f"{BASE_PATH}/roles", response_model=ListResultDto[IdentityRoleDto])
async def get_roles_list(
    sorting: Optional[str] = Query(default=None, max_length=256),
    filter: Optional[str] = Query(default=None, max_length=256),
    caller: str = Depends(require_auth_or_internal_service),
    service: IdentityService = Depends(get_identity_service)
):
    return await service.get_roles_list(sorting=sorting, filter=filter)


@app.get(f"{BASE_PATH}/roles/by-name/{{role_name}}/users", response_model=List[IdentityUserDto])
async def get_users_in_role(
    role_name: str,
    caller: str = Depends(require_auth_or_internal_service),
    service: IdentityService = Depends(get_identity_service)
):
    return await service.get_users_in_role(role_name)


@app.delete(f"{BASE_PATH}/roles/{{role_id}}", response_model=UserMoveResponse)
async def delete_role(
    role_id: str,
    target_role_id: Optional[str] = Query(default=None),
    caller: str = Depends(require_auth_or_internal_service),
    service: IdentityService = Depends(get_identity_service)
):
    """Delete a role; its users move to target_role_id when given"""
    return await service.delete_role(role_id, target_role_id)


# ====================
# Organization units
# ====================


@app.post(
    f"{BASE_PATH}/organization-units",
    response_model=OrganizationUnitDto,
    status_code=status.HTTP_201_CREATED
)
async def create_organization_unit(
    request: OrganizationUnitCreateRequest,
    caller: str = Depends(require_auth_or_internal_service),
    service: IdentityService = Depends(get_identity_service)
):
    return await service.create_organization_unit(request)


@app.put(
    f"{BASE_PATH}/organization-units/{{organization_unit_id}}/roles/{{role_id}}",
    response_model=OrganizationUnitDto
)
async def add_role_to_organization_unit(
    organization_unit_id: str,
    role_id: str,
    caller: str = Depends(require_auth_or_internal_service),
    service: IdentityService = Depends(get_identity_service)
):
    return await service.add_role_to_organization_unit(organization_unit_id, role_id)


@app.get(
    f"{BASE_PATH}/organization-units/{{organization_unit_id}}/users",
    response_model=List[IdentityUserDto]
)
async def get_users_in_organization_unit(
    organization_unit_id: str,
    include_children: bool = Query(default=False),
    caller: str = Depends(require_auth_or_internal_service),
    service: IdentityService = Depends(get_identity_service)
):
    return await service.get_users_in_organization_unit(organization_unit_id, include_children=include_children)


@app.delete(f"{BASE_PATH}/organization-units/{{organization_unit_id}}", response_model=UserMoveResponse)
async def delete_organization_unit(
    organization_unit_id: str,
    target_organization_unit_id: Optional[str] = Query(default=None),
    caller: str = Depends(require_auth_or_internal_service),
    service: IdentityService = Depends(get_identity_service)
):
    """Delete an organization unit and its descendants; members move to the target"""
    return await service.delete_organization_unit(organization_unit_id, target_organization_unit_id)


if __name__ == "__main__":
    uvicorn.run(
        "microservices.identity_service.main:app",
        host=config.service_host,
        port=SERVICE_PORT,
        reload=config.debug,
        log_level=config.log_level.lower()
    )
