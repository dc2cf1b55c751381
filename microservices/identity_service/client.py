"""
Identity Service Client

Client library for other microservices to interact with the identity service.
Every method returns typed DTOs, or None when the call fails.
"""

import logging
from typing import Optional, List
from urllib.parse import quote

from core.dtos import PagedResultDto, ListResultDto
from core.service_client_base import BaseServiceClient
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
)
from .routes_registry import BASE_PATH

logger = logging.getLogger(__name__)


class IdentityServiceClient(BaseServiceClient):
    """Identity Service HTTP client"""

    service_name = "identity_service"
    default_port = 8301

    # =========================================================================
    # Users
    # =========================================================================

    async def create_user(self, request: IdentityUserCreateRequest) -> Optional[IdentityUserDto]:
        """
        Create a user

        Example:
            >>> async with IdentityServiceClient() as client:
            ...     user = await client.create_user(IdentityUserCreateRequest(
            ...         user_name="jdoe", email="jdoe@example.com"
            ...     ))
        """
        return await self.request_model(
            "POST", f"{BASE_PATH}/users", IdentityUserDto, json=request.model_dump(mode="json")
        )

    async def get_user(self, user_id: str) -> Optional[IdentityUserDto]:
        return await self.request_model("GET", f"{BASE_PATH}/users/{quote(user_id, safe='')}", IdentityUserDto)

    async def get_user_list(
        self,
        params: Optional[GetIdentityUsersInput] = None
    ) -> Optional[PagedResultDto[IdentityUserDto]]:
        """Filtered user list; unset filters are not sent"""
        params = params or GetIdentityUsersInput()
        return await self.request_model(
            "GET",
            f"{BASE_PATH}/users",
            PagedResultDto[IdentityUserDto],
            params=params.model_dump(mode="json")
        )

    async def find_by_user_name(self, user_name: str) -> Optional[IdentityUserDto]:
        return await self.request_model(
            "GET", f"{BASE_PATH}/users/by-username/{quote(user_name, safe='')}", IdentityUserDto
        )

    async def find_by_email(self, email: str) -> Optional[IdentityUserDto]:
        return await self.request_model(
            "GET", f"{BASE_PATH}/users/by-email/{quote(email, safe='')}", IdentityUserDto
        )

    async def find_by_login(self, login_provider: str, provider_key: str) -> Optional[IdentityUserDto]:
        return await self.request_model(
            "GET",
            f"{BASE_PATH}/users/by-login",
            IdentityUserDto,
            params={"login_provider": login_provider, "provider_key": provider_key}
        )

    async def get_users_by_claim(
        self,
        claim_type: str,
        claim_value: Optional[str] = None
    ) -> Optional[List[IdentityUserDto]]:
        return await self.request_list(
            "GET",
            f"{BASE_PATH}/users/by-claim",
            IdentityUserDto,
            params={"claim_type": claim_type, "claim_value": claim_value}
        )

    async def get_roles(self, user_id: str) -> Optional[List[IdentityRoleDto]]:
        return await self.request_list("GET", f"{BASE_PATH}/users/{quote(user_id, safe='')}/roles", IdentityRoleDto)

    async def get_role_names(
        self,
        user_id: str,
        organization_units_only: bool = False
    ) -> Optional[UserRoleNamesResponse]:
        return await self.request_model(
            "GET",
            f"{BASE_PATH}/users/{quote(user_id, safe='')}/role-names",
            UserRoleNamesResponse,
            params={"organization_units_only": organization_units_only}
        )

    async def get_organization_units(self, user_id: str) -> Optional[List[OrganizationUnitDto]]:
        return await self.request_list(
            "GET", f"{BASE_PATH}/users/{quote(user_id, safe='')}/organization-units", OrganizationUnitDto
        )

    async def add_to_role(self, user_id: str, role_id: str) -> Optional[IdentityUserDto]:
        return await self.request_model(
            "PUT", f"{BASE_PATH}/users/{quote(user_id, safe='')}/roles/{quote(role_id, safe='')}", IdentityUserDto
        )

    async def remove_from_role(self, user_id: str, role_id: str) -> Optional[IdentityUserDto]:
        return await self.request_model(
            "DELETE", f"{BASE_PATH}/users/{quote(user_id, safe='')}/roles/{quote(role_id, safe='')}", IdentityUserDto
        )

    async def add_to_organization_unit(self, user_id: str, organization_unit_id: str) -> Optional[IdentityUserDto]:
        return await self.request_model(
            "PUT",
            f"{BASE_PATH}/users/{quote(user_id, safe='')}/organization-units/{quote(organization_unit_id, safe='')}",
            IdentityUserDto
        )

    async def remove_from_organization_unit(
        self,
        user_id: str,
        organization_unit_id: str
    ) -> Optional[IdentityUserDto]:
        return await self.request_model(
            "DELETE",
            f"{BASE_PATH}/users/{quote(user_id, safe='')}/organization-units/{quote(organization_unit_id, safe='')}",
            IdentityUserDto
        )

    # =========================================================================
    # Roles
    # =========================================================================

    async def create_role(self, request: IdentityRoleCreateRequest) -> Optional[IdentityRoleDto]:
        return await self.request_model(
            "POST", f"{BASE_PATH}/roles", IdentityRoleDto, json=request.model_dump(mode="json")
        )

    async def get_roles_list(
        self,
        sorting: Optional[str] = None,
        filter: Optional[str] = None
    ) -> Optional[ListResultDto[IdentityRoleDto]]:
        return await self.request_model(
            "GET",
            f"{BASE_PATH}/roles",
            ListResultDto[IdentityRoleDto],
            params={"sorting": sorting, "filter": filter}
        )

    async def get_users_in_role(self, role_name: str) -> Optional[List[IdentityUserDto]]:
        return await self.request_list(
            "GET", f"{BASE_PATH}/roles/by-name/{quote(role_name, safe='')}/users", IdentityUserDto
        )

    async def delete_role(self, role_id: str, target_role_id: Optional[str] = None) -> Optional[UserMoveResponse]:
        return await self.request_model(
            "DELETE",
            f"{BASE_PATH}/roles/{quote(role_id, safe='')}",
            UserMoveResponse,
            params={"target_role_id": target_role_id}
        )

    # =========================================================================
    # Organization units
    # =========================================================================

    async def create_organization_unit(
        self,
        request: OrganizationUnitCreateRequest
    ) -> Optional[OrganizationUnitDto]:
        return await self.request_model(
            "POST", f"{BASE_PATH}/organization-units", OrganizationUnitDto, json=request.model_dump(mode="json")
        )

    async def add_role_to_organization_unit(
        self,
        organization_unit_id: str,
        role_id: str
    ) -> Optional[OrganizationUnitDto]:
        return await self.request_model(
            "PUT",
            f"{BASE_PATH}/organization-units/{quote(organization_unit_id, safe='')}/roles/{quote(role_id, safe='')}",
            OrganizationUnitDto
        )

    async def get_users_in_organization_unit(
        self,
        organization_unit_id: str,
        include_children: bool = False
    ) -> Optional[List[IdentityUserDto]]:
        return await self.request_list(
            "GET",
            f"{BASE_PATH}/organization-units/{quote(organization_unit_id, safe='')}/users",
            IdentityUserDto,
            params={"include_children": include_children}
        )

    async def delete_organization_unit(
        self,
        organization_unit_id: str,
        target_organization_unit_id: Optional[str] = None
    ) -> Optional[UserMoveResponse]:
        return await self.request_model(
            "DELETE",
            f"{BASE_PATH}/organization-units/{quote(organization_unit_id, safe='')}",
            UserMoveResponse,
            params={"target_organization_unit_id": target_organization_unit_id}
        )


__all__ = ["IdentityServiceClient"]
