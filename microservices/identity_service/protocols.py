"""
Identity Service Protocols (Interfaces)

These interfaces define contracts for dependency injection.
NO import-time I/O dependencies - safe to import anywhere.
"""
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Protocol, runtime_checkable

from .models import IdentityUser, IdentityRole, OrganizationUnit


class EntityNotFoundError(Exception):
    """Entity not found - defined here to avoid importing the repositories"""

    def __init__(self, entity_type: str, entity_id: Any):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} not found: {entity_id}")


class IdentityServiceError(Exception):
    """Base exception for identity service errors"""
    pass


class IdentityValidationError(IdentityServiceError):
    """Invalid input or a broken business rule"""
    pass


class IdentityNotFoundError(IdentityServiceError):
    """User, role or organization unit not found"""
    pass


@runtime_checkable
class IdentityUserRepositoryProtocol(Protocol):
    """
    Interface for the identity user repository.

    Used for dependency injection to enable testing.
    """

    async def initialize(self) -> None:
        ...

    async def health_check(self) -> Dict[str, Any]:
        ...

    async def get(self, id: str) -> IdentityUser:
        ...

    async def find(self, id: str) -> Optional[IdentityUser]:
        ...

    async def insert(self, user: IdentityUser) -> IdentityUser:
        ...

    async def update(self, user: IdentityUser) -> IdentityUser:
        ...

    async def update_many(self, users: List[IdentityUser]) -> int:
        ...

    async def delete(self, id: str) -> bool:
        ...

    async def find_by_normalized_user_name(self, normalized_user_name: str) -> Optional[IdentityUser]:
        ...

    async def find_by_normalized_email(self, normalized_email: str) -> Optional[IdentityUser]:
        ...

    async def find_by_login(self, login_provider: str, provider_key: str) -> Optional[IdentityUser]:
        ...

    async def find_by_tenant_id_and_user_name(
        self, user_name: str, tenant_id: Optional[str]
    ) -> Optional[IdentityUser]:
        ...

    async def get_list_by_claim(self, claim_type: str, claim_value: Optional[str]) -> List[IdentityUser]:
        ...

    async def get_list_by_normalized_role_name(self, normalized_role_name: str) -> List[IdentityUser]:
        ...

    async def get_role_names(self, id: str) -> List[str]:
        ...

    async def get_role_names_in_organization_unit(self, id: str) -> List[str]:
        ...

    async def get_roles(self, id: str) -> List[IdentityRole]:
        ...

    async def get_organization_units(self, id: str) -> List[OrganizationUnit]:
        ...

    async def get_list(
        self,
        sorting: Optional[str] = None,
        max_result_count: Optional[int] = None,
        skip_count: int = 0,
        filter: Optional[str] = None,
        role_id: Optional[str] = None,
        organization_unit_id: Optional[str] = None,
        user_name: Optional[str] = None,
        phone_number: Optional[str] = None,
        email_address: Optional[str] = None,
        name: Optional[str] = None,
        surname: Optional[str] = None,
        is_locked_out: Optional[bool] = None,
        not_active: Optional[bool] = None,
        email_confirmed: Optional[bool] = None,
        is_external: Optional[bool] = None,
        max_creation_time: Optional[datetime] = None,
        min_creation_time: Optional[datetime] = None,
        max_modification_time: Optional[datetime] = None,
        min_modification_time: Optional[datetime] = None,
    ) -> List[IdentityUser]:
        ...

    async def get_count(self, filter: Optional[str] = None, **filters: Any) -> int:
        ...

    async def get_users_in_organization_unit(self, organization_unit_id: str) -> List[IdentityUser]:
        ...

    async def get_users_in_organizations_list(self, organization_unit_ids: List[str]) -> List[IdentityUser]:
        ...

    async def get_users_in_organization_unit_with_children(self, code: str) -> List[IdentityUser]:
        ...

    async def get_list_by_ids(self, ids: Iterable[str]) -> List[IdentityUser]:
        ...

    async def update_role(self, source_role_id: str, target_role_id: Optional[str] = None) -> int:
        ...

    async def update_organization(
        self, source_organization_id: str, target_organization_id: Optional[str] = None
    ) -> int:
        ...


@runtime_checkable
class IdentityRoleRepositoryProtocol(Protocol):
    """Interface for the role repository"""

    async def initialize(self) -> None:
        ...

    async def insert(self, role: IdentityRole) -> IdentityRole:
        ...

    async def find(self, id: str) -> Optional[IdentityRole]:
        ...

    async def find_by_normalized_name(self, normalized_name: str) -> Optional[IdentityRole]:
        ...

    async def get_list(self, sorting: Optional[str] = None, filter: Optional[str] = None) -> List[IdentityRole]:
        ...

    async def delete(self, id: str) -> bool:
        ...


@runtime_checkable
class OrganizationUnitRepositoryProtocol(Protocol):
    """Interface for the organization unit repository"""

    async def initialize(self) -> None:
        ...

    async def insert(self, organization_unit: OrganizationUnit) -> OrganizationUnit:
        ...

    async def update(self, organization_unit: OrganizationUnit) -> OrganizationUnit:
        ...

    async def find(self, id: str) -> Optional[OrganizationUnit]:
        ...

    async def get_children(self, parent_id: Optional[str], recursive: bool = False) -> List[OrganizationUnit]:
        ...

    async def get_last_child_or_none(self, parent_id: Optional[str]) -> Optional[OrganizationUnit]:
        ...

    async def add_role(self, organization_unit_id: str, role_id: str) -> OrganizationUnit:
        ...

    async def delete(self, id: str) -> bool:
        ...

