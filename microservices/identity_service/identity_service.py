"""
Identity Service Business Logic

User, role and organization unit management on top of the identity
repositories. Handles validation, business rules and error mapping.
"""

from typing import Optional, List, Dict, Any
import logging

from pymongo.errors import DuplicateKeyError

from core.dtos import PagedResultDto, ListResultDto
from core.mongo_query import InvalidSortingError
from .protocols import (
    IdentityUserRepositoryProtocol,
    IdentityRoleRepositoryProtocol,
    OrganizationUnitRepositoryProtocol,
    EntityNotFoundError,
    IdentityServiceError,
    IdentityValidationError,
    IdentityNotFoundError,
)
from .models import (
    IdentityUser, IdentityRole, OrganizationUnit,
    IdentityUserCreateRequest, IdentityRoleCreateRequest, OrganizationUnitCreateRequest,
    GetIdentityUsersInput, IdentityUserDto, IdentityRoleDto, OrganizationUnitDto,
    UserRoleNamesResponse, UserMoveResponse,
    normalize_name, create_code, append_code, calculate_next_code,
)

logger = logging.getLogger(__name__)


class IdentityService:
    """
    Identity business logic service

    Delegates data access to the user, role and organization unit
    repositories, which are injected.
    """

    def __init__(
        self,
        user_repository: IdentityUserRepositoryProtocol,
        role_repository: IdentityRoleRepositoryProtocol,
        organization_unit_repository: OrganizationUnitRepositoryProtocol,
    ):
        self.user_repository = user_repository
        self.role_repository = role_repository
        self.organization_unit_repository = organization_unit_repository

        logger.info("IdentityService initialized with dependency injection")

    async def initialize(self):
        """Ensure repository indexes"""
        await self.user_repository.initialize()
        await self.role_repository.initialize()
        await self.organization_unit_repository.initialize()
        logger.info("IdentityService initialized")

    # =========================================================================
    # Users
    # =========================================================================

    async def _get_user_entity(self, user_id: str) -> IdentityUser:
        try:
            return await self.user_repository.get(user_id)
        except EntityNotFoundError:
            raise IdentityNotFoundError(f"User not found: {user_id}")

    async def _get_role_entity(self, role_id: str) -> IdentityRole:
        role = await self.role_repository.find(role_id)
        if role is None:
            raise IdentityNotFoundError(f"Role not found: {role_id}")
        return role

    async def _get_organization_unit_entity(self, organization_unit_id: str) -> OrganizationUnit:
        unit = await self.organization_unit_repository.find(organization_unit_id)
        if unit is None:
            raise IdentityNotFoundError(f"Organization unit not found: {organization_unit_id}")
        return unit

    async def create_user(self, request: IdentityUserCreateRequest) -> IdentityUserDto:
        """
        Create a user

        Args:
            request: User creation request

        Returns:
            Created user

        Raises:
            IdentityValidationError: User name or email already taken
            IdentityNotFoundError: A referenced role or organization unit is missing
            IdentityServiceError: Operation failed
        """
        try:
            if await self.user_repository.find_by_normalized_user_name(normalize_name(request.user_name)):
                raise IdentityValidationError(f"User name is already taken: {request.user_name}")
            if await self.user_repository.find_by_normalized_email(normalize_name(request.email)):
                raise IdentityValidationError(f"Email is already taken: {request.email}")

            user = IdentityUser(
                tenant_id=request.tenant_id,
                user_name=request.user_name,
                email=request.email,
                name=request.name,
                surname=request.surname,
                phone_number=request.phone_number,
                is_active=request.is_active,
                lockout_enabled=request.lockout_enabled,
            )

            for role_id in request.role_ids:
                await self._get_role_entity(role_id)
                user.add_role(role_id)

            for organization_unit_id in request.organization_unit_ids:
                await self._get_organization_unit_entity(organization_unit_id)
                user.add_organization_unit(organization_unit_id)

            try:
                await self.user_repository.insert(user)
            except DuplicateKeyError:
                raise IdentityValidationError(f"User name or email is already taken: {request.user_name}")
            logger.info(f"User created: {user.id}")
            return IdentityUserDto.from_user(user)

        except IdentityServiceError:
            raise
        except Exception as e:
            logger.error(f"Failed to create user {request.user_name}: {e}")
            raise IdentityServiceError(f"Failed to create user: {str(e)}")

    async def get_user(self, user_id: str) -> IdentityUserDto:
        return IdentityUserDto.from_user(await self._get_user_entity(user_id))

    async def find_by_user_name(self, user_name: str) -> Optional[IdentityUserDto]:
        user = await self.user_repository.find_by_normalized_user_name(normalize_name(user_name))
        return IdentityUserDto.from_user(user) if user else None

    async def find_by_email(self, email: str) -> Optional[IdentityUserDto]:
        user = await self.user_repository.find_by_normalized_email(normalize_name(email))
        return IdentityUserDto.from_user(user) if user else None

    async def find_by_login(self, login_provider: str, provider_key: str) -> Optional[IdentityUserDto]:
        user = await self.user_repository.find_by_login(login_provider, provider_key)
        return IdentityUserDto.from_user(user) if user else None

    async def get_users_by_claim(self, claim_type: str, claim_value: Optional[str]) -> List[IdentityUserDto]:
        users = await self.user_repository.get_list_by_claim(claim_type, claim_value)
        return [IdentityUserDto.from_user(u) for u in users]

    async def get_user_list(self, params: GetIdentityUsersInput) -> PagedResultDto[IdentityUserDto]:
        """
        Filtered and paged user list

        Raises:
            IdentityValidationError: Unknown sorting field
            IdentityServiceError: Operation failed
        """
        filters = params.model_dump(exclude={"sorting", "skip_count", "max_result_count"})
        try:
            users = await self.user_repository.get_list(
                sorting=params.sorting,
                max_result_count=params.max_result_count,
                skip_count=params.skip_count,
                **filters
            )
            total_count = await self.user_repository.get_count(**filters)

            return PagedResultDto[IdentityUserDto](
                total_count=total_count,
                items=[IdentityUserDto.from_user(u) for u in users]
            )

        except InvalidSortingError as e:
            raise IdentityValidationError(str(e))
        except Exception as e:
            logger.error(f"Failed to list users: {e}")
            raise IdentityServiceError(f"Failed to list users: {str(e)}")

    # =========================================================================
    # Roles and organization units of a user
    # =========================================================================

    async def get_roles(self, user_id: str) -> List[IdentityRoleDto]:
        await self._get_user_entity(user_id)
        roles = await self.user_repository.get_roles(user_id)
        return [IdentityRoleDto.from_role(r) for r in roles]

    async def get_role_names(self, user_id: str, organization_units_only: bool = False) -> UserRoleNamesResponse:
        """Role names of a user; all of them, or only those inherited from organization units"""
        await self._get_user_entity(user_id)
        if organization_units_only:
            names = await self.user_repository.get_role_names_in_organization_unit(user_id)
        else:
            names = await self.user_repository.get_role_names(user_id)
        return UserRoleNamesResponse(user_id=user_id, role_names=names)

    async def get_organization_units(self, user_id: str) -> List[OrganizationUnitDto]:
        await self._get_user_entity(user_id)
        units = await self.user_repository.get_organization_units(user_id)
        return [OrganizationUnitDto.from_organization_unit(u) for u in units]

    async def add_to_role(self, user_id: str, role_id: str) -> IdentityUserDto:
        user = await self._get_user_entity(user_id)
        await self._get_role_entity(role_id)
        if not user.is_in_role(role_id):
            user.add_role(role_id)
            await self.user_repository.update(user)
            logger.info(f"User {user_id} added to role {role_id}")
        return IdentityUserDto.from_user(user)

    async def remove_from_role(self, user_id: str, role_id: str) -> IdentityUserDto:
        user = await self._get_user_entity(user_id)
        if user.is_in_role(role_id):
            user.remove_role(role_id)
            await self.user_repository.update(user)
            logger.info(f"User {user_id} removed from role {role_id}")
        return IdentityUserDto.from_user(user)

    async def add_to_organization_unit(self, user_id: str, organization_unit_id: str) -> IdentityUserDto:
        user = await self._get_user_entity(user_id)
        await self._get_organization_unit_entity(organization_unit_id)
        if not user.is_in_organization_unit(organization_unit_id):
            user.add_organization_unit(organization_unit_id)
            await self.user_repository.update(user)
            logger.info(f"User {user_id} added to organization unit {organization_unit_id}")
        return IdentityUserDto.from_user(user)

    async def remove_from_organization_unit(self, user_id: str, organization_unit_id: str) -> IdentityUserDto:
        user = await self._get_user_entity(user_id)
        if user.is_in_organization_unit(organization_unit_id):
            user.remove_organization_unit(organization_unit_id)
            await self.user_repository.update(user)
            logger.info(f"User {user_id} removed from organization unit {organization_unit_id}")
        return IdentityUserDto.from_user(user)

    # =========================================================================
    # Roles
    # =========================================================================

    async def create_role(self, request: IdentityRoleCreateRequest) -> IdentityRoleDto:
        if await self.role_repository.find_by_normalized_name(normalize_name(request.name)):
            raise IdentityValidationError(f"Role name is already taken: {request.name}")

        role = IdentityRole(
            name=request.name,
            tenant_id=request.tenant_id,
            is_default=request.is_default,
            is_public=request.is_public,
        )
        await self.role_repository.insert(role)
        return IdentityRoleDto.from_role(role)

    async def get_roles_list(
        self,
        sorting: Optional[str] = None,
        filter: Optional[str] = None
    ) -> ListResultDto[IdentityRoleDto]:
        try:
            roles = await self.role_repository.get_list(sorting=sorting, filter=filter)
        except InvalidSortingError as e:
            raise IdentityValidationError(str(e))
        return ListResultDto[IdentityRoleDto](items=[IdentityRoleDto.from_role(r) for r in roles])

    async def get_users_in_role(self, role_name: str) -> List[IdentityUserDto]:
        users = await self.user_repository.get_list_by_normalized_role_name(normalize_name(role_name))
        return [IdentityUserDto.from_user(u) for u in users]

    async def delete_role(self, role_id: str, target_role_id: Optional[str] = None) -> UserMoveResponse:
        """
        Delete a role, moving its users to target_role_id first

        Raises:
            IdentityNotFoundError: Role or target role missing
            IdentityValidationError: Static role, or target equals the deleted role
        """
        role = await self._get_role_entity(role_id)
        if role.is_static:
            raise IdentityValidationError(f"Static role can not be deleted: {role.name}")
        if target_role_id is not None:
            if target_role_id == role_id:
                raise IdentityValidationError("Target role must differ from the deleted role")
            await self._get_role_entity(target_role_id)

        try:
            affected = await self.user_repository.update_role(role_id, target_role_id)
            await self.role_repository.delete(role_id)
        except Exception as e:
            logger.error(f"Failed to delete role {role_id}: {e}")
            raise IdentityServiceError(f"Failed to delete role: {str(e)}")

        logger.info(f"Role deleted: {role_id}, {affected} users moved to {target_role_id}")
        return UserMoveResponse(deleted_id=role_id, target_id=target_role_id, affected_users=affected)

    # =========================================================================
    # Organization units
    # =========================================================================

    async def _next_child_code(self, parent: Optional[OrganizationUnit]) -> str:
        parent_id = parent.id if parent else None
        last_child = await self.organization_unit_repository.get_last_child_or_none(parent_id)
        if last_child is None:
            return append_code(parent.code if parent else None, create_code(1))
        return calculate_next_code(last_child.code)

    async def create_organization_unit(self, request: OrganizationUnitCreateRequest) -> OrganizationUnitDto:
        """
        Create an organization unit under parent_id (a root unit when None)

        Raises:
            IdentityNotFoundError: Parent missing
            IdentityValidationError: A sibling already has this display name
        """
        parent = None
        if request.parent_id is not None:
            parent = await self._get_organization_unit_entity(request.parent_id)

        siblings = await self.organization_unit_repository.get_children(request.parent_id)
        if any(s.display_name == request.display_name for s in siblings):
            raise IdentityValidationError(
                f"An organization unit named '{request.display_name}' already exists at this level"
            )

        unit = OrganizationUnit(
            tenant_id=request.tenant_id,
            parent_id=request.parent_id,
            code=await self._next_child_code(parent),
            display_name=request.display_name,
        )
        await self.organization_unit_repository.insert(unit)
        return OrganizationUnitDto.from_organization_unit(unit)

    async def add_role_to_organization_unit(self, organization_unit_id: str, role_id: str) -> OrganizationUnitDto:
        await self._get_organization_unit_entity(organization_unit_id)
        await self._get_role_entity(role_id)
        unit = await self.organization_unit_repository.add_role(organization_unit_id, role_id)
        return OrganizationUnitDto.from_organization_unit(unit)

    async def get_users_in_organization_unit(
        self,
        organization_unit_id: str,
        include_children: bool = False
    ) -> List[IdentityUserDto]:
        if include_children:
            unit = await self._get_organization_unit_entity(organization_unit_id)
            users = await self.user_repository.get_users_in_organization_unit_with_children(unit.code)
        else:
            users = await self.user_repository.get_users_in_organization_unit(organization_unit_id)
        return [IdentityUserDto.from_user(u) for u in users]

    async def delete_organization_unit(
        self,
        organization_unit_id: str,
        target_organization_unit_id: Optional[str] = None
    ) -> UserMoveResponse:
        """
        Delete an organization unit and everything below it

        Members of every deleted unit move to the target unit first.

        Raises:
            IdentityNotFoundError: Unit or target missing
            IdentityValidationError: Target is the deleted unit or one of its descendants
        """
        unit = await self._get_organization_unit_entity(organization_unit_id)
        descendants = await self.organization_unit_repository.get_children(organization_unit_id, recursive=True)
        doomed = [unit] + descendants

        if target_organization_unit_id is not None:
            if any(u.id == target_organization_unit_id for u in doomed):
                raise IdentityValidationError("Target organization unit is being deleted")
            await self._get_organization_unit_entity(target_organization_unit_id)

        doomed_ids = [u.id for u in doomed]
        try:
            # users in several doomed units are moved once
            users = await self.user_repository.get_users_in_organizations_list(doomed_ids)
            for user in users:
                for doomed_id in doomed_ids:
                    user.remove_organization_unit(doomed_id)
                if target_organization_unit_id is not None:
                    user.add_organization_unit(target_organization_unit_id)
            await self.user_repository.update_many(users)

            for doomed_unit in reversed(doomed):
                await self.organization_unit_repository.delete(doomed_unit.id)
        except Exception as e:
            logger.error(f"Failed to delete organization unit {organization_unit_id}: {e}")
            raise IdentityServiceError(f"Failed to delete organization unit: {str(e)}")

        affected = len(users)
        logger.info(
            f"Organization unit deleted: {organization_unit_id} ({len(descendants)} descendants), "
            f"{affected} users moved to {target_organization_unit_id}"
        )
        return UserMoveResponse(
            deleted_id=organization_unit_id,
            target_id=target_organization_unit_id,
            affected_users=affected
        )

    # =========================================================================
    # Health
    # =========================================================================

    async def check_health(self) -> Dict[str, Any]:
        try:
            return await self.user_repository.health_check()
        except Exception as e:
            logger.error(f"Health check failed: {e}")
            return {"status": "unhealthy", "error": str(e)}
