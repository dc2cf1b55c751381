"""
Identity Service Models

Users, roles and organization units plus the request/response DTOs of the
identity microservice.
"""

from typing import Optional, List
from datetime import datetime, timezone
import uuid

from pydantic import BaseModel, Field, EmailStr, field_validator

from core.dtos import PagedAndSortedResultRequest


def new_id() -> str:
    return str(uuid.uuid4())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def normalize_name(value: Optional[str]) -> Optional[str]:
    """Normalized form used for lookups by user name, email and role name"""
    if value is None:
        return None
    return value.upper()


# =============================================================================
# Organization unit codes
# =============================================================================
#
# Codes are dot-separated, zero-padded units: "00001.00002.00014".
# A unit's code always starts with its parent's code.

CODE_UNIT_LENGTH = 5


def create_code(*numbers: int) -> Optional[str]:
    """create_code(4, 2) -> "00004.00002" """
    if not numbers:
        return None
    return ".".join(str(number).zfill(CODE_UNIT_LENGTH) for number in numbers)


def append_code(parent_code: Optional[str], child_code: str) -> str:
    if not child_code:
        raise ValueError("child_code can not be empty")
    if not parent_code:
        return child_code
    return f"{parent_code}.{child_code}"


def get_relative_code(code: str, parent_code: Optional[str]) -> str:
    """Code relative to an ancestor: ("00001.00002.00003", "00001") -> "00002.00003" """
    if not code:
        raise ValueError("code can not be empty")
    if not parent_code:
        return code
    if len(code) == len(parent_code):
        return ""
    return code[len(parent_code) + 1:]


def get_last_unit_code(code: str) -> str:
    if not code:
        raise ValueError("code can not be empty")
    return code.split(".")[-1]


def get_parent_code(code: str) -> Optional[str]:
    if not code:
        raise ValueError("code can not be empty")
    units = code.split(".")
    if len(units) == 1:
        return None
    return ".".join(units[:-1])


def calculate_next_code(code: str) -> str:
    """Next sibling code: "00001.00019" -> "00001.00020" """
    if not code:
        raise ValueError("code can not be empty")
    parent_code = get_parent_code(code)
    last_unit = get_last_unit_code(code)
    return append_code(parent_code, create_code(int(last_unit) + 1))


# =============================================================================
# Entities
# =============================================================================

class IdentityUserRole(BaseModel):
    role_id: str


class IdentityUserOrganizationUnit(BaseModel):
    organization_unit_id: str


class IdentityUserClaim(BaseModel):
    claim_type: str
    claim_value: Optional[str] = None


class IdentityUserLogin(BaseModel):
    login_provider: str
    provider_key: str
    provider_display_name: Optional[str] = None


class IdentityUser(BaseModel):
    """User aggregate; roles, organization units, claims and logins are embedded"""
    id: str = Field(default_factory=new_id)
    tenant_id: Optional[str] = None
    user_name: str
    normalized_user_name: Optional[str] = None
    email: str
    normalized_email: Optional[str] = None
    email_confirmed: bool = False
    name: Optional[str] = None
    surname: Optional[str] = None
    phone_number: Optional[str] = None
    phone_number_confirmed: bool = False
    is_active: bool = True
    is_external: bool = False
    lockout_enabled: bool = True
    lockout_end: Optional[datetime] = None
    access_failed_count: int = 0
    roles: List[IdentityUserRole] = Field(default_factory=list)
    organization_units: List[IdentityUserOrganizationUnit] = Field(default_factory=list)
    claims: List[IdentityUserClaim] = Field(default_factory=list)
    logins: List[IdentityUserLogin] = Field(default_factory=list)
    creation_time: datetime = Field(default_factory=utc_now)
    last_modification_time: Optional[datetime] = None

    @field_validator('lockout_end')
    @classmethod
    def lockout_end_is_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    def model_post_init(self, __context) -> None:
        if self.normalized_user_name is None:
            self.normalized_user_name = normalize_name(self.user_name)
        if self.normalized_email is None:
            self.normalized_email = normalize_name(self.email)

    # Roles

    def is_in_role(self, role_id: str) -> bool:
        return any(r.role_id == role_id for r in self.roles)

    def add_role(self, role_id: str) -> None:
        if self.is_in_role(role_id):
            return
        self.roles.append(IdentityUserRole(role_id=role_id))

    def remove_role(self, role_id: str) -> None:
        self.roles = [r for r in self.roles if r.role_id != role_id]

    # Organization units

    def is_in_organization_unit(self, organization_unit_id: str) -> bool:
        return any(ou.organization_unit_id == organization_unit_id for ou in self.organization_units)

    def add_organization_unit(self, organization_unit_id: str) -> None:
        if self.is_in_organization_unit(organization_unit_id):
            return
        self.organization_units.append(
            IdentityUserOrganizationUnit(organization_unit_id=organization_unit_id)
        )

    def remove_organization_unit(self, organization_unit_id: str) -> None:
        self.organization_units = [
            ou for ou in self.organization_units
            if ou.organization_unit_id != organization_unit_id
        ]

    # Claims and logins

    def add_claim(self, claim_type: str, claim_value: Optional[str]) -> None:
        self.claims.append(IdentityUserClaim(claim_type=claim_type, claim_value=claim_value))

    def add_login(self, login_provider: str, provider_key: str, provider_display_name: Optional[str] = None) -> None:
        if any(l.login_provider == login_provider and l.provider_key == provider_key for l in self.logins):
            return
        self.logins.append(IdentityUserLogin(
            login_provider=login_provider,
            provider_key=provider_key,
            provider_display_name=provider_display_name
        ))

    def is_locked_out(self, now: Optional[datetime] = None) -> bool:
        now = now or utc_now()
        return bool(self.lockout_enabled and self.lockout_end is not None and self.lockout_end > now)


class IdentityRole(BaseModel):
    id: str = Field(default_factory=new_id)
    tenant_id: Optional[str] = None
    name: str
    normalized_name: Optional[str] = None
    is_default: bool = False
    is_static: bool = False
    is_public: bool = True
    creation_time: datetime = Field(default_factory=utc_now)

    def model_post_init(self, __context) -> None:
        if self.normalized_name is None:
            self.normalized_name = normalize_name(self.name)


class OrganizationUnitRole(BaseModel):
    role_id: str


class OrganizationUnit(BaseModel):
    id: str = Field(default_factory=new_id)
    tenant_id: Optional[str] = None
    parent_id: Optional[str] = None
    code: str
    display_name: str
    roles: List[OrganizationUnitRole] = Field(default_factory=list)
    creation_time: datetime = Field(default_factory=utc_now)

    def is_in_role(self, role_id: str) -> bool:
        return any(r.role_id == role_id for r in self.roles)

    def add_role(self, role_id: str) -> None:
        if self.is_in_role(role_id):
            return
        self.roles.append(OrganizationUnitRole(role_id=role_id))

    def remove_role(self, role_id: str) -> None:
        self.roles = [r for r in self.roles if r.role_id != role_id]


# =============================================================================
# Request Models
# =============================================================================

class IdentityUserCreateRequest(BaseModel):
    """User creation request"""
    user_name: str = Field(..., min_length=1, max_length=256, description="User name")
    email: EmailStr = Field(..., description="User email")
    name: Optional[str] = Field(None, max_length=64)
    surname: Optional[str] = Field(None, max_length=64)
    phone_number: Optional[str] = Field(None, max_length=16)
    tenant_id: Optional[str] = None
    is_active: bool = True
    lockout_enabled: bool = True
    role_ids: List[str] = Field(default_factory=list)
    organization_unit_ids: List[str] = Field(default_factory=list)

    @field_validator('user_name')
    @classmethod
    def user_name_has_no_whitespace(cls, v: str) -> str:
        if any(ch.isspace() for ch in v):
            raise ValueError("user_name can not contain whitespace")
        return v


class IdentityRoleCreateRequest(BaseModel):
    """Role creation request"""
    name: str = Field(..., min_length=1, max_length=256)
    tenant_id: Optional[str] = None
    is_default: bool = False
    is_public: bool = True


class OrganizationUnitCreateRequest(BaseModel):
    """Organization unit creation request"""
    display_name: str = Field(..., min_length=1, max_length=128)
    parent_id: Optional[str] = None
    tenant_id: Optional[str] = None


class GetIdentityUsersInput(PagedAndSortedResultRequest):
    """User list filters"""
    filter: Optional[str] = Field(None, max_length=256, description="Matches user name, email, name, surname or phone")
    role_id: Optional[str] = None
    organization_unit_id: Optional[str] = None
    user_name: Optional[str] = None
    phone_number: Optional[str] = None
    email_address: Optional[str] = None
    name: Optional[str] = None
    surname: Optional[str] = None
    is_locked_out: Optional[bool] = None
    not_active: Optional[bool] = None
    email_confirmed: Optional[bool] = None
    is_external: Optional[bool] = None
    max_creation_time: Optional[datetime] = None
    min_creation_time: Optional[datetime] = None
    max_modification_time: Optional[datetime] = None
    min_modification_time: Optional[datetime] = None


# =============================================================================
# Response Models
# =============================================================================

class IdentityUserDto(BaseModel):
    id: str
    tenant_id: Optional[str] = None
    user_name: str
    email: str
    email_confirmed: bool = False
    name: Optional[str] = None
    surname: Optional[str] = None
    phone_number: Optional[str] = None
    phone_number_confirmed: bool = False
    is_active: bool = True
    is_external: bool = False
    lockout_enabled: bool = True
    lockout_end: Optional[datetime] = None
    access_failed_count: int = 0
    creation_time: Optional[datetime] = None
    last_modification_time: Optional[datetime] = None

    @classmethod
    def from_user(cls, user: IdentityUser) -> 'IdentityUserDto':
        return cls.model_validate(user.model_dump(exclude={
            "normalized_user_name", "normalized_email", "roles",
            "organization_units", "claims", "logins",
        }))


class IdentityRoleDto(BaseModel):
    id: str
    tenant_id: Optional[str] = None
    name: str
    is_default: bool = False
    is_static: bool = False
    is_public: bool = True

    @classmethod
    def from_role(cls, role: IdentityRole) -> 'IdentityRoleDto':
        return cls.model_validate(role.model_dump(exclude={"normalized_name", "creation_time"}))


class OrganizationUnitDto(BaseModel):
    id: str
    tenant_id: Optional[str] = None
    parent_id: Optional[str] = None
    code: str
    display_name: str
    role_ids: List[str] = Field(default_factory=list)

    @classmethod
    def from_organization_unit(cls, unit: OrganizationUnit) -> 'OrganizationUnitDto':
        return cls(
            id=unit.id,
            tenant_id=unit.tenant_id,
            parent_id=unit.parent_id,
            code=unit.code,
            display_name=unit.display_name,
            role_ids=[r.role_id for r in unit.roles],
        )


class UserRoleNamesResponse(BaseModel):
    user_id: str
    role_names: List[str]


class UserMoveResponse(BaseModel):
    """Result of deleting a role or organization unit"""
    deleted_id: str
    target_id: Optional[str] = None
    affected_users: int


class HealthResponse(BaseModel):
    status: str
    service: str
    port: int
    version: str
    database: Optional[str] = None


__all__ = [
    'IdentityUser', 'IdentityUserRole', 'IdentityUserOrganizationUnit',
    'IdentityUserClaim', 'IdentityUserLogin', 'IdentityRole',
    'OrganizationUnit', 'OrganizationUnitRole',
    'IdentityUserCreateRequest', 'IdentityRoleCreateRequest',
    'OrganizationUnitCreateRequest', 'GetIdentityUsersInput',
    'IdentityUserDto', 'IdentityRoleDto', 'OrganizationUnitDto',
    'UserRoleNamesResponse', 'UserMoveResponse', 'HealthResponse',
    'normalize_name', 'create_code', 'append_code', 'get_relative_code',
    'get_last_unit_code', 'get_parent_code', 'calculate_next_code',
    'new_id', 'utc_now',
]
