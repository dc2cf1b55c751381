"""
Identity Models Unit Tests

Organization unit code helpers, entity behaviour and request validation.
"""
from datetime import timedelta, timezone

import pytest
from pydantic import ValidationError

from microservices.identity_service.models import (
    IdentityUser,
    IdentityRole,
    OrganizationUnit,
    IdentityUserCreateRequest,
    IdentityUserDto,
    OrganizationUnitDto,
    GetIdentityUsersInput,
    normalize_name,
    create_code,
    append_code,
    get_relative_code,
    get_last_unit_code,
    get_parent_code,
    calculate_next_code,
    utc_now,
)

pytestmark = pytest.mark.unit


# =============================================================================
# Organization unit codes
# =============================================================================

class TestOrganizationUnitCodes:

    def test_create_code_pads_units(self):
        assert create_code(4, 2) == "00004.00002"
        assert create_code(1) == "00001"

    def test_create_code_without_numbers(self):
        assert create_code() is None

    def test_append_code(self):
        assert append_code(None, "00003") == "00003"
        assert append_code("00001", "00003") == "00001.00003"

    def test_append_code_rejects_empty_child(self):
        with pytest.raises(ValueError):
            append_code("00001", "")

    def test_relative_code(self):
        assert get_relative_code("00001.00002.00003", "00001") == "00002.00003"
        assert get_relative_code("00001.00002", None) == "00001.00002"
        assert get_relative_code("00001", "00001") == ""

    def test_last_unit_and_parent_code(self):
        assert get_last_unit_code("00001.00002.00014") == "00014"
        assert get_parent_code("00001.00002.00014") == "00001.00002"
        assert get_parent_code("00001") is None

    def test_calculate_next_code(self):
        assert calculate_next_code("00001.00019") == "00001.00020"
        assert calculate_next_code("00009") == "00010"

    def test_empty_code_rejected(self):
        for helper in (get_last_unit_code, get_parent_code, calculate_next_code):
            with pytest.raises(ValueError):
                helper("")


# =============================================================================
# Entities
# =============================================================================

class TestIdentityUser:

    def test_normalized_names_filled_in(self):
        user = IdentityUser(user_name=" alice ", email="Alice@Example.com")
        assert user.normalized_user_name == "ALICE"
        assert user.normalized_email == "ALICE@EXAMPLE.COM"

    def test_add_role_is_idempotent(self):
        user = IdentityUser(user_name="alice", email="alice@example.com")
        user.add_role("r1")
        user.add_role("r1")
        assert [r.role_id for r in user.roles] == ["r1"]
        assert user.is_in_role("r1")

    def test_remove_missing_role_is_noop(self):
        user = IdentityUser(user_name="alice", email="alice@example.com")
        user.remove_role("missing")
        assert user.roles == []

    def test_organization_unit_membership(self):
        user = IdentityUser(user_name="alice", email="alice@example.com")
        user.add_organization_unit("ou1")
        user.add_organization_unit("ou1")
        assert len(user.organization_units) == 1
        user.remove_organization_unit("ou1")
        assert not user.is_in_organization_unit("ou1")

    def test_add_login_skips_duplicates(self):
        user = IdentityUser(user_name="alice", email="alice@example.com")
        user.add_login("github", "123")
        user.add_login("github", "123")
        assert len(user.logins) == 1

    def test_is_locked_out(self):
        now = utc_now()
        user = IdentityUser(user_name="alice", email="alice@example.com")
        assert not user.is_locked_out(now)

        user.lockout_end = now + timedelta(minutes=5)
        assert user.is_locked_out(now)

        user.lockout_end = now - timedelta(minutes=5)
        assert not user.is_locked_out(now)

    def test_naive_lockout_end_is_utc(self):
        user = IdentityUser.model_validate({
            "user_name": "alice", "email": "alice@example.com",
            "lockout_end": "2099-01-01T00:00:00",
        })
        assert user.lockout_end.tzinfo is timezone.utc
        assert user.is_locked_out()

    def test_lockout_disabled_never_locked(self):
        now = utc_now()
        user = IdentityUser(
            user_name="alice", email="alice@example.com",
            lockout_enabled=False, lockout_end=now + timedelta(days=1)
        )
        assert not user.is_locked_out(now)

    def test_dto_hides_internal_fields(self):
        user = IdentityUser(user_name="alice", email="alice@example.com")
        user.add_role("r1")
        data = IdentityUserDto.from_user(user).model_dump()
        assert "roles" not in data
        assert "normalized_user_name" not in data
        assert data["id"] == user.id


class TestRoleAndOrganizationUnit:

    def test_role_normalized_name(self):
        assert IdentityRole(name="admin").normalized_name == "ADMIN"

    def test_normalize_name_none(self):
        assert normalize_name(None) is None

    def test_normalize_name_keeps_whitespace(self):
        assert normalize_name(" Admin") == " ADMIN"
        assert normalize_name(" Admin") != normalize_name("Admin")

    def test_organization_unit_add_role_is_idempotent(self):
        unit = OrganizationUnit(code="00001", display_name="HQ")
        unit.add_role("r1")
        unit.add_role("r1")
        assert OrganizationUnitDto.from_organization_unit(unit).role_ids == ["r1"]


# =============================================================================
# Requests
# =============================================================================

class TestRequests:

    def test_user_name_with_whitespace_rejected(self):
        with pytest.raises(ValidationError):
            IdentityUserCreateRequest(user_name="alice smith", email="alice@example.com")

    def test_invalid_email_rejected(self):
        with pytest.raises(ValidationError):
            IdentityUserCreateRequest(user_name="alice", email="not-an-email")

    def test_list_input_paging_bounds(self):
        with pytest.raises(ValidationError):
            GetIdentityUsersInput(max_result_count=0)
        with pytest.raises(ValidationError):
            GetIdentityUsersInput(skip_count=-1)

    def test_list_input_defaults(self):
        params = GetIdentityUsersInput()
        assert params.skip_count == 0
        assert params.max_result_count == 10
        assert params.sorting is None
