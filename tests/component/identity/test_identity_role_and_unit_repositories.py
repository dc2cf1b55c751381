"""
Role and Organization Unit Repository Component Tests
"""
import pytest
import pytest_asyncio

from core.mongo_query import InvalidSortingError
from microservices.identity_service.identity_role_repository import IdentityRoleRepository
from microservices.identity_service.organization_unit_repository import OrganizationUnitRepository
from microservices.identity_service.protocols import EntityNotFoundError
from tests.fixtures import make_role, make_organization_unit

pytestmark = [pytest.mark.component, pytest.mark.asyncio]


@pytest.fixture
def role_repository(mock_mongo):
    return IdentityRoleRepository(db=mock_mongo)


@pytest.fixture
def unit_repository(mock_mongo):
    return OrganizationUnitRepository(db=mock_mongo)


class TestRoleRepository:

    async def test_insert_and_find_by_normalized_name(self, role_repository):
        role = await role_repository.insert(make_role("Editor"))
        found = await role_repository.find_by_normalized_name("EDITOR")
        assert found.id == role.id

    async def test_list_sorted_by_name_by_default(self, role_repository):
        for name in ("viewer", "admin", "editor"):
            await role_repository.insert(make_role(name))
        roles = await role_repository.get_list()
        assert [r.name for r in roles] == ["admin", "editor", "viewer"]

    async def test_list_filter_and_sorting(self, role_repository):
        for name in ("content-admin", "admin", "editor"):
            await role_repository.insert(make_role(name))
        roles = await role_repository.get_list(sorting="name desc", filter="admin")
        assert [r.name for r in roles] == ["content-admin", "admin"]

    async def test_list_invalid_sorting(self, role_repository):
        with pytest.raises(InvalidSortingError):
            await role_repository.get_list(sorting="normalized_name")

    async def test_delete(self, role_repository):
        role = await role_repository.insert(make_role())
        assert await role_repository.delete(role.id)
        assert await role_repository.find(role.id) is None


class TestOrganizationUnitRepository:

    @pytest_asyncio.fixture
    async def tree(self, unit_repository):
        root = await unit_repository.insert(make_organization_unit("00001", "Root"))
        sales = await unit_repository.insert(make_organization_unit("00001.00001", "Sales", root.id))
        support = await unit_repository.insert(make_organization_unit("00001.00002", "Support", root.id))
        emea = await unit_repository.insert(make_organization_unit("00001.00001.00001", "EMEA", sales.id))
        other = await unit_repository.insert(make_organization_unit("00002", "Other"))
        return {"root": root, "sales": sales, "support": support, "emea": emea, "other": other}

    async def test_direct_children(self, unit_repository, tree):
        children = await unit_repository.get_children(tree["root"].id)
        assert [u.display_name for u in children] == ["Sales", "Support"]

    async def test_root_units(self, unit_repository, tree):
        roots = await unit_repository.get_children(None)
        assert [u.display_name for u in roots] == ["Root", "Other"]

    async def test_recursive_children(self, unit_repository, tree):
        subtree = await unit_repository.get_children(tree["root"].id, recursive=True)
        assert [u.display_name for u in subtree] == ["Sales", "EMEA", "Support"]

    async def test_recursive_from_top_returns_all(self, unit_repository, tree):
        assert len(await unit_repository.get_children(None, recursive=True)) == 5

    async def test_recursive_missing_parent(self, unit_repository):
        with pytest.raises(EntityNotFoundError):
            await unit_repository.get_children("missing", recursive=True)

    async def test_last_child(self, unit_repository, tree):
        last = await unit_repository.get_last_child_or_none(tree["root"].id)
        assert last.code == "00001.00002"
        assert await unit_repository.get_last_child_or_none(tree["support"].id) is None

    async def test_add_role(self, unit_repository, tree):
        await unit_repository.add_role(tree["sales"].id, "r1")
        await unit_repository.add_role(tree["sales"].id, "r1")
        stored = await unit_repository.find(tree["sales"].id)
        assert [r.role_id for r in stored.roles] == ["r1"]

    async def test_add_role_missing_unit(self, unit_repository):
        with pytest.raises(EntityNotFoundError):
            await unit_repository.add_role("missing", "r1")
