"""
Identity User Repository

Data access layer for identity users over MongoDB (motor).

Users embed their role, organization unit, claim and login references.
Role names and inherited roles are resolved against the `roles` and
`organization_units` collections.
"""

from typing import Optional, List, Dict, Any, Iterable
from datetime import datetime
import logging

from pymongo import ReplaceOne, ASCENDING

from core.mongo_client import MongoClientWrapper, doc_to_model, model_to_doc
from core.mongo_query import MongoQuery, is_blank, contains_regex, starts_with_regex, sort_fields
from .models import IdentityUser, IdentityRole, OrganizationUnit, utc_now
from .protocols import EntityNotFoundError

logger = logging.getLogger(__name__)

USERS_COLLECTION = "users"
ROLES_COLLECTION = "roles"
ORGANIZATION_UNITS_COLLECTION = "organization_units"

USER_SORT_FIELDS = sort_fields([
    "id", "tenant_id", "user_name", "email", "name", "surname", "phone_number",
    "email_confirmed", "is_active", "is_external", "lockout_end",
    "access_failed_count", "creation_time", "last_modification_time",
])
DEFAULT_USER_SORTING = "user_name"

BY_ID = [("_id", ASCENDING)]


def union_ids(*groups: Iterable[str]) -> List[str]:
    """Union of id groups, first occurrence wins"""
    seen = set()
    result = []
    for group in groups:
        for item in group:
            if item not in seen:
                seen.add(item)
                result.append(item)
    return result


def locked_out_clause(now: datetime) -> Dict[str, Any]:
    return {"lockout_enabled": True, "lockout_end": {"$ne": None, "$gt": now}}


def build_user_query(
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
    now: Optional[datetime] = None,
) -> MongoQuery:
    """
    Compose the user list filter

    Each argument adds its clause only when it is given; blank strings count
    as not given. Shared by get_list and get_count so both see the same set.
    """
    now = now or utc_now()

    return (
        MongoQuery()
        .where_if(not is_blank(filter), lambda: {"$or": [
            {"user_name": contains_regex(filter)},
            {"email": contains_regex(filter)},
            {"name": contains_regex(filter)},
            {"surname": contains_regex(filter)},
            {"phone_number": contains_regex(filter)},
        ]})
        .where_if(role_id is not None, lambda: {"roles.role_id": role_id})
        .where_if(organization_unit_id is not None,
                  lambda: {"organization_units.organization_unit_id": organization_unit_id})
        .where_if(not is_blank(user_name), lambda: {"user_name": user_name})
        .where_if(not is_blank(phone_number), lambda: {"phone_number": phone_number})
        .where_if(not is_blank(email_address), lambda: {"email": email_address})
        .where_if(not is_blank(name), lambda: {"name": name})
        .where_if(not is_blank(surname), lambda: {"surname": surname})
        .where_if(is_locked_out is True, lambda: locked_out_clause(now))
        .where_if(is_locked_out is False, lambda: {"$nor": [locked_out_clause(now)]})
        .where_if(not_active is not None, lambda: {"is_active": not not_active})
        .where_if(email_confirmed is not None, lambda: {"email_confirmed": email_confirmed})
        .where_if(is_external is not None, lambda: {"is_external": is_external})
        .where_if(max_creation_time is not None, lambda: {"creation_time": {"$lte": max_creation_time}})
        .where_if(min_creation_time is not None, lambda: {"creation_time": {"$gte": min_creation_time}})
        .where_if(max_modification_time is not None,
                  lambda: {"last_modification_time": {"$lte": max_modification_time}})
        .where_if(min_modification_time is not None,
                  lambda: {"last_modification_time": {"$gte": min_modification_time}})
    )


class IdentityUserRepository:
    """
    Identity user repository

    Database operations for users using motor. Lookups that may match more
    than one document order by id so the result is stable.
    """

    def __init__(self, db: Optional[MongoClientWrapper] = None, config=None):
        if db is None:
            db = MongoClientWrapper("identity_service", config=config)

        self.db = db
        self.users = db.collection(USERS_COLLECTION)
        self.roles = db.collection(ROLES_COLLECTION)
        self.organization_units = db.collection(ORGANIZATION_UNITS_COLLECTION)

    async def initialize(self):
        """Create the lookup indexes"""
        await self.users.create_index(
            [("tenant_id", ASCENDING), ("normalized_user_name", ASCENDING)], unique=True
        )
        await self.users.create_index(
            [("tenant_id", ASCENDING), ("normalized_email", ASCENDING)], unique=True
        )
        await self.users.create_index([("tenant_id", ASCENDING), ("user_name", ASCENDING)])
        await self.users.create_index("roles.role_id")
        await self.users.create_index("organization_units.organization_unit_id")
        await self.users.create_index([
            ("logins.login_provider", ASCENDING), ("logins.provider_key", ASCENDING)
        ])
        logger.info("Identity user repository indexes ensured")

    async def health_check(self) -> Dict[str, Any]:
        return await self.db.health_check()

    async def close(self):
        self.db.close()

    def _to_users(self, docs: List[Dict[str, Any]]) -> List[IdentityUser]:
        return [doc_to_model(doc, IdentityUser) for doc in docs]

    # =========================================================================
    # Basic CRUD
    # =========================================================================

    async def find(self, id: str) -> Optional[IdentityUser]:
        doc = await self.users.find_one({"_id": id})
        return doc_to_model(doc, IdentityUser) if doc else None

    async def get(self, id: str) -> IdentityUser:
        """Get user by id, raising EntityNotFoundError when missing"""
        user = await self.find(id)
        if user is None:
            raise EntityNotFoundError("IdentityUser", id)
        return user

    async def insert(self, user: IdentityUser) -> IdentityUser:
        await self.users.insert_one(model_to_doc(user))
        logger.info(f"User created: {user.id} ({user.user_name})")
        return user

    async def update(self, user: IdentityUser) -> IdentityUser:
        user.last_modification_time = utc_now()
        result = await self.users.replace_one({"_id": user.id}, model_to_doc(user))
        if result.matched_count == 0:
            raise EntityNotFoundError("IdentityUser", user.id)
        return user

    async def update_many(self, users: List[IdentityUser]) -> int:
        """Replace many users in one bulk write"""
        if not users:
            return 0

        now = utc_now()
        operations = []
        for user in users:
            user.last_modification_time = now
            operations.append(ReplaceOne({"_id": user.id}, model_to_doc(user)))

        result = await self.users.bulk_write(operations, ordered=False)
        return result.modified_count

    async def delete(self, id: str) -> bool:
        result = await self.users.delete_one({"_id": id})
        return result.deleted_count > 0

    # =========================================================================
    # Lookups
    # =========================================================================

    async def find_by_normalized_user_name(self, normalized_user_name: str) -> Optional[IdentityUser]:
        doc = await (
            MongoQuery({"normalized_user_name": normalized_user_name})
            .order_by(BY_ID)
            .first_or_none(self.users)
        )
        return doc_to_model(doc, IdentityUser) if doc else None

    async def find_by_normalized_email(self, normalized_email: str) -> Optional[IdentityUser]:
        doc = await (
            MongoQuery({"normalized_email": normalized_email})
            .order_by(BY_ID)
            .first_or_none(self.users)
        )
        return doc_to_model(doc, IdentityUser) if doc else None

    async def find_by_login(self, login_provider: str, provider_key: str) -> Optional[IdentityUser]:
        """Provider and key must match on the same login entry"""
        doc = await (
            MongoQuery({"logins": {"$elemMatch": {
                "login_provider": login_provider,
                "provider_key": provider_key,
            }}})
            .order_by(BY_ID)
            .first_or_none(self.users)
        )
        return doc_to_model(doc, IdentityUser) if doc else None

    async def find_by_tenant_id_and_user_name(
        self,
        user_name: str,
        tenant_id: Optional[str]
    ) -> Optional[IdentityUser]:
        """tenant_id None matches host users"""
        doc = await self.users.find_one({"tenant_id": tenant_id, "user_name": user_name})
        return doc_to_model(doc, IdentityUser) if doc else None

    async def get_list_by_claim(self, claim_type: str, claim_value: Optional[str]) -> List[IdentityUser]:
        docs = await MongoQuery({"claims": {"$elemMatch": {
            "claim_type": claim_type,
            "claim_value": claim_value,
        }}}).to_list(self.users)
        return self._to_users(docs)

    async def get_list_by_normalized_role_name(self, normalized_role_name: str) -> List[IdentityUser]:
        role = await (
            MongoQuery({"normalized_name": normalized_role_name})
            .order_by(BY_ID)
            .first_or_none(self.roles)
        )
        if role is None:
            return []

        docs = await MongoQuery({"roles.role_id": role["_id"]}).to_list(self.users)
        return self._to_users(docs)

    async def get_list_by_ids(self, ids: Iterable[str]) -> List[IdentityUser]:
        ids = list(ids)
        if not ids:
            return []
        docs = await MongoQuery({"_id": {"$in": ids}}).to_list(self.users)
        return self._to_users(docs)

    # =========================================================================
    # Roles and organization units of a user
    # =========================================================================

    async def _get_organization_unit_role_ids(self, organization_unit_ids: List[str]) -> List[str]:
        if not organization_unit_ids:
            return []
        units = await MongoQuery({"_id": {"$in": organization_unit_ids}}).to_list(
            self.organization_units, projection={"roles": 1}
        )
        return union_ids(*([r["role_id"] for r in unit.get("roles") or []] for unit in units))

    async def _get_all_role_ids(self, user: IdentityUser) -> List[str]:
        organization_unit_ids = [ou.organization_unit_id for ou in user.organization_units]
        organization_unit_role_ids = await self._get_organization_unit_role_ids(organization_unit_ids)
        return union_ids(organization_unit_role_ids, [r.role_id for r in user.roles])

    async def _get_role_names_by_ids(self, role_ids: List[str]) -> List[str]:
        if not role_ids:
            return []
        docs = await MongoQuery({"_id": {"$in": role_ids}}).to_list(self.roles, projection={"name": 1})
        return [doc["name"] for doc in docs]

    async def get_role_names(self, id: str) -> List[str]:
        """Names of direct roles and roles inherited from organization units"""
        user = await self.get(id)
        return await self._get_role_names_by_ids(await self._get_all_role_ids(user))

    async def get_role_names_in_organization_unit(self, id: str) -> List[str]:
        """Names of roles inherited from the user's organization units only"""
        user = await self.get(id)
        role_ids = await self._get_organization_unit_role_ids(
            [ou.organization_unit_id for ou in user.organization_units]
        )
        return await self._get_role_names_by_ids(role_ids)

    async def get_roles(self, id: str) -> List[IdentityRole]:
        user = await self.get(id)
        role_ids = await self._get_all_role_ids(user)
        if not role_ids:
            return []
        docs = await MongoQuery({"_id": {"$in": role_ids}}).to_list(self.roles)
        return [doc_to_model(doc, IdentityRole) for doc in docs]

    async def get_organization_units(self, id: str) -> List[OrganizationUnit]:
        user = await self.get(id)
        organization_unit_ids = [ou.organization_unit_id for ou in user.organization_units]
        if not organization_unit_ids:
            return []
        docs = await MongoQuery({"_id": {"$in": organization_unit_ids}}).to_list(self.organization_units)
        return [doc_to_model(doc, OrganizationUnit) for doc in docs]

    # =========================================================================
    # Filtered list and count
    # =========================================================================

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
        """
        Filtered, sorted and paged user list

        Raises:
            InvalidSortingError: sorting names an unknown field
        """
        query = build_user_query(
            filter=filter,
            role_id=role_id,
            organization_unit_id=organization_unit_id,
            user_name=user_name,
            phone_number=phone_number,
            email_address=email_address,
            name=name,
            surname=surname,
            is_locked_out=is_locked_out,
            not_active=not_active,
            email_confirmed=email_confirmed,
            is_external=is_external,
            max_creation_time=max_creation_time,
            min_creation_time=min_creation_time,
            max_modification_time=max_modification_time,
            min_modification_time=min_modification_time,
        )
        query.order_by_sorting(sorting, USER_SORT_FIELDS, DEFAULT_USER_SORTING)
        query.page_by(skip_count, max_result_count)

        return self._to_users(await query.to_list(self.users))

    async def get_count(
        self,
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
    ) -> int:
        query = build_user_query(
            filter=filter,
            role_id=role_id,
            organization_unit_id=organization_unit_id,
            user_name=user_name,
            phone_number=phone_number,
            email_address=email_address,
            name=name,
            surname=surname,
            is_locked_out=is_locked_out,
            not_active=not_active,
            email_confirmed=email_confirmed,
            is_external=is_external,
            max_creation_time=max_creation_time,
            min_creation_time=min_creation_time,
            max_modification_time=max_modification_time,
            min_modification_time=min_modification_time,
        )
        return await query.count(self.users)

    # =========================================================================
    # Organization unit membership
    # =========================================================================

    async def get_users_in_organization_unit(self, organization_unit_id: str) -> List[IdentityUser]:
        docs = await MongoQuery(
            {"organization_units.organization_unit_id": organization_unit_id}
        ).to_list(self.users)
        return self._to_users(docs)

    async def get_users_in_organizations_list(self, organization_unit_ids: List[str]) -> List[IdentityUser]:
        if not organization_unit_ids:
            return []
        docs = await MongoQuery(
            {"organization_units.organization_unit_id": {"$in": list(organization_unit_ids)}}
        ).to_list(self.users)
        return self._to_users(docs)

    async def get_users_in_organization_unit_with_children(self, code: str) -> List[IdentityUser]:
        """Users of the unit with this code and of every unit below it"""
        units = await MongoQuery({"code": starts_with_regex(code)}).to_list(
            self.organization_units, projection={"_id": 1}
        )
        return await self.get_users_in_organizations_list([unit["_id"] for unit in units])

    # =========================================================================
    # Bulk reassignment
    # =========================================================================

    async def update_role(self, source_role_id: str, target_role_id: Optional[str] = None) -> int:
        """
        Move every holder of source_role_id to target_role_id

        With no target the source role is only removed.

        Returns:
            Number of users changed
        """
        users = self._to_users(await MongoQuery({"roles.role_id": source_role_id}).to_list(self.users))

        for user in users:
            user.remove_role(source_role_id)
            if target_role_id is not None:
                user.add_role(target_role_id)

        updated = await self.update_many(users)
        logger.info(f"Moved {len(users)} users from role {source_role_id} to {target_role_id}")
        return updated

    async def update_organization(
        self,
        source_organization_id: str,
        target_organization_id: Optional[str] = None
    ) -> int:
        """
        Move every member of source_organization_id to target_organization_id

        Returns:
            Number of users changed
        """
        users = self._to_users(await MongoQuery(
            {"organization_units.organization_unit_id": source_organization_id}
        ).to_list(self.users))

        for user in users:
            user.remove_organization_unit(source_organization_id)
            if target_organization_id is not None:
                user.add_organization_unit(target_organization_id)

        updated = await self.update_many(users)
        logger.info(
            f"Moved {len(users)} users from organization unit {source_organization_id} "
            f"to {target_organization_id}"
        )
        return updated
