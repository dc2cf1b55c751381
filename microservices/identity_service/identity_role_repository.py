"""
Identity Role Repository

Data access layer for roles (MongoDB `roles` collection).
"""

from typing import Optional, List
import logging

from core.mongo_client import MongoClientWrapper, doc_to_model, model_to_doc
from core.mongo_query import MongoQuery, is_blank, contains_regex, sort_fields
from .models import IdentityRole
from .identity_user_repository import ROLES_COLLECTION, BY_ID

logger = logging.getLogger(__name__)

ROLE_SORT_FIELDS = sort_fields(["id", "tenant_id", "name", "is_default", "is_public", "creation_time"])


class IdentityRoleRepository:
    """Role repository"""

    def __init__(self, db: Optional[MongoClientWrapper] = None, config=None):
        if db is None:
            db = MongoClientWrapper("identity_service", config=config)

        self.db = db
        self.roles = db.collection(ROLES_COLLECTION)

    async def initialize(self):
        await self.roles.create_index("normalized_name")
        logger.info("Identity role repository indexes ensured")

    async def insert(self, role: IdentityRole) -> IdentityRole:
        await self.roles.insert_one(model_to_doc(role))
        logger.info(f"Role created: {role.id} ({role.name})")
        return role

    async def find(self, id: str) -> Optional[IdentityRole]:
        doc = await self.roles.find_one({"_id": id})
        return doc_to_model(doc, IdentityRole) if doc else None

    async def find_by_normalized_name(self, normalized_name: str) -> Optional[IdentityRole]:
        doc = await (
            MongoQuery({"normalized_name": normalized_name})
            .order_by(BY_ID)
            .first_or_none(self.roles)
        )
        return doc_to_model(doc, IdentityRole) if doc else None

    async def get_list(self, sorting: Optional[str] = None, filter: Optional[str] = None) -> List[IdentityRole]:
        docs = await (
            MongoQuery()
            .where_if(not is_blank(filter), lambda: {"name": contains_regex(filter)})
            .order_by_sorting(sorting, ROLE_SORT_FIELDS, "name")
            .to_list(self.roles)
        )
        return [doc_to_model(doc, IdentityRole) for doc in docs]

    async def delete(self, id: str) -> bool:
        result = await self.roles.delete_one({"_id": id})
        return result.deleted_count > 0
