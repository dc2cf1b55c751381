"""
Organization Unit Repository

Data access layer for the organization unit tree (MongoDB
`organization_units` collection). Descendants are found by code prefix.
"""

from typing import Optional, List
import logging

from pymongo import DESCENDING

from core.mongo_client import MongoClientWrapper, doc_to_model, model_to_doc
from core.mongo_query import MongoQuery, starts_with_regex
from .models import OrganizationUnit
from .protocols import EntityNotFoundError
from .identity_user_repository import ORGANIZATION_UNITS_COLLECTION

logger = logging.getLogger(__name__)


class OrganizationUnitRepository:
    """Organization unit repository"""

    def __init__(self, db: Optional[MongoClientWrapper] = None, config=None):
        if db is None:
            db = MongoClientWrapper("identity_service", config=config)

        self.db = db
        self.organization_units = db.collection(ORGANIZATION_UNITS_COLLECTION)

    async def initialize(self):
        await self.organization_units.create_index("code")
        await self.organization_units.create_index("parent_id")
        logger.info("Organization unit repository indexes ensured")

    def _to_units(self, docs) -> List[OrganizationUnit]:
        return [doc_to_model(doc, OrganizationUnit) for doc in docs]

    async def insert(self, organization_unit: OrganizationUnit) -> OrganizationUnit:
        await self.organization_units.insert_one(model_to_doc(organization_unit))
        logger.info(f"Organization unit created: {organization_unit.id} ({organization_unit.code})")
        return organization_unit

    async def update(self, organization_unit: OrganizationUnit) -> OrganizationUnit:
        result = await self.organization_units.replace_one(
            {"_id": organization_unit.id}, model_to_doc(organization_unit)
        )
        if result.matched_count == 0:
            raise EntityNotFoundError("OrganizationUnit", organization_unit.id)
        return organization_unit

    async def find(self, id: str) -> Optional[OrganizationUnit]:
        doc = await self.organization_units.find_one({"_id": id})
        return doc_to_model(doc, OrganizationUnit) if doc else None

    async def get_children(self, parent_id: Optional[str], recursive: bool = False) -> List[OrganizationUnit]:
        """
        Children of a unit; parent_id None means the root units

        With recursive the whole subtree below the parent is returned.
        """
        if not recursive:
            docs = await MongoQuery({"parent_id": parent_id}).order_by([("code", 1)]).to_list(
                self.organization_units
            )
            return self._to_units(docs)

        if parent_id is None:
            docs = await MongoQuery().order_by([("code", 1)]).to_list(self.organization_units)
            return self._to_units(docs)

        parent = await self.find(parent_id)
        if parent is None:
            raise EntityNotFoundError("OrganizationUnit", parent_id)

        docs = await (
            MongoQuery({"code": starts_with_regex(parent.code + ".")})
            .order_by([("code", 1)])
            .to_list(self.organization_units)
        )
        return self._to_units(docs)

    async def get_last_child_or_none(self, parent_id: Optional[str]) -> Optional[OrganizationUnit]:
        doc = await (
            MongoQuery({"parent_id": parent_id})
            .order_by([("code", DESCENDING)])
            .first_or_none(self.organization_units)
        )
        return doc_to_model(doc, OrganizationUnit) if doc else None

    async def add_role(self, organization_unit_id: str, role_id: str) -> OrganizationUnit:
        unit = await self.find(organization_unit_id)
        if unit is None:
            raise EntityNotFoundError("OrganizationUnit", organization_unit_id)
        unit.add_role(role_id)
        return await self.update(unit)

    async def delete(self, id: str) -> bool:
        result = await self.organization_units.delete_one({"_id": id})
        return result.deleted_count > 0
