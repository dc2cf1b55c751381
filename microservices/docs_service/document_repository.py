"""
Document Repository

Data access layer for documentation pages (MongoDB `documents` collection).
"""

from typing import Optional, List, Dict, Any
import logging

from pymongo import ASCENDING

from core.mongo_client import MongoClientWrapper, model_to_doc
from .models import Document, FilterVersionItem

logger = logging.getLogger(__name__)

DOCUMENTS_COLLECTION = "documents"

FILTER_KEYS = ("project_id", "version", "format", "language_code")


def filter_version_items_pipeline(project_id: Optional[str] = None) -> List[Dict[str, Any]]:
    """Group documents by project, version, format and language"""
    pipeline: List[Dict[str, Any]] = []
    if project_id is not None:
        pipeline.append({"$match": {"project_id": project_id}})

    pipeline.append({"$group": {"_id": {key: f"${key}" for key in FILTER_KEYS}}})
    pipeline.append({"$sort": {f"_id.{key}": ASCENDING for key in FILTER_KEYS}})
    return pipeline


class DocumentRepository:
    """Document repository"""

    def __init__(self, db: Optional[MongoClientWrapper] = None, config=None):
        if db is None:
            db = MongoClientWrapper("docs_service", config=config)

        self.db = db
        self.documents = db.collection(DOCUMENTS_COLLECTION)

    async def initialize(self):
        await self.documents.create_index([(key, ASCENDING) for key in FILTER_KEYS])
        logger.info("Document repository indexes ensured")

    async def health_check(self) -> Dict[str, Any]:
        return await self.db.health_check()

    async def close(self):
        self.db.close()

    async def insert(self, document: Document) -> Document:
        await self.documents.insert_one(model_to_doc(document))
        logger.info(f"Document created: {document.id} ({document.project_id} {document.version})")
        return document

    async def get_filter_version_items(self, project_id: Optional[str] = None) -> List[FilterVersionItem]:
        """Distinct version/format/language combinations, optionally for one project"""
        cursor = self.documents.aggregate(filter_version_items_pipeline(project_id))
        groups = await cursor.to_list(length=None)
        return [FilterVersionItem.model_validate(group["_id"]) for group in groups]
