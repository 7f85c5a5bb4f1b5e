"""
Resource Service - learning resources (courses, guides, templates).
"""

from typing import List, Optional

from sqlalchemy import select
from pymongo.collection import Collection

from internhub.db.mongodb import get_collection, COLLECTIONS
from internhub.db.postgres import get_db_session
from internhub.models import Resource
from internhub.services.dual_store import Record, document_to_record, lookup_many, row_to_record


def _normalize(resource: Record) -> Record:
    if resource.get("tags") is None:
        resource["tags"] = []
    if resource.get("is_free") is None:
        resource["is_free"] = True
    resource["views"] = resource.get("views") or 0
    return resource


class ResourceService:

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["resources"])

    def list(self, category: Optional[str] = None) -> List[Record]:
        def primary():
            stmt = select(Resource)
            if category:
                stmt = stmt.where(Resource.category == category)
            with get_db_session() as db:
                rows = db.execute(stmt.order_by(Resource.created_at.desc())).scalars().all()
                return [row_to_record(r) for r in rows]

        def fallback():
            query = {"category": category} if category else {}
            return [document_to_record(d) for d in self.collection.find(query)]

        return [_normalize(r) for r in lookup_many(primary, fallback, "resources")]


def get_resource_service() -> ResourceService:
    return ResourceService()
