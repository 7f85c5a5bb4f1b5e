"""
Saved items - internship bookmarks and favorite companies.

Both are (user, target) links stored in either store; toggling removes
the link from both stores or adds it to one.
"""

from datetime import datetime
from typing import Set
import logging

from sqlalchemy import delete, select
from pymongo.collection import Collection

from internhub.db.mongodb import get_collection, COLLECTIONS
from internhub.db.postgres import get_db_session
from internhub.models import Bookmark, FavoriteCompany, new_id
from internhub.services.dual_store import (
    apply_to_both, document_to_record, id_candidates, insert_document,
    lookup_many, ref_filter, row_to_record, snake_to_camel, write_with_fallback
)

logger = logging.getLogger(__name__)


class SavedItemService:
    """
    One (user_id, <target>_id) link table per kind of saved item.
    """

    def __init__(self, model, collection_key: str, target_field: str):
        self.model = model
        self.collection: Collection = get_collection(COLLECTIONS[collection_key])
        self.target_field = target_field
        self.target_doc_field = snake_to_camel(target_field)

    def saved_ids(self, user_id: str) -> Set[str]:
        """Ids of every target the user has saved, across both stores."""
        def primary():
            with get_db_session() as db:
                rows = db.execute(
                    select(self.model).where(self.model.user_id == str(user_id))
                ).scalars().all()
                return [row_to_record(r) for r in rows]

        def fallback():
            return [document_to_record(d) for d in self.collection.find(ref_filter("userId", user_id))]

        links = lookup_many(primary, fallback, self.model.__tablename__,
                            key=self.target_field, always_merge=True, sort_key=None)
        return {str(link[self.target_field]) for link in links}

    def toggle(self, user_id: str, target_id: str) -> bool:
        """Flip the saved state; returns True when the item is now saved."""
        target_id = str(target_id)
        if target_id in self.saved_ids(user_id):
            def primary_delete():
                with get_db_session() as db:
                    return db.execute(
                        delete(self.model).where(
                            self.model.user_id == str(user_id),
                            getattr(self.model, self.target_field) == target_id
                        )
                    ).rowcount

            def document_delete():
                return self.collection.delete_many({
                    "userId": {"$in": id_candidates(user_id)},
                    self.target_doc_field: {"$in": id_candidates(target_id)},
                }).deleted_count

            apply_to_both(primary_delete, document_delete, self.model.__tablename__)
            return False

        record = {
            "id": new_id(),
            "user_id": str(user_id),
            self.target_field: target_id,
            "created_at": datetime.utcnow(),
        }

        def primary_insert():
            with get_db_session() as db:
                db.add(self.model(**record))
            return record

        def document_insert():
            return insert_document(self.collection, record)

        write_with_fallback(primary_insert, document_insert, self.model.__tablename__)
        return True


def get_bookmark_service() -> SavedItemService:
    return SavedItemService(Bookmark, "bookmarks", "internship_id")


def get_favorite_service() -> SavedItemService:
    return SavedItemService(FavoriteCompany, "favorites", "company_id")
