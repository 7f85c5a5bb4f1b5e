"""
Profile Service - student profiles (bio, skills, education, links).
"""

from datetime import datetime
from typing import Optional
import logging

from sqlalchemy import select
from pymongo import ReturnDocument
from pymongo.collection import Collection

from internhub.db.mongodb import get_collection, COLLECTIONS
from internhub.db.postgres import get_db_session
from internhub.models import Profile, new_id
from internhub.services.dual_store import (
    Record, document_to_record, insert_document, lookup_one, ref_filter,
    row_to_record, snake_to_camel, write_with_fallback
)

logger = logging.getLogger(__name__)

LIST_FIELDS = ("skills", "education", "experience")


def _normalize(profile: Optional[Record]) -> Optional[Record]:
    if profile is None:
        return None
    for field in LIST_FIELDS:
        if profile.get(field) is None:
            profile[field] = []
    return profile


class ProfileService:

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["profiles"])

    def get_by_user(self, user_id: str) -> Optional[Record]:
        def primary():
            with get_db_session() as db:
                row = db.execute(
                    select(Profile).where(Profile.user_id == str(user_id))
                ).scalar_one_or_none()
                return row_to_record(row)

        def fallback():
            return document_to_record(self.collection.find_one(ref_filter("userId", user_id)))

        return _normalize(lookup_one(primary, fallback, "profile"))

    def upsert(self, user_id: str, fields: dict) -> Record:
        """
        Update the user's profile where it lives, or create it.

        Only the given fields are written.
        """
        now = datetime.utcnow()
        changes = dict(fields, updated_at=now)

        def primary_update():
            with get_db_session() as db:
                row = db.execute(
                    select(Profile).where(Profile.user_id == str(user_id))
                ).scalar_one_or_none()
                if row is None:
                    return None
                for key, value in changes.items():
                    setattr(row, key, value)
                db.flush()
                return row_to_record(row)

        def document_update():
            doc = self.collection.find_one_and_update(
                ref_filter("userId", user_id),
                {"$set": {snake_to_camel(k): v for k, v in changes.items()}},
                return_document=ReturnDocument.AFTER
            )
            return document_to_record(doc)

        profile = write_with_fallback(primary_update, document_update, "profile")
        if profile is not None:
            return _normalize(profile)

        record = {
            "id": new_id(),
            "user_id": str(user_id),
            "skills": [],
            "education": [],
            "experience": [],
            "created_at": now,
        }
        record.update(changes)

        def primary_insert():
            with get_db_session() as db:
                db.add(Profile(**record))
            return record

        def document_insert():
            return insert_document(self.collection, record)

        logger.info("Creating profile for user %s", user_id)
        return _normalize(write_with_fallback(primary_insert, document_insert, "profile"))


def get_profile_service() -> ProfileService:
    return ProfileService()
