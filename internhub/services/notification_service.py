"""
Notification Service

Notifications are the only entity read with always-merge: both stores
are queried on every listing and the results deduplicated by id.
Delivery (email, push) is not handled here; a notification is a record.
"""

from datetime import datetime
from typing import List, Optional
import logging

from sqlalchemy import select, update
from pymongo.collection import Collection

from internhub.core.exceptions import StoreUnavailableError
from internhub.db.mongodb import get_collection, COLLECTIONS
from internhub.db.postgres import get_db_session
from internhub.models import Notification, new_id
from internhub.services.dual_store import (
    Record, apply_to_both, document_to_record, id_candidates, insert_document,
    lookup_many, many_ids_filter, ref_filter, row_to_record, write_with_fallback
)

logger = logging.getLogger(__name__)


class NotificationService:

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["notifications"])

    def list_for_user(self, user_id: str) -> List[Record]:
        """All notifications of a user from both stores, newest first."""

        def primary():
            with get_db_session() as db:
                rows = db.execute(
                    select(Notification)
                    .where(Notification.user_id == str(user_id))
                    .order_by(Notification.created_at.desc())
                ).scalars().all()
                return [row_to_record(r) for r in rows]

        def fallback():
            cursor = self.collection.find(ref_filter("userId", user_id)).sort("createdAt", -1)
            return [document_to_record(d) for d in cursor]

        return lookup_many(primary, fallback, "notifications", always_merge=True)

    def mark_read(self, user_id: str, notification_ids: Optional[List[str]] = None) -> int:
        """
        Mark notifications as read in both stores.

        With no ids, every unread notification of the user is marked.
        Only ever sets read=True.
        """
        ids = [str(i) for i in notification_ids or []]

        def primary():
            stmt = (
                update(Notification)
                .where(Notification.user_id == str(user_id), Notification.read.is_(False))
                .values(read=True)
            )
            if ids:
                stmt = stmt.where(Notification.id.in_(ids))
            with get_db_session() as db:
                return db.execute(stmt).rowcount

        def fallback():
            query = {"userId": {"$in": id_candidates(user_id)}, "read": {"$ne": True}}
            if ids:
                query.update(many_ids_filter("_id", ids))
            return self.collection.update_many(query, {"$set": {"read": True}}).modified_count

        marked = apply_to_both(primary, fallback, "notifications")
        logger.info("Marked %d notifications read for user %s", marked, user_id)
        return marked

    def notify(self, user_id: str, title: str, message: str,
               type: str = "info", link: Optional[str] = None) -> Optional[Record]:
        """
        Record a notification for a user.

        A notification is a side effect of another write; if neither store
        accepts it the error is logged and None returned.
        """
        record = {
            "id": new_id(),
            "user_id": str(user_id),
            "title": title,
            "message": message,
            "type": type,
            "link": link,
            "read": False,
            "created_at": datetime.utcnow(),
        }

        def primary():
            with get_db_session() as db:
                db.add(Notification(**record))
            return record

        def fallback():
            return insert_document(self.collection, record)

        try:
            return write_with_fallback(primary, fallback, "notification")
        except StoreUnavailableError as e:
            logger.error("Dropped notification '%s' for user %s: %s", title, user_id, e)
            return None


def get_notification_service() -> NotificationService:
    return NotificationService()
