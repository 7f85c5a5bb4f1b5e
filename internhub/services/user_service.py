"""
User Service - accounts across both stores.

Signups go to the primary store; legacy accounts (and accounts created
while the primary store was down) live only in the document store, so
every lookup is a dual lookup.
"""

from datetime import datetime
from typing import Dict, Iterable, Optional
import logging
import re

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError

from internhub.core.exceptions import AuthenticationError, ValidationError
from internhub.core.security import hash_password, verify_password
from internhub.db.mongodb import get_collection, COLLECTIONS
from internhub.db.postgres import get_db_session
from internhub.models import User, new_id
from internhub.services.dual_store import (
    Record, document_to_record, id_filter, insert_document, lookup_many,
    lookup_one, many_ids_filter, row_to_record, write_with_fallback
)
from internhub.services.status_rules import normalize_role

logger = logging.getLogger(__name__)

PUBLIC_FIELDS = ("id", "name", "email", "image", "role")


def normalize_email(email: str) -> str:
    return email.strip().lower()


def email_filter(email: str) -> dict:
    """Case-insensitive exact match; legacy documents kept the address as typed."""
    return {"email": {"$regex": f"^{re.escape(email)}$", "$options": "i"}}


def public_user(user: Optional[Record]) -> Optional[dict]:
    """Strip a user record down to the fields safe to return."""
    if user is None:
        return None
    return {field: user.get(field) for field in PUBLIC_FIELDS}


class UserService:
    """
    Reads and writes user accounts.
    """

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["users"])

    def find_by_email(self, email: str) -> Optional[Record]:
        email = normalize_email(email)

        def primary():
            with get_db_session() as db:
                row = db.execute(select(User).where(User.email == email)).scalar_one_or_none()
                return row_to_record(row)

        def fallback():
            return document_to_record(self.collection.find_one(email_filter(email)))

        return lookup_one(primary, fallback, "user")

    def find_by_id(self, user_id: str) -> Optional[Record]:
        def primary():
            with get_db_session() as db:
                return row_to_record(db.get(User, str(user_id)))

        def fallback():
            return document_to_record(self.collection.find_one(id_filter(user_id)))

        return lookup_one(primary, fallback, "user")

    def find_many(self, user_ids: Iterable[str]) -> Dict[str, Record]:
        """Fetch users by id from both stores, keyed by id."""
        ids = sorted({str(i) for i in user_ids if i})
        if not ids:
            return {}

        def primary():
            with get_db_session() as db:
                rows = db.execute(select(User).where(User.id.in_(ids))).scalars().all()
                return [row_to_record(r) for r in rows]

        def fallback():
            return [document_to_record(d) for d in self.collection.find(many_ids_filter("_id", ids))]

        users = lookup_many(primary, fallback, "users", always_merge=True, sort_key=None)
        return {u["id"]: u for u in users}

    def create_user(self, name: str, email: str, password: Optional[str], role: str,
                    image: Optional[str] = None) -> Record:
        """
        Register a new account.

        Raises ValidationError for a duplicate email (in either store) or
        an attempt to self-register as superadmin.
        """
        if role == "superadmin":
            raise ValidationError("Superadmin accounts cannot be created through signup")

        email = normalize_email(email)
        if self.find_by_email(email):
            raise ValidationError("User with this email already exists")

        now = datetime.utcnow()
        record = {
            "id": new_id(),
            "name": name,
            "email": email,
            "password": hash_password(password) if password else None,
            "image": image,
            "role": normalize_role(role),
            "created_at": now,
            "updated_at": now,
        }

        def primary():
            try:
                with get_db_session() as db:
                    db.add(User(**record))
            except IntegrityError as e:
                raise ValidationError("User with this email already exists") from e
            return record

        def fallback():
            try:
                return insert_document(self.collection, record)
            except DuplicateKeyError as e:
                raise ValidationError("User with this email already exists") from e

        created = write_with_fallback(primary, fallback, "user")
        logger.info("Registered %s account %s", created["role"], created["id"])
        return created

    def provision_external_user(self, email: str, name: Optional[str] = None,
                                image: Optional[str] = None) -> Record:
        """
        Create the local record for an account known only to the identity
        provider. Written straight to the document store, as such accounts
        always have been.
        """
        now = datetime.utcnow()
        record = {
            "id": new_id(),
            "name": name,
            "email": normalize_email(email),
            "image": image,
            "role": "student",
            "created_at": now,
            "updated_at": now,
        }
        insert_document(self.collection, record)
        logger.info("Provisioned identity-provider account %s", record["id"])
        return record

    def authenticate(self, email: str, password: str) -> Record:
        user = self.find_by_email(email)
        if not user:
            raise AuthenticationError("Invalid email or password")
        if not user.get("password"):
            raise AuthenticationError("This account uses an external identity provider. Please sign in there.")
        if not verify_password(password, user["password"]):
            raise AuthenticationError("Invalid email or password")
        return user


def get_user_service() -> UserService:
    return UserService()
