"""
Company Service

Companies are owned by an admin account (one company per admin) and
moderated by superadmins through a status workflow:

    pending -> approved | rejected
    approved -> suspended
    suspended -> approved
    rejected -> pending
"""

import re
from collections import Counter
from datetime import datetime
from typing import Dict, Iterable, List, Optional
import logging

from sqlalchemy import or_, select, update
from pymongo.collection import Collection

from internhub.core.exceptions import ConflictError, NotFoundError, PermissionDeniedError, ValidationError
from internhub.db.mongodb import get_collection, COLLECTIONS
from internhub.db.postgres import get_db_session
from internhub.models import Company, Internship, new_id
from internhub.services.dual_store import (
    Record, document_to_record, document_update, id_filter, insert_document,
    lookup_many, lookup_one, many_ids_filter, ref_filter, row_to_record,
    write_with_fallback
)
from internhub.services.notification_service import get_notification_service
from internhub.services.saved_items import get_favorite_service
from internhub.services.status_rules import (
    COMPANY_TRANSITIONS, INACTIVE_COMPANY_STATUSES, ensure_transition,
    is_admin, is_superadmin
)

logger = logging.getLogger(__name__)


def contains(value: str) -> dict:
    """Case-insensitive substring match for the document store."""
    return {"$regex": re.escape(value), "$options": "i"}


def _normalize(company: Optional[Record]) -> Optional[Record]:
    if company is not None and not company.get("status"):
        # Legacy documents predate moderation
        company["status"] = "approved"
    return company


class CompanyService:

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["companies"])
        self.internships: Collection = get_collection(COLLECTIONS["internships"])

    # ------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------

    def get(self, company_id: str) -> Record:
        def primary():
            with get_db_session() as db:
                return row_to_record(db.get(Company, str(company_id)))

        def fallback():
            return document_to_record(self.collection.find_one(id_filter(company_id)))

        company = _normalize(lookup_one(primary, fallback, "company"))
        if company is None:
            raise NotFoundError("Company not found")
        return company

    def get_owned_by(self, owner_id: str) -> Optional[Record]:
        def primary():
            with get_db_session() as db:
                row = db.execute(
                    select(Company).where(Company.owner_id == str(owner_id)).limit(1)
                ).scalar_one_or_none()
                return row_to_record(row)

        def fallback():
            return document_to_record(self.collection.find_one(ref_filter("ownerId", owner_id)))

        return _normalize(lookup_one(primary, fallback, "owned company"))

    def get_many(self, company_ids: Iterable[str]) -> Dict[str, Record]:
        ids = sorted({str(i) for i in company_ids if i})
        if not ids:
            return {}

        def primary():
            with get_db_session() as db:
                rows = db.execute(select(Company).where(Company.id.in_(ids))).scalars().all()
                return [row_to_record(r) for r in rows]

        def fallback():
            return [document_to_record(d) for d in self.collection.find(many_ids_filter("_id", ids))]

        companies = lookup_many(primary, fallback, "companies", always_merge=True, sort_key=None)
        return {c["id"]: _normalize(c) for c in companies}

    def search_ids(self, search: str) -> List[str]:
        """Ids of companies whose name matches search, from both stores."""

        def primary():
            with get_db_session() as db:
                rows = db.execute(select(Company).where(Company.name.ilike(f"%{search}%"))).scalars().all()
                return [row_to_record(r) for r in rows]

        def fallback():
            return [document_to_record(d) for d in self.collection.find({"name": contains(search)})]

        return [c["id"] for c in lookup_many(primary, fallback, "company search",
                                             always_merge=True, sort_key=None)]

    def internship_counts(self, company_ids: Iterable[str]) -> Counter:
        """Internships per company, deduplicated across stores."""
        ids = sorted({str(i) for i in company_ids if i})
        if not ids:
            return Counter()

        def primary():
            with get_db_session() as db:
                rows = db.execute(
                    select(Internship.id, Internship.company_id).where(Internship.company_id.in_(ids))
                ).all()
                return [{"id": r[0], "company_id": r[1]} for r in rows]

        def fallback():
            cursor = self.internships.find(many_ids_filter("companyId", ids), {"companyId": 1})
            return [document_to_record(d) for d in cursor]

        internships = lookup_many(primary, fallback, "internship counts", always_merge=True, sort_key=None)
        return Counter(str(i["company_id"]) for i in internships)

    def list(self, search: str = "", industry: str = "", location: str = "",
             viewer: Optional[Record] = None) -> List[Record]:
        """
        Companies matching the filters, newest first.

        Suspended and rejected companies are hidden unless the viewer is
        a superadmin.
        """

        def primary():
            stmt = select(Company)
            if search:
                pattern = f"%{search}%"
                stmt = stmt.where(or_(
                    Company.name.ilike(pattern),
                    Company.description.ilike(pattern),
                    Company.industry.ilike(pattern),
                ))
            if industry:
                stmt = stmt.where(Company.industry.ilike(f"%{industry}%"))
            if location:
                stmt = stmt.where(Company.location.ilike(f"%{location}%"))
            with get_db_session() as db:
                rows = db.execute(stmt.order_by(Company.created_at.desc())).scalars().all()
                return [row_to_record(r) for r in rows]

        def fallback():
            query = {}
            if search:
                query["$or"] = [
                    {"name": contains(search)},
                    {"description": contains(search)},
                    {"industry": contains(search)},
                ]
            if industry:
                query["industry"] = contains(industry)
            if location:
                query["location"] = contains(location)
            return [document_to_record(d) for d in self.collection.find(query)]

        companies = [_normalize(c) for c in lookup_many(primary, fallback, "companies")]
        if not (viewer and is_superadmin(viewer)):
            companies = [c for c in companies if c["status"] not in INACTIVE_COMPANY_STATUSES]

        counts = self.internship_counts(c["id"] for c in companies)
        favorites = get_favorite_service().saved_ids(viewer["id"]) if viewer else set()
        for company in companies:
            company["internship_count"] = counts.get(company["id"], 0)
            company["is_favorite"] = company["id"] in favorites
        return companies

    # ------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------

    def create(self, data: dict, actor: Record) -> Record:
        """Create a company owned by the actor (or by owner_id, for superadmins)."""
        if not (is_admin(actor) or is_superadmin(actor)):
            raise PermissionDeniedError("Only company admins can create companies")
        if not data.get("name"):
            raise ValidationError("Missing required fields")

        owner_id = actor["id"]
        if is_superadmin(actor) and data.get("owner_id"):
            owner_id = str(data["owner_id"])

        if self.get_owned_by(owner_id):
            raise ConflictError("This account already owns a company")

        now = datetime.utcnow()
        record = {
            "id": new_id(),
            "name": data["name"],
            "description": data.get("description"),
            "logo": data.get("logo"),
            "website": data.get("website"),
            "location": data.get("location"),
            "industry": data.get("industry"),
            "size": data.get("size"),
            "owner_id": owner_id,
            "status": "pending",
            "created_at": now,
            "updated_at": now,
        }

        def primary():
            with get_db_session() as db:
                db.add(Company(**record))
            return record

        def fallback():
            return insert_document(self.collection, record)

        company = write_with_fallback(primary, fallback, "company")
        logger.info("Company %s created for owner %s", company["id"], owner_id)
        return company

    def set_status(self, company_id: str, status: str, actor: Record) -> Record:
        """Moderate a company. Superadmin only; validated against COMPANY_TRANSITIONS."""
        if not is_superadmin(actor):
            raise PermissionDeniedError("Only superadmins can moderate companies")

        company = self.get(company_id)
        ensure_transition("company", COMPANY_TRANSITIONS, company["status"], status)

        changes = {"status": status, "updated_at": datetime.utcnow()}

        def primary():
            with get_db_session() as db:
                return db.execute(
                    update(Company).where(Company.id == company["id"]).values(**changes)
                ).rowcount

        def fallback():
            return document_update(self.collection, company["id"], changes)

        write_with_fallback(primary, fallback, "company status")
        company.update(changes)
        logger.info("Company %s moved to %s", company["id"], status)

        get_notification_service().notify(
            company["owner_id"],
            title="Company status updated",
            message=f"Your company '{company['name']}' is now {status}.",
            type="company",
            link=f"/companies/{company['id']}",
        )
        return company

    def toggle_favorite(self, company_id: str, user: Record) -> bool:
        company = self.get(company_id)
        return get_favorite_service().toggle(user["id"], company["id"])


def get_company_service() -> CompanyService:
    return CompanyService()
