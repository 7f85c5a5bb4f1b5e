"""
Internship Service

Listings, postings and bookmarks. Only the owning company admin (or a
superadmin) may change a posting; status changes follow:

    draft -> open | closed
    open -> closed
    closed -> open
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Iterable, List, Optional
import logging

from sqlalchemy import delete, or_, select, update
from pymongo.collection import Collection

from internhub.core.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from internhub.db.mongodb import get_collection, COLLECTIONS
from internhub.db.postgres import get_db_session
from internhub.models import Bookmark, Internship, new_id
from internhub.services.company_service import contains, get_company_service
from internhub.services.dual_store import (
    Record, apply_to_both, document_to_record, document_update, id_candidates,
    id_filter, insert_document, lookup_many, lookup_one, many_ids_filter,
    ref_filter, row_to_record, write_with_fallback
)
from internhub.services.saved_items import get_bookmark_service
from internhub.services.status_rules import (
    INACTIVE_COMPANY_STATUSES, INTERNSHIP_TRANSITIONS, ensure_transition,
    is_superadmin
)

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("title", "description", "company_id", "location", "duration")
LIST_FIELDS = ("skills", "responsibilities", "qualifications")
UPDATABLE_FIELDS = (
    "title", "description", "location", "location_type", "duration", "stipend",
    "skills", "responsibilities", "qualifications", "start_date",
    "application_deadline", "status",
)
NON_NULLABLE_FIELDS = ("title", "description", "location", "location_type", "duration", "status")


def naive_utc(value):
    """Stores keep naive UTC datetimes; an offset is folded in, not dropped."""
    if isinstance(value, datetime) and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def plain_values(fields: dict) -> dict:
    """Replace enum members with their values and aware datetimes with naive UTC."""
    return {k: (v.value if isinstance(v, Enum) else naive_utc(v)) for k, v in fields.items()}


def as_datetime(value) -> Optional[datetime]:
    """Deadlines in legacy documents may be ISO strings."""
    if value is None or isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        logger.warning("Unparseable date value: %r", value)
        return None


def deadline_passed(internship: Record, now: Optional[datetime] = None) -> bool:
    deadline = as_datetime(internship.get("application_deadline"))
    if deadline is None:
        return False
    return naive_utc(deadline) < (now or datetime.utcnow())


def _normalize(internship: Optional[Record]) -> Optional[Record]:
    if internship is None:
        return None
    if not internship.get("status"):
        internship["status"] = "open"
    if not internship.get("location_type"):
        internship["location_type"] = "onsite"
    for field in LIST_FIELDS:
        if internship.get(field) is None:
            internship[field] = []
    if internship.get("company_id") is not None:
        internship["company_id"] = str(internship["company_id"])
    return internship


class InternshipService:

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["internships"])
        self.companies = get_company_service()

    # ------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------

    def get(self, internship_id: str) -> Record:
        def primary():
            with get_db_session() as db:
                return row_to_record(db.get(Internship, str(internship_id)))

        def fallback():
            return document_to_record(self.collection.find_one(id_filter(internship_id)))

        internship = _normalize(lookup_one(primary, fallback, "internship"))
        if internship is None:
            raise NotFoundError("Internship not found")
        return internship

    def get_many(self, internship_ids: Iterable[str]) -> Dict[str, Record]:
        ids = sorted({str(i) for i in internship_ids if i})
        if not ids:
            return {}

        def primary():
            with get_db_session() as db:
                rows = db.execute(select(Internship).where(Internship.id.in_(ids))).scalars().all()
                return [row_to_record(r) for r in rows]

        def fallback():
            return [document_to_record(d) for d in self.collection.find(many_ids_filter("_id", ids))]

        internships = lookup_many(primary, fallback, "internships", always_merge=True, sort_key=None)
        return {i["id"]: _normalize(i) for i in internships}

    def ids_for_company(self, company_id: str) -> List[str]:
        """Ids of every internship the company posted, whatever its status."""

        def primary():
            with get_db_session() as db:
                rows = db.execute(
                    select(Internship.id).where(Internship.company_id == str(company_id))
                ).all()
                return [{"id": r[0]} for r in rows]

        def fallback():
            cursor = self.collection.find(ref_filter("companyId", company_id), {"_id": 1})
            return [document_to_record(d) for d in cursor]

        return [i["id"] for i in lookup_many(primary, fallback, "company internships",
                                             always_merge=True, sort_key=None)]

    def enrich(self, internships: List[Record], viewer: Optional[Record] = None) -> List[Record]:
        """Attach company name/logo and the viewer's bookmark flag."""
        companies = self.companies.get_many(i["company_id"] for i in internships)
        bookmarks = get_bookmark_service().saved_ids(viewer["id"]) if viewer else set()
        for internship in internships:
            company = companies.get(internship["company_id"])
            internship["company"] = company["name"] if company else None
            internship["company_logo"] = company.get("logo") if company else None
            internship["is_bookmarked"] = internship["id"] in bookmarks
        return internships

    def list(self, search: str = "", location: str = "", type: str = "",
             company_id: str = "", viewer: Optional[Record] = None) -> List[Record]:
        """
        Open internships, newest first.

        search matches title, description or the company name; type is
        the location type (onsite, remote, hybrid).
        """
        company_ids = self.companies.search_ids(search) if search else []

        def primary():
            stmt = select(Internship).where(Internship.status == "open")
            if search:
                pattern = f"%{search}%"
                clauses = [Internship.title.ilike(pattern), Internship.description.ilike(pattern)]
                if company_ids:
                    clauses.append(Internship.company_id.in_(company_ids))
                stmt = stmt.where(or_(*clauses))
            if location:
                stmt = stmt.where(Internship.location.ilike(f"%{location}%"))
            if type:
                stmt = stmt.where(Internship.location_type == type)
            if company_id:
                stmt = stmt.where(Internship.company_id == str(company_id))
            with get_db_session() as db:
                rows = db.execute(stmt.order_by(Internship.created_at.desc())).scalars().all()
                return [row_to_record(r) for r in rows]

        def fallback():
            # Legacy documents without a status are open
            query = {"status": {"$in": ["open", None]}}
            if search:
                clauses = [{"title": contains(search)}, {"description": contains(search)}]
                if company_ids:
                    clauses.append(many_ids_filter("companyId", company_ids))
                query["$or"] = clauses
            if location:
                query["location"] = contains(location)
            if type:
                query["locationType"] = type
            if company_id:
                query.update(ref_filter("companyId", company_id))
            return [document_to_record(d) for d in self.collection.find(query)]

        internships = [_normalize(i) for i in lookup_many(primary, fallback, "internships")]
        return self.enrich(internships, viewer)

    # ------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------

    def _managed_company(self, company_id: str, actor: Record) -> Record:
        """The company, provided the actor may manage its postings."""
        try:
            company = self.companies.get(company_id)
        except NotFoundError:
            if is_superadmin(actor):
                raise
            raise PermissionDeniedError("You can only manage internships of your own company")
        if not is_superadmin(actor) and str(company["owner_id"]) != str(actor["id"]):
            raise PermissionDeniedError("You can only manage internships of your own company")
        return company

    def create(self, data: dict, actor: Record) -> Record:
        data = plain_values(data)
        missing = [f for f in REQUIRED_FIELDS if data.get(f) in (None, "")]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

        company = self._managed_company(data["company_id"], actor)
        if company["status"] in INACTIVE_COMPANY_STATUSES:
            raise PermissionDeniedError(f"A {company['status']} company cannot post internships")

        now = datetime.utcnow()
        record = {
            "id": new_id(),
            "title": data["title"],
            "description": data["description"],
            "company_id": company["id"],
            "location": data["location"],
            "location_type": data.get("location_type") or "onsite",
            "duration": data["duration"],
            "stipend": data.get("stipend"),
            "skills": data.get("skills") or [],
            "responsibilities": data.get("responsibilities") or [],
            "qualifications": data.get("qualifications") or [],
            "start_date": data.get("start_date"),
            "application_deadline": data.get("application_deadline"),
            "status": data.get("status") or "open",
            "created_at": now,
            "updated_at": now,
        }

        def primary():
            with get_db_session() as db:
                db.add(Internship(**record))
            return record

        def fallback():
            return insert_document(self.collection, record)

        internship = write_with_fallback(primary, fallback, "internship")
        logger.info("Internship %s posted by company %s", internship["id"], company["id"])
        return self.enrich([dict(internship)], actor)[0]

    def update(self, internship_id: str, changes: dict, actor: Record) -> Record:
        """
        Apply changes to a posting. Used for both full and partial updates;
        the caller decides which fields are present.
        """
        internship = self.get(internship_id)
        self._managed_company(internship["company_id"], actor)

        changes = {k: v for k, v in plain_values(changes).items() if k in UPDATABLE_FIELDS}
        nulled = [f for f in NON_NULLABLE_FIELDS if f in changes and changes[f] in (None, "")]
        if nulled:
            raise ValidationError(f"Fields cannot be empty: {', '.join(nulled)}")
        requested = changes.get("status")
        if requested and requested != internship["status"]:
            ensure_transition("internship", INTERNSHIP_TRANSITIONS, internship["status"], requested)
        changes["updated_at"] = datetime.utcnow()

        def primary():
            with get_db_session() as db:
                return db.execute(
                    update(Internship).where(Internship.id == internship["id"]).values(**changes)
                ).rowcount

        def fallback():
            return document_update(self.collection, internship["id"], changes)

        if not write_with_fallback(primary, fallback, "internship"):
            raise NotFoundError("Internship not found")
        internship.update(changes)
        logger.info("Internship %s updated (%s)", internship["id"], ", ".join(sorted(changes)))
        return self.enrich([internship], actor)[0]

    def delete(self, internship_id: str, actor: Record) -> None:
        """Remove a posting from both stores together with its bookmarks."""
        internship = self.get(internship_id)
        self._managed_company(internship["company_id"], actor)

        def primary():
            with get_db_session() as db:
                count = db.execute(delete(Internship).where(Internship.id == internship["id"])).rowcount
                db.execute(delete(Bookmark).where(Bookmark.internship_id == internship["id"]))
                return count

        def fallback():
            bookmarks = get_collection(COLLECTIONS["bookmarks"])
            bookmarks.delete_many({"internshipId": {"$in": id_candidates(internship["id"])}})
            return self.collection.delete_many(id_filter(internship["id"])).deleted_count

        apply_to_both(primary, fallback, "internship")
        logger.info("Internship %s deleted", internship["id"])

    def toggle_bookmark(self, internship_id: str, user: Record) -> bool:
        internship = self.get(internship_id)
        return get_bookmark_service().toggle(user["id"], internship["id"])


def get_internship_service() -> InternshipService:
    return InternshipService()
