"""
Application Service

Who can see what:
- student: their own applications
- admin: applications to internships of the company they own
- superadmin: everything

Status changes follow APPLICATION_TRANSITIONS. Reviewers (the owning
admin or a superadmin) move an application forward; the applicant can
only withdraw it.
"""

from datetime import datetime
from typing import List, Optional
import logging

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError

from internhub.core.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from internhub.db.mongodb import get_collection, COLLECTIONS
from internhub.db.postgres import get_db_session
from internhub.models import Application, new_id
from internhub.services.company_service import get_company_service
from internhub.services.dual_store import (
    DOCUMENT_ERRORS, PRIMARY_ERRORS, Record, document_to_record, document_update,
    id_candidates, id_filter, insert_document, lookup_many, lookup_one,
    many_ids_filter, merge_records, ref_filter, row_to_record, sort_records,
    write_with_fallback
)
from internhub.services.internship_service import deadline_passed, get_internship_service
from internhub.services.notification_service import get_notification_service
from internhub.services.status_rules import (
    APPLICANT_STATUSES, APPLICATION_TRANSITIONS, REVIEWER_STATUSES,
    ensure_transition, is_admin, is_student, is_superadmin,
    normalize_application_status
)
from internhub.services.user_service import get_user_service, public_user

logger = logging.getLogger(__name__)


def _normalize(application: Optional[Record]) -> Optional[Record]:
    if application is None:
        return None
    application["status"] = normalize_application_status(application.get("status"))
    application["user_id"] = str(application.get("user_id"))
    application["internship_id"] = str(application.get("internship_id"))
    if application.get("created_at") is None:
        # Legacy documents carry appliedAt instead
        application["created_at"] = application.get("applied_at")
    return application


class ApplicationService:

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["applications"])
        self.internships = get_internship_service()
        self.companies = get_company_service()

    # ------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------

    def _query(self, user_id: Optional[str] = None, internship_ids: Optional[List[str]] = None,
               label: str = "applications") -> List[Record]:
        """Dual lookup of applications, optionally by applicant and/or internships."""
        if internship_ids is not None and not internship_ids:
            return []

        def primary():
            stmt = select(Application)
            if user_id:
                stmt = stmt.where(Application.user_id == str(user_id))
            if internship_ids is not None:
                stmt = stmt.where(Application.internship_id.in_(internship_ids))
            with get_db_session() as db:
                rows = db.execute(stmt.order_by(Application.created_at.desc())).scalars().all()
                return [row_to_record(r) for r in rows]

        def fallback():
            query = {}
            if user_id:
                query.update(ref_filter("userId", user_id))
            if internship_ids is not None:
                query.update(many_ids_filter("internshipId", internship_ids))
            return [document_to_record(d) for d in self.collection.find(query)]

        return [_normalize(a) for a in lookup_many(primary, fallback, label)]

    def present(self, applications: List[Record], with_user: bool = False) -> List[Record]:
        """
        Shape applications for the API: internship title, company name and,
        for reviewers, the applicant. A deleted internship leaves both
        fields empty.
        """
        internships = self.internships.get_many(a["internship_id"] for a in applications)
        companies = self.companies.get_many(i["company_id"] for i in internships.values())
        users = get_user_service().find_many(a["user_id"] for a in applications) if with_user else {}

        presented = []
        for application in applications:
            internship = internships.get(application["internship_id"])
            company = companies.get(internship["company_id"]) if internship else None
            presented.append({
                "id": application["id"],
                "internship_id": application["internship_id"],
                "internship_title": internship["title"] if internship else None,
                "company": company["name"] if company else None,
                "status": application["status"],
                "cover_letter": application.get("cover_letter"),
                "resume_url": application.get("resume_url"),
                "applied_at": application.get("created_at"),
                "updated_at": application.get("updated_at"),
                "user": public_user(users.get(application["user_id"])),
            })
        return presented

    def _owner_of(self, application: Record) -> Optional[str]:
        """Id of the admin owning the company the application went to."""
        try:
            internship = self.internships.get(application["internship_id"])
            company = self.companies.get(internship["company_id"])
        except NotFoundError:
            return None
        return str(company["owner_id"])

    def _is_reviewer(self, application: Record, actor: Record) -> bool:
        if is_superadmin(actor):
            return True
        return is_admin(actor) and self._owner_of(application) == str(actor["id"])

    def _is_applicant(self, application: Record, actor: Record) -> bool:
        return application["user_id"] == str(actor["id"])

    # ------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------

    def get(self, application_id: str) -> Record:
        def primary():
            with get_db_session() as db:
                return row_to_record(db.get(Application, str(application_id)))

        def fallback():
            return document_to_record(self.collection.find_one(id_filter(application_id)))

        application = _normalize(lookup_one(primary, fallback, "application"))
        if application is None:
            raise NotFoundError("Application not found")
        return application

    def find_existing(self, user_id: str, internship_id: str) -> Optional[Record]:
        """The user's application to an internship, from either store."""

        def primary():
            with get_db_session() as db:
                row = db.execute(
                    select(Application).where(
                        Application.user_id == str(user_id),
                        Application.internship_id == str(internship_id),
                    )
                ).scalar_one_or_none()
                return row_to_record(row)

        def fallback():
            doc = self.collection.find_one({
                "userId": {"$in": id_candidates(user_id)},
                "internshipId": {"$in": id_candidates(internship_id)},
            })
            return document_to_record(doc)

        return _normalize(lookup_one(primary, fallback, "application"))

    def list_for(self, user: Record, internship_id: Optional[str] = None) -> List[Record]:
        """Applications visible to the user, newest first."""
        if is_superadmin(user):
            ids = [str(internship_id)] if internship_id else None
            return self.present(self._query(internship_ids=ids), with_user=True)

        if is_admin(user):
            company = self.companies.get_owned_by(user["id"])
            if company is None:
                raise PermissionDeniedError("You do not own a company")
            ids = self.internships.ids_for_company(company["id"])
            if internship_id:
                if str(internship_id) not in ids:
                    raise PermissionDeniedError("You can only view applications to your own internships")
                ids = [str(internship_id)]
            return self.present(self._query(internship_ids=ids), with_user=True)

        ids = [str(internship_id)] if internship_id else None
        return self.present(self._query(user_id=user["id"], internship_ids=ids))

    def list_own(self, user: Record) -> List[Record]:
        return self.present(self._query(user_id=user["id"]))

    def get_for(self, application_id: str, user: Record) -> Record:
        """One application, provided the user may see it."""
        application = self.get(application_id)
        if not (self._is_applicant(application, user) or self._is_reviewer(application, user)):
            raise PermissionDeniedError("You do not have access to this application")
        return self.present([application], with_user=True)[0]

    def check(self, user: Record, internship_id: str) -> dict:
        application = self.find_existing(user["id"], internship_id)
        if application is None:
            return {"has_applied": False}
        return {
            "has_applied": True,
            "application_id": application["id"],
            "status": application["status"],
            "applied_at": application.get("created_at"),
            "updated_at": application.get("updated_at"),
        }

    def debug(self, user: Record) -> dict:
        """The user's applications per store, queried independently."""
        primary_records: List[Record] = []
        document_records: List[Record] = []
        try:
            with get_db_session() as db:
                rows = db.execute(
                    select(Application).where(Application.user_id == str(user["id"]))
                ).scalars().all()
                primary_records = [_normalize(row_to_record(r)) for r in rows]
        except PRIMARY_ERRORS as e:
            logger.warning("Primary store unavailable for application debug: %s", e)
        try:
            docs = self.collection.find(ref_filter("userId", user["id"]))
            document_records = [_normalize(document_to_record(d)) for d in docs]
        except DOCUMENT_ERRORS as e:
            logger.warning("Document store unavailable for application debug: %s", e)

        merged = merge_records(primary_records, document_records)
        return {
            "user_email": user["email"],
            "primary_applications": self.present(sort_records(primary_records)),
            "document_applications": self.present(sort_records(document_records)),
            "total_applications": len(merged),
        }

    # ------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------

    def create(self, user: Record, data: dict) -> Record:
        if not is_student(user):
            raise PermissionDeniedError("Only students can apply to internships")
        internship_id = data.get("internship_id")
        if not internship_id:
            raise ValidationError("Internship ID is required")

        internship = self.internships.get(internship_id)
        if internship["status"] != "open":
            raise ValidationError("This internship is not accepting applications")
        if deadline_passed(internship):
            raise ValidationError("The application deadline has passed")
        if self.find_existing(user["id"], internship["id"]):
            raise ValidationError("You have already applied to this internship")

        now = datetime.utcnow()
        record = {
            "id": new_id(),
            "user_id": str(user["id"]),
            "internship_id": internship["id"],
            "status": "pending",
            "cover_letter": data.get("cover_letter"),
            "resume_url": data.get("resume_url"),
            "answers": data.get("answers"),
            "created_at": now,
            "updated_at": now,
        }

        def primary():
            try:
                with get_db_session() as db:
                    db.add(Application(**record))
            except IntegrityError as e:
                raise ValidationError("You have already applied to this internship") from e
            return record

        def fallback():
            try:
                return insert_document(self.collection, record)
            except DuplicateKeyError as e:
                raise ValidationError("You have already applied to this internship") from e

        application = write_with_fallback(primary, fallback, "application")
        logger.info("User %s applied to internship %s", user["id"], internship["id"])

        owner_id = self._owner_of(application)
        if owner_id:
            get_notification_service().notify(
                owner_id,
                title="New application",
                message=f"{user.get('name') or user['email']} applied to {internship['title']}.",
                type="application",
                link=f"/applications/{application['id']}",
            )
        return self.present([application])[0]

    def update_status(self, application_id: str, status: str, actor: Record) -> Record:
        application = self.get(application_id)
        reviewer = self._is_reviewer(application, actor)
        applicant = self._is_applicant(application, actor)

        if not (reviewer or applicant):
            raise PermissionDeniedError("You do not have access to this application")
        if status in REVIEWER_STATUSES and not reviewer:
            raise PermissionDeniedError("Only the company reviewing this application can set that status")
        if status in APPLICANT_STATUSES and not applicant:
            raise PermissionDeniedError("Only the applicant can withdraw an application")
        ensure_transition("application", APPLICATION_TRANSITIONS, application["status"], status)

        changes = {"status": status, "updated_at": datetime.utcnow()}

        def primary():
            with get_db_session() as db:
                return db.execute(
                    update(Application).where(Application.id == application["id"]).values(**changes)
                ).rowcount

        def fallback():
            return document_update(self.collection, application["id"], changes)

        if not write_with_fallback(primary, fallback, "application status"):
            raise NotFoundError("Application not found")
        application.update(changes)
        logger.info("Application %s moved to %s", application["id"], status)

        presented = self.present([application], with_user=True)[0]
        title = presented["internship_title"] or "an internship"
        if status == "withdrawn":
            recipient = self._owner_of(application)
            message = f"An applicant withdrew their application to {title}."
        else:
            recipient = application["user_id"]
            message = f"Your application to {title} is now {status}."
        if recipient:
            get_notification_service().notify(
                recipient,
                title="Application status updated",
                message=message,
                type="application",
                link=f"/applications/{application['id']}",
            )
        return presented

    def withdraw(self, application_id: str, user: Record) -> Record:
        return self.update_status(application_id, "withdrawn", user)


def get_application_service() -> ApplicationService:
    return ApplicationService()
