"""
System Service - store diagnostics, schema setup and sample data.
"""

from datetime import datetime, timedelta
from typing import Optional, Tuple
import logging

from sqlalchemy import func, select
from pymongo.database import Database

from internhub.core.config import get_settings
from internhub.core.security import hash_password
from internhub.db.mongodb import COLLECTIONS, get_mongo_db, init_mongo_indexes
from internhub.db.postgres import get_db_session, init_relational_schema
from internhub.models import Application, User, new_id
from internhub.services.dual_store import (
    DOCUMENT_ERRORS, PRIMARY_ERRORS, Record, insert_document
)

logger = logging.getLogger(__name__)

SEED_PASSWORD = "password123"


def check_primary_store() -> dict:
    """Count users and applications in the primary store."""
    try:
        with get_db_session() as db:
            users = db.execute(select(func.count()).select_from(User)).scalar_one()
            applications = db.execute(select(func.count()).select_from(Application)).scalar_one()
        return {"success": True, "error": None, "user_count": users, "application_count": applications}
    except PRIMARY_ERRORS as e:
        logger.warning("Primary store check failed: %s", e)
        return {"success": False, "error": str(e), "user_count": 0, "application_count": 0}


def check_document_store() -> dict:
    """Count users and applications in the document store."""
    try:
        db = get_mongo_db()
        users = db[COLLECTIONS["users"]].count_documents({})
        applications = db[COLLECTIONS["applications"]].count_documents({})
        return {"success": True, "error": None, "user_count": users, "application_count": applications}
    except DOCUMENT_ERRORS as e:
        logger.warning("Document store check failed: %s", e)
        return {"success": False, "error": str(e), "user_count": 0, "application_count": 0}


def check_stores() -> dict:
    settings = get_settings()
    return {
        "primary": check_primary_store(),
        "document": check_document_store(),
        "database_url": "Set" if settings.database_url else "Not set",
    }


def initialize_stores() -> None:
    """Create the relational schema and the document collections/indexes."""
    init_relational_schema()
    init_mongo_indexes()


# ============================================================
# SAMPLE DATA
# ============================================================

class SampleDataSeeder:
    """
    Writes a small marketplace into the document store: a superadmin, an
    admin with a company, a student with a profile, two internships, one
    application and one resource.

    Every record is looked up by a natural key (email, name, title) first,
    so seeding twice creates nothing the second time.
    """

    def __init__(self, db: Optional[Database] = None):
        self.db = db if db is not None else get_mongo_db()
        self.companies_created = 0
        self.internships_created = 0

    def _ensure(self, collection_key: str, natural_key: dict, record: Record) -> Tuple[str, bool]:
        """Id of the matching document, and whether it was created now."""
        collection = self.db[COLLECTIONS[collection_key]]
        existing = collection.find_one(natural_key, {"_id": 1})
        if existing is not None:
            return str(existing["_id"]), False
        now = datetime.utcnow()
        record = dict(record, id=new_id(), created_at=now, updated_at=now)
        insert_document(collection, record)
        logger.info("Seeded %s %s", collection_key, record["id"])
        return record["id"], True

    def _ensure_user(self, name: str, email: str, role: str) -> str:
        user_id, _ = self._ensure("users", {"email": email}, {
            "name": name,
            "email": email,
            "password": hash_password(SEED_PASSWORD),
            "role": role,
        })
        return user_id

    def run(self) -> dict:
        self._ensure_user("Platform Admin", "superadmin@internhub.dev", "superadmin")
        admin_id = self._ensure_user("Company Admin", "admin@techcorp.dev", "admin")
        student_id = self._ensure_user("Sample Student", "student@internhub.dev", "student")

        self._ensure("profiles", {"userId": student_id}, {
            "user_id": student_id,
            "bio": "Computer science student looking for a summer internship.",
            "location": "New York, NY",
            "skills": ["Python", "SQL", "React"],
            "education": [{"school": "State University", "degree": "BSc Computer Science"}],
            "experience": [],
        })

        company_id, created = self._ensure("companies", {"name": "TechCorp Solutions"}, {
            "name": "TechCorp Solutions",
            "description": "Software development company specializing in enterprise solutions.",
            "logo": "https://techcorp.dev/logo.png",
            "website": "https://techcorp.dev",
            "location": "New York, NY",
            "industry": "Technology",
            "size": "500-1000 employees",
            "owner_id": admin_id,
            "status": "approved",
        })
        if created:
            self.companies_created += 1

        deadline = datetime.utcnow() + timedelta(days=60)
        internship_ids = []
        for title, description, location_type, duration, stipend, skills in (
            ("Frontend Developer Intern",
             "Build modern web applications with React and TypeScript.",
             "onsite", 12, 2500, ["React", "TypeScript", "CSS"]),
            ("Data Science Intern",
             "Analyze large datasets and develop machine learning models.",
             "remote", 24, 3000, ["Python", "Pandas", "SQL"]),
        ):
            internship_id, created = self._ensure("internships", {"title": title}, {
                "title": title,
                "description": description,
                "company_id": company_id,
                "location": "New York, NY",
                "location_type": location_type,
                "duration": duration,
                "stipend": stipend,
                "skills": skills,
                "responsibilities": [],
                "qualifications": [],
                "application_deadline": deadline,
                "status": "open",
            })
            internship_ids.append(internship_id)
            if created:
                self.internships_created += 1

        self._ensure(
            "applications",
            {"userId": student_id, "internshipId": internship_ids[0]},
            {
                "user_id": student_id,
                "internship_id": internship_ids[0],
                "status": "pending",
                "cover_letter": "I would love to join the frontend team.",
            },
        )

        self._ensure("resources", {"title": "Writing a Great Resume"}, {
            "title": "Writing a Great Resume",
            "description": "A step-by-step guide to a resume recruiters read.",
            "category": "career",
            "type": "guide",
            "url": "https://internhub.dev/resources/resume",
            "tags": ["resume", "career"],
            "is_free": True,
            "rating": 4.8,
            "views": 0,
        })

        logger.info(
            "Seed complete: %d companies, %d internships created",
            self.companies_created, self.internships_created
        )
        return {
            "message": "Database seeded successfully",
            "companies_created": self.companies_created,
            "internships_created": self.internships_created,
        }


def seed_sample_data() -> dict:
    return SampleDataSeeder().run()
