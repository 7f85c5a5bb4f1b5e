"""
MongoDB Connection Utility

MongoDB holds the document-store copy of the marketplace data:
- Legacy records written by the raw driver (signups, seed data)
- Records written while the primary store was unavailable

Collection names match the legacy document layout (one collection per
entity, PascalCase names, camelCase fields).
"""
from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.database import Database
from pymongo.collection import Collection
import logging

from internhub.core.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

# Global client (connection pooling handled internally by pymongo)
_client: MongoClient = None
_db: Database = None


def get_mongo_client() -> MongoClient:
    """Get or create MongoDB client (singleton pattern)"""
    global _client
    if _client is None:
        _client = MongoClient(settings.mongodb_uri, serverSelectionTimeoutMS=5000)
    return _client


def get_mongo_db() -> Database:
    """Get the marketplace database"""
    global _db
    if _db is None:
        client = get_mongo_client()
        _db = client[settings.mongodb_db]
    return _db


def get_collection(name: str) -> Collection:
    """Get a specific collection by its COLLECTIONS value."""
    db = get_mongo_db()
    return db[name]


def test_mongo_connection() -> bool:
    """
    Test if MongoDB is reachable.
    Returns True if connection successful, False otherwise.
    """
    try:
        client = get_mongo_client()
        # ping command checks connection
        client.admin.command('ping')
        return True
    except Exception as e:
        logger.warning("MongoDB connection failed: %s", e)
        return False


# Collection name constants (avoid typos)
COLLECTIONS = {
    "users": "User",
    "profiles": "Profile",
    "companies": "Company",
    "internships": "Internship",
    "applications": "Application",
    "notifications": "Notification",
    "resources": "Resource",
    "bookmarks": "Bookmark",
    "favorites": "FavoriteCompany",
}


def init_mongo_indexes():
    """
    Ensure collections and indexes exist.
    Call this once during app startup.
    """
    db = get_mongo_db()

    existing = set(db.list_collection_names())
    for name in COLLECTIONS.values():
        if name not in existing:
            db.create_collection(name)
            logger.info("Created collection: %s", name)

    db[COLLECTIONS["users"]].create_index("email", unique=True)
    db[COLLECTIONS["profiles"]].create_index("userId")
    db[COLLECTIONS["companies"]].create_index("ownerId")
    db[COLLECTIONS["internships"]].create_index([("companyId", ASCENDING), ("status", ASCENDING)])
    db[COLLECTIONS["applications"]].create_index([("userId", ASCENDING), ("internshipId", ASCENDING)])
    db[COLLECTIONS["notifications"]].create_index([("userId", ASCENDING), ("createdAt", DESCENDING)])
    db[COLLECTIONS["bookmarks"]].create_index([("userId", ASCENDING), ("internshipId", ASCENDING)], unique=True)
    db[COLLECTIONS["favorites"]].create_index([("userId", ASCENDING), ("companyId", ASCENDING)], unique=True)

    logger.info("MongoDB indexes created successfully")
