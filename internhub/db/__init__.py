"""
Database module - primary (SQLAlchemy) and document (MongoDB) connections.
"""
from internhub.db.postgres import get_db_session, init_relational_schema, test_postgres_connection
from internhub.db.mongodb import get_collection, get_mongo_db, init_mongo_indexes, test_mongo_connection

__all__ = [
    "get_db_session",
    "init_relational_schema",
    "test_postgres_connection",
    "get_collection",
    "get_mongo_db",
    "init_mongo_indexes",
    "test_mongo_connection"
]
