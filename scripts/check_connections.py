#!/usr/bin/env python3
"""
Connection Check Script

Run this to verify both stores are reachable and see what each holds.
Usage: python scripts/check_connections.py
"""
import sys
sys.path.insert(0, '.')

from internhub.core.config import get_settings
from internhub.db.postgres import test_postgres_connection
from internhub.db.mongodb import test_mongo_connection
from internhub.services.system_service import check_stores


def main():
    settings = get_settings()
    print("=" * 50)
    print("INTERNHUB - CONNECTION CHECK")
    print("=" * 50)

    # Primary store
    print("\n[1] Testing primary store...")
    if settings.database_url:
        print("    URL: DATABASE_URL (set)")
    else:
        print(f"    URL: postgresql://{settings.postgres_user}:****@{settings.postgres_host}:{settings.postgres_port}/{settings.postgres_db}")
    if test_postgres_connection():
        print("    ✅ PostgreSQL: CONNECTED")
    else:
        print("    ❌ PostgreSQL: FAILED")

    # Document store
    print("\n[2] Testing MongoDB...")
    print(f"    URI: {settings.mongodb_uri}")
    print(f"    Database: {settings.mongodb_db}")
    if test_mongo_connection():
        print("    ✅ MongoDB: CONNECTED")
    else:
        print("    ❌ MongoDB: FAILED")

    # Record counts
    print("\n[3] Record counts...")
    report = check_stores()
    for label, key in (("Primary", "primary"), ("Document", "document")):
        store = report[key]
        if store["success"]:
            print(f"    {label}: {store['user_count']} users, {store['application_count']} applications")
        else:
            print(f"    {label}: unavailable ({store['error']})")

    print("\n" + "=" * 50)
    print("Connection check complete!")
    print("=" * 50)


if __name__ == "__main__":
    main()
