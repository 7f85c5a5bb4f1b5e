#!/usr/bin/env python3
"""
Sample Data Script

Creates the schema, collections and indexes, then seeds the document
store with a small marketplace. Safe to run more than once.
Usage: python scripts/seed_data.py
"""
import sys
sys.path.insert(0, '.')

from internhub.core.log_config import configure_logging
from internhub.services.system_service import SEED_PASSWORD, initialize_stores, seed_sample_data


def main():
    configure_logging()
    print("=" * 50)
    print("INTERNHUB - SEED DATA")
    print("=" * 50)

    print("\n[1] Initializing stores...")
    initialize_stores()
    print("    ✅ Schema, collections and indexes ready")

    print("\n[2] Seeding sample data...")
    result = seed_sample_data()
    print(f"    ✅ {result['companies_created']} companies, {result['internships_created']} internships created")

    print("\n[3] Sample accounts (password: %s)" % SEED_PASSWORD)
    print("    superadmin@internhub.dev - superadmin")
    print("    admin@techcorp.dev       - company admin")
    print("    student@internhub.dev    - student")

    print("\n" + "=" * 50)
    print("Seeding complete!")
    print("=" * 50)


if __name__ == "__main__":
    main()
