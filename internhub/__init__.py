"""
InternHub
An internship marketplace API backed by two stores.

Architecture:
- PostgreSQL (SQLAlchemy): primary store for every entity
- MongoDB: document store holding legacy records and fallback writes
- Reads try the primary store first and fall back to (or merge with)
  the document store
"""

__version__ = "1.0.0"
