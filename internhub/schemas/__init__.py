"""
Schemas module - Request/Response schemas for API endpoints.

Schemas are the API contract (what clients send/receive); store records
are plain dicts produced by internhub.services.dual_store.
"""
