"""
Shared fixtures.

The primary store is in-memory SQLite (the engine picks StaticPool for
it); the document store is mongomock swapped into the MongoDB module's
client singleton for every test.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")

from datetime import datetime

import mongomock
import pytest
from bson import ObjectId
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from internhub.core.security import create_access_token, hash_password
from internhub.db import mongodb, postgres
from internhub.main import app
from internhub.models import Base


@pytest.fixture(autouse=True)
def stores():
    """Fresh SQLite schema and a fresh mongomock database per test."""
    mongodb._client = mongomock.MongoClient()
    mongodb._db = None
    Base.metadata.create_all(bind=postgres.engine)
    yield
    Base.metadata.drop_all(bind=postgres.engine)
    mongodb._client = None
    mongodb._db = None


@pytest.fixture
def mongo_db():
    return mongodb.get_mongo_db()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def primary_down(monkeypatch):
    """Every primary-store session fails as if PostgreSQL were unreachable."""

    def unavailable():
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    monkeypatch.setattr(postgres, "SessionLocal", unavailable)


def auth(token):
    return {"Authorization": f"Bearer {token}"}


def signup(client, email, role="student", name=None, password="secret123"):
    """Register through the API; returns (headers, user)."""
    response = client.post("/api/auth/signup", json={
        "name": name or email.split("@")[0],
        "email": email,
        "password": password,
        "role": role,
    })
    assert response.status_code == 201, response.text
    body = response.json()
    return auth(body["access_token"]), body["user"]


def insert_legacy_user(mongo_db, email, role="user", password="secret123", name="Legacy User"):
    """A user that exists only in the document store, the way old signups were written."""
    _id = ObjectId()
    mongo_db[mongodb.COLLECTIONS["users"]].insert_one({
        "_id": _id,
        "name": name,
        "email": email,
        "password": hash_password(password) if password else None,
        "role": role,
        "createdAt": datetime.utcnow(),
    })
    user = {"id": str(_id), "email": email, "role": role, "name": name}
    token = create_access_token({"sub": user["id"], "email": email, "role": role})
    return auth(token), user


@pytest.fixture
def student(client):
    return signup(client, "student@example.com")


@pytest.fixture
def admin(client):
    return signup(client, "admin@example.com", role="admin")


@pytest.fixture
def superadmin(mongo_db):
    return insert_legacy_user(mongo_db, "root@example.com", role="superadmin", name="Root")


@pytest.fixture
def company(client, admin, superadmin):
    """An approved company owned by the admin fixture."""
    admin_headers, _ = admin
    super_headers, _ = superadmin
    response = client.post("/api/companies", json={
        "name": "TechCorp",
        "description": "Enterprise software",
        "industry": "Technology",
        "location": "New York, NY",
    }, headers=admin_headers)
    assert response.status_code == 201, response.text
    company_id = response.json()["id"]
    response = client.patch(f"/api/companies/{company_id}/status",
                            json={"status": "approved"}, headers=super_headers)
    assert response.status_code == 200, response.text
    return response.json()


def internship_payload(company_id, **overrides):
    payload = {
        "title": "Backend Intern",
        "description": "Build APIs in Python",
        "company_id": company_id,
        "location": "New York, NY",
        "location_type": "remote",
        "duration": 12,
        "stipend": 2000,
        "skills": ["Python", "SQL"],
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def internship(client, admin, company):
    admin_headers, _ = admin
    response = client.post("/api/internships", json=internship_payload(company["id"]),
                           headers=admin_headers)
    assert response.status_code == 201, response.text
    return response.json()
