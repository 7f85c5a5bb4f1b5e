from internhub.db.mongodb import COLLECTIONS

from conftest import signup


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["postgres"] == "connected"


def test_store_check_counts_each_store(client, mongo_db):
    signup(client, "counted@example.com")
    mongo_db[COLLECTIONS["users"]].insert_one({"email": "doc@example.com"})
    mongo_db[COLLECTIONS["users"]].insert_one({"email": "doc2@example.com"})

    body = client.get("/api/system/test-db").json()
    assert body["primary"] == {"success": True, "error": None, "user_count": 1, "application_count": 0}
    assert body["document"]["success"] is True
    assert body["document"]["user_count"] == 2
    assert body["database_url"] == "Set"


def test_store_check_reports_primary_failure(client, primary_down):
    body = client.get("/api/system/test-db").json()
    assert body["primary"]["success"] is False
    assert "connection refused" in body["primary"]["error"]
    assert body["document"]["success"] is True


def test_init_creates_collections(client, mongo_db):
    assert client.post("/api/system/init").status_code == 200
    assert set(COLLECTIONS.values()) <= set(mongo_db.list_collection_names())


def test_seed_is_idempotent(client, mongo_db):
    first = client.post("/api/system/seed").json()
    assert first["companies_created"] == 1
    assert first["internships_created"] == 2

    second = client.post("/api/system/seed").json()
    assert second["companies_created"] == 0
    assert second["internships_created"] == 0
    assert mongo_db[COLLECTIONS["users"]].count_documents({}) == 3
    assert mongo_db[COLLECTIONS["applications"]].count_documents({}) == 1


def test_seeded_data_is_served_from_document_store(client):
    client.post("/api/system/seed")
    internships = client.get("/api/internships").json()
    assert {i["company"] for i in internships} == {"TechCorp Solutions"}

    response = client.post("/api/auth/login", json={"email": "student@internhub.dev", "password": "password123"})
    assert response.status_code == 200
    headers = {"Authorization": f"Bearer {response.json()['access_token']}"}
    applications = client.get("/api/applications", headers=headers).json()
    assert [a["internship_title"] for a in applications] == ["Frontend Developer Intern"]


def test_resources_by_category(client):
    client.post("/api/system/seed")
    assert len(client.get("/api/resources").json()) == 1
    assert len(client.get("/api/resources", params={"category": "career"}).json()) == 1
    assert client.get("/api/resources", params={"category": "finance"}).json() == []
