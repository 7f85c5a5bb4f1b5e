"""
Company creation, moderation, listing and favorites.
"""

from datetime import datetime

from bson import ObjectId

from internhub.db.mongodb import COLLECTIONS

from conftest import signup


def test_admin_creates_pending_company(client, admin):
    headers, user = admin
    response = client.post("/api/companies", json={"name": "Acme"}, headers=headers)
    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "pending"
    assert body["owner_id"] == user["id"]


def test_admin_cannot_own_two_companies(client, admin):
    headers, _ = admin
    assert client.post("/api/companies", json={"name": "Acme"}, headers=headers).status_code == 201
    assert client.post("/api/companies", json={"name": "Acme 2"}, headers=headers).status_code == 409


def test_student_cannot_create_company(client, student):
    headers, _ = student
    assert client.post("/api/companies", json={"name": "Acme"}, headers=headers).status_code == 403


def test_superadmin_creates_company_for_an_admin(client, admin, superadmin):
    _, admin_user = admin
    super_headers, _ = superadmin
    response = client.post("/api/companies", json={"name": "Acme", "owner_id": admin_user["id"]},
                           headers=super_headers)
    assert response.status_code == 201
    assert response.json()["owner_id"] == admin_user["id"]


def test_company_approval_notifies_owner(client, admin, company):
    headers, _ = admin
    assert company["status"] == "approved"
    notifications = client.get("/api/notifications", headers=headers).json()
    assert any("approved" in n["message"] for n in notifications)


def test_invalid_company_transition_is_a_conflict(client, superadmin, company):
    super_headers, _ = superadmin
    response = client.patch(f"/api/companies/{company['id']}/status",
                            json={"status": "rejected"}, headers=super_headers)
    assert response.status_code == 409
    assert "approved" in response.json()["detail"]


def test_suspend_and_reinstate(client, superadmin, company):
    super_headers, _ = superadmin
    url = f"/api/companies/{company['id']}/status"
    assert client.patch(url, json={"status": "suspended"}, headers=super_headers).json()["status"] == "suspended"
    assert client.patch(url, json={"status": "approved"}, headers=super_headers).json()["status"] == "approved"


def test_only_superadmin_moderates(client, admin, company):
    headers, _ = admin
    response = client.patch(f"/api/companies/{company['id']}/status",
                            json={"status": "suspended"}, headers=headers)
    assert response.status_code == 403


def test_get_unknown_company(client):
    assert client.get(f"/api/companies/{ObjectId()}").status_code == 404


def test_listing_hides_suspended_companies_from_non_superadmins(client, superadmin, company):
    super_headers, _ = superadmin
    client.patch(f"/api/companies/{company['id']}/status",
                 json={"status": "suspended"}, headers=super_headers)

    assert client.get("/api/companies").json() == []
    listed = client.get("/api/companies", headers=super_headers).json()
    assert [c["id"] for c in listed] == [company["id"]]


def test_listing_filters(client, company):
    assert len(client.get("/api/companies", params={"search": "enterprise"}).json()) == 1
    assert len(client.get("/api/companies", params={"industry": "tech"}).json()) == 1
    assert client.get("/api/companies", params={"location": "Chicago"}).json() == []


def test_internship_count_spans_both_stores(client, mongo_db, company, internship):
    mongo_db[COLLECTIONS["internships"]].insert_one({
        "_id": ObjectId(),
        "title": "Legacy Intern",
        "description": "Old posting",
        "companyId": ObjectId(company["id"]),
        "location": "Remote",
        "duration": 8,
        "status": "open",
        "createdAt": datetime.utcnow(),
    })
    listed = client.get("/api/companies").json()
    assert listed[0]["internship_count"] == 2


def test_legacy_companies_are_listed_when_primary_is_empty(client, mongo_db):
    mongo_db[COLLECTIONS["companies"]].insert_one({
        "_id": ObjectId(),
        "name": "Legacy Co",
        "ownerId": "000000000000000000000001",
        "createdAt": datetime.utcnow(),
    })
    listed = client.get("/api/companies").json()
    assert [c["name"] for c in listed] == ["Legacy Co"]
    assert listed[0]["status"] == "approved"


def test_toggle_favorite(client, company):
    headers, _ = signup(client, "fan@example.com")
    url = f"/api/companies/{company['id']}/favorite"

    first = client.post(url, headers=headers).json()
    assert first["active"] is True
    assert client.get("/api/companies", headers=headers).json()[0]["is_favorite"] is True

    second = client.post(url, headers=headers).json()
    assert second["active"] is False
    assert client.get("/api/companies", headers=headers).json()[0]["is_favorite"] is False


def test_favorite_unknown_company(client, student):
    headers, _ = student
    assert client.post(f"/api/companies/{ObjectId()}/favorite", headers=headers).status_code == 404
