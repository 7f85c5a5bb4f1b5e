from bson import ObjectId

from internhub.db.mongodb import COLLECTIONS

from conftest import insert_legacy_user


def test_profile_missing_until_first_save(client, student):
    headers, _ = student
    assert client.get("/api/profile", headers=headers).status_code == 404


def test_first_save_creates_profile(client, student):
    headers, user = student
    response = client.put("/api/profile", json={"bio": "Hello", "skills": ["Python"]}, headers=headers)
    assert response.status_code == 200
    body = response.json()
    assert body["user_id"] == user["id"]
    assert body["skills"] == ["Python"]
    assert body["education"] == []

    assert client.get("/api/profile", headers=headers).json()["bio"] == "Hello"


def test_partial_update_keeps_other_fields(client, student):
    headers, _ = student
    client.put("/api/profile", json={"bio": "Hello", "location": "Austin"}, headers=headers)
    body = client.put("/api/profile", json={"location": "Denver"}, headers=headers).json()
    assert body["bio"] == "Hello"
    assert body["location"] == "Denver"


def test_legacy_profile_is_updated_in_place(client, mongo_db):
    headers, user = insert_legacy_user(mongo_db, "legacy@example.com")
    profile_id = ObjectId()
    mongo_db[COLLECTIONS["profiles"]].insert_one({
        "_id": profile_id, "userId": ObjectId(user["id"]), "bio": "Old bio", "githubProfile": "gh/old",
    })

    body = client.put("/api/profile", json={"bio": "New bio"}, headers=headers).json()
    assert body["id"] == str(profile_id)
    assert body["bio"] == "New bio"
    assert body["github_profile"] == "gh/old"
    assert body["skills"] == []
    assert mongo_db[COLLECTIONS["profiles"]].count_documents({}) == 1


def test_get_me_returns_profile(client, student):
    headers, _ = student
    client.put("/api/profile", json={"bio": "Hello"}, headers=headers)
    assert client.get("/api/user", headers=headers).json()["profile"]["bio"] == "Hello"
