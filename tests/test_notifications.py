"""
Notifications are always merged from both stores; marking them read
touches both stores.
"""

from datetime import datetime, timedelta
from unittest.mock import MagicMock

from bson import ObjectId
from pymongo.errors import ServerSelectionTimeoutError

from internhub.db.mongodb import COLLECTIONS
from internhub.services.notification_service import NotificationService, get_notification_service


def insert_document_notification(mongo_db, user_id, title, created_at, _id=None, read=False):
    _id = _id or ObjectId()
    mongo_db[COLLECTIONS["notifications"]].insert_one({
        "_id": _id,
        "userId": ObjectId(user_id),
        "title": title,
        "message": f"{title} message",
        "type": "info",
        "read": read,
        "createdAt": created_at,
    })
    return str(_id)


def test_list_merges_both_stores_newest_first(client, mongo_db, student):
    headers, user = student
    service = get_notification_service()
    service.notify(user["id"], "Primary", "from the primary store")
    insert_document_notification(mongo_db, user["id"], "Older", datetime.utcnow() - timedelta(days=2))
    insert_document_notification(mongo_db, user["id"], "Newer", datetime.utcnow() + timedelta(minutes=1))

    titles = [n["title"] for n in client.get("/api/notifications", headers=headers).json()]
    assert titles == ["Newer", "Primary", "Older"]


def test_same_notification_in_both_stores_is_listed_once(client, mongo_db, student):
    headers, user = student
    created = get_notification_service().notify(user["id"], "Twice", "stored in both")
    insert_document_notification(mongo_db, user["id"], "Twice", created["created_at"], _id=ObjectId(created["id"]))

    listed = client.get("/api/notifications", headers=headers).json()
    assert [n["id"] for n in listed] == [created["id"]]


def test_other_users_notifications_are_not_listed(client, student):
    headers, _ = student
    get_notification_service().notify(str(ObjectId()), "Not yours", "someone else")
    assert client.get("/api/notifications", headers=headers).json() == []


def test_mark_selected_notifications_read(client, mongo_db, student):
    headers, user = student
    primary = get_notification_service().notify(user["id"], "Primary", "p")
    document_id = insert_document_notification(mongo_db, user["id"], "Document", datetime.utcnow())
    untouched = get_notification_service().notify(user["id"], "Untouched", "u")

    response = client.patch("/api/notifications", json={"notification_ids": [primary["id"], document_id]},
                            headers=headers)
    assert response.status_code == 200
    assert response.json()["message"] == "Marked 2 notifications as read"

    read = {n["id"]: n["read"] for n in client.get("/api/notifications", headers=headers).json()}
    assert read == {primary["id"]: True, document_id: True, untouched["id"]: False}
    assert mongo_db[COLLECTIONS["notifications"]].find_one({"_id": ObjectId(document_id)})["read"] is True


def test_mark_all_read(client, mongo_db, student):
    headers, user = student
    get_notification_service().notify(user["id"], "Primary", "p")
    insert_document_notification(mongo_db, user["id"], "Document", datetime.utcnow())
    insert_document_notification(mongo_db, user["id"], "Already read", datetime.utcnow(), read=True)

    response = client.patch("/api/notifications", json={}, headers=headers)
    assert response.json()["message"] == "Marked 2 notifications as read"
    assert all(n["read"] for n in client.get("/api/notifications", headers=headers).json())


def test_mark_all_read_without_body(client, mongo_db, student):
    headers, user = student
    get_notification_service().notify(user["id"], "Primary", "p")
    insert_document_notification(mongo_db, user["id"], "Document", datetime.utcnow())

    response = client.patch("/api/notifications", headers=headers)
    assert response.status_code == 200
    assert response.json()["message"] == "Marked 2 notifications as read"


def test_marking_read_twice_changes_nothing(client, student):
    headers, user = student
    get_notification_service().notify(user["id"], "Once", "o")
    client.patch("/api/notifications", json={}, headers=headers)
    response = client.patch("/api/notifications", json={}, headers=headers)
    assert response.json()["message"] == "Marked 0 notifications as read"


def test_notify_falls_back_to_document_store(mongo_db, primary_down):
    user_id = str(ObjectId())
    created = get_notification_service().notify(user_id, "Fallback", "primary is down")
    doc = mongo_db[COLLECTIONS["notifications"]].find_one({"_id": ObjectId(created["id"])})
    assert doc["title"] == "Fallback"
    assert doc["read"] is False


def test_notify_drops_notification_when_both_stores_fail(primary_down):
    service = NotificationService()
    service.collection = MagicMock()
    service.collection.insert_one.side_effect = ServerSelectionTimeoutError("no servers")
    assert service.notify(str(ObjectId()), "Lost", "nowhere to go") is None
