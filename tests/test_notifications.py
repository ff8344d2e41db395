"""Notification inbox."""

import pytest

from gigit.db.database import execute_raw_sql, get_db_session
from gigit.services.notification_service import create_notification


@pytest.fixture
def inbox(register):
    headers = register("inbox@example.com", "WORKER")
    user_id = execute_raw_sql("SELECT id FROM users WHERE email = 'inbox@example.com'")[0]["id"]
    with get_db_session() as db:
        ids = [
            create_notification(db, user_id, "SYSTEM", f"Note {n}", f"Message {n}", None)
            for n in range(3)
        ]
    return {"headers": headers, "ids": ids}


def test_list_newest_first(client, inbox):
    body = client.get("/api/notifications", headers=inbox["headers"]).json()
    assert [n["title"] for n in body["notifications"]] == ["Note 2", "Note 1", "Note 0"]
    assert body["pagination"]["total"] == 3


def test_list_pagination(client, inbox):
    body = client.get("/api/notifications", headers=inbox["headers"], params={"limit": 2, "page": 2}).json()
    assert [n["title"] for n in body["notifications"]] == ["Note 0"]
    assert body["pagination"]["total_pages"] == 2


def test_mark_read_and_count(client, inbox):
    assert client.get("/api/notifications/count", headers=inbox["headers"]).json() == {"count": 3}

    resp = client.put("/api/notifications", headers=inbox["headers"],
                      json={"action": "markRead", "notification_id": inbox["ids"][0]})

    assert resp.status_code == 200
    assert client.get("/api/notifications/count", headers=inbox["headers"]).json() == {"count": 2}
    unread = client.get("/api/notifications", headers=inbox["headers"], params={"unread": True}).json()
    assert {n["title"] for n in unread["notifications"]} == {"Note 1", "Note 2"}


def test_mark_all_read(client, inbox):
    resp = client.put("/api/notifications", headers=inbox["headers"], json={"action": "markAllRead"})
    assert resp.status_code == 200
    assert client.get("/api/notifications/count", headers=inbox["headers"]).json() == {"count": 0}


def test_mark_read_requires_id(client, inbox):
    resp = client.put("/api/notifications", headers=inbox["headers"], json={"action": "markRead"})
    assert resp.status_code == 422


def test_cannot_touch_other_users_notifications(client, inbox, register):
    intruder = register("intruder@example.com", "WORKER")
    target = inbox["ids"][0]

    mark = client.put("/api/notifications", headers=intruder,
                      json={"action": "markRead", "notification_id": target})
    delete = client.delete("/api/notifications", headers=intruder, params={"id": target})

    assert mark.status_code == 404
    assert delete.status_code == 404


def test_delete(client, inbox):
    resp = client.delete("/api/notifications", headers=inbox["headers"], params={"id": inbox["ids"][1]})
    assert resp.status_code == 200
    assert client.get("/api/notifications", headers=inbox["headers"]).json()["pagination"]["total"] == 2
