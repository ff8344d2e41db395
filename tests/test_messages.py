"""Conversations between users."""

from gigit.db.database import execute_raw_sql


def _user_id(email):
    return execute_raw_sql("SELECT id FROM users WHERE email = :e", {"e": email})[0]["id"]


def test_send_message_creates_conversation_and_notifies(client, business, worker):
    receiver = _user_id("worker@test.com")

    resp = client.post("/api/messages", headers=business["headers"],
                       json={"receiver_id": receiver, "content": "Are you free Monday?"})

    assert resp.status_code == 201
    body = resp.json()
    assert body["content"] == "Are you free Monday?"
    assert body["is_read"] is False
    assert body["sender"]["name"] == "Acme Builders"

    notes = client.get("/api/notifications", headers=worker["headers"]).json()["notifications"]
    assert notes[0]["type"] == "MESSAGE"
    assert notes[0]["title"] == "New Message"
    assert notes[0]["link"] == "/messages"


def test_send_message_to_worker_profile_id(client, business, worker):
    resp = client.post("/api/messages", headers=business["headers"],
                       json={"receiver_id": worker["profile"]["id"], "content": "Hello"})
    assert resp.status_code == 201

    conversations = client.get("/api/messages", headers=worker["headers"]).json()
    assert conversations[0]["other_user"]["email"] == "hiring@acme.com"


def test_second_message_reuses_conversation(client, business, worker):
    receiver = _user_id("worker@test.com")
    client.post("/api/messages", headers=business["headers"], json={"receiver_id": receiver, "content": "One"})
    client.post("/api/messages", headers=worker["headers"],
                json={"receiver_id": _user_id("hiring@acme.com"), "content": "Two"})

    assert len(execute_raw_sql("SELECT id FROM conversations")) == 1
    assert len(execute_raw_sql("SELECT id FROM messages")) == 2


def test_send_message_validation(client, business, worker):
    me = _user_id("hiring@acme.com")
    assert client.post("/api/messages", headers=business["headers"],
                       json={"receiver_id": me, "content": "Hi me"}).status_code == 400
    assert client.post("/api/messages", headers=business["headers"],
                       json={"receiver_id": "ghost", "content": "Boo"}).status_code == 404
    assert client.post("/api/messages", headers=business["headers"],
                       json={"receiver_id": _user_id("worker@test.com"), "content": "   "}).status_code == 422
    assert client.post("/api/messages", headers=business["headers"],
                       json={"content": "No receiver"}).status_code == 422


def test_conversation_list_unread_counts(client, business, worker):
    receiver = _user_id("worker@test.com")
    for text in ("First", "Second"):
        client.post("/api/messages", headers=business["headers"], json={"receiver_id": receiver, "content": text})

    worker_view = client.get("/api/messages", headers=worker["headers"]).json()
    business_view = client.get("/api/messages", headers=business["headers"]).json()

    assert worker_view[0]["unread_count"] == 2
    assert worker_view[0]["last_message"]["content"] == "Second"
    # own messages never count as unread
    assert business_view[0]["unread_count"] == 0


def test_get_conversation_marks_read(client, business, worker):
    business_user = _user_id("hiring@acme.com")
    client.post("/api/messages", headers=business["headers"],
                json={"receiver_id": _user_id("worker@test.com"), "content": "First"})
    client.post("/api/messages", headers=worker["headers"], json={"receiver_id": business_user, "content": "Reply"})

    resp = client.get(f"/api/messages/{business_user}", headers=worker["headers"])

    assert resp.status_code == 200
    body = resp.json()
    assert [m["content"] for m in body["messages"]] == ["First", "Reply"]
    assert body["other_user"]["business_profile"]["company_name"] == "Acme Builders"
    assert body["other_user"]["worker_profile"] is None
    assert client.get("/api/messages", headers=worker["headers"]).json()[0]["unread_count"] == 0
    # the worker's own reply stays unread for the business
    assert client.get("/api/messages", headers=business["headers"]).json()[0]["unread_count"] == 1


def test_get_conversation_none_yet(client, business, worker):
    resp = client.get(f"/api/messages/{_user_id('worker@test.com')}", headers=business["headers"])
    assert resp.status_code == 200
    assert resp.json()["messages"] == []
    assert resp.json()["conversation_id"] is None
    assert resp.json()["other_user"]["worker_profile"]["first_name"] == "Jane"


def test_get_conversation_unknown_user(client, business):
    assert client.get("/api/messages/nobody", headers=business["headers"]).status_code == 404


def test_get_conversation_pagination(client, business, worker):
    receiver = _user_id("worker@test.com")
    for n in range(5):
        client.post("/api/messages", headers=business["headers"], json={"receiver_id": receiver, "content": f"m{n}"})

    resp = client.get(f"/api/messages/{_user_id('hiring@acme.com')}", headers=worker["headers"],
                      params={"page": 2, "limit": 2})

    assert [m["content"] for m in resp.json()["messages"]] == ["m2", "m3"]
