"""Tests for the HTTP surface."""
import pytest


@pytest.fixture
def team(client, auth, users):
    """Group created by sam over HTTP; alice and bob join."""
    resp = client.post("/groups", json={"name": "team"}, headers=auth(users["sam"]))
    assert resp.status_code == 201
    gid = resp.json()["id"]
    for name in ("alice", "bob"):
        assert client.post(f"/groups/{gid}/join", headers=auth(users[name])).status_code == 200
    return gid


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_requires_bearer_token(client, users):
    resp = client.get("/messages/unread/count")
    assert resp.status_code in (401, 403)

    resp = client.get("/messages/unread/count", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401


def test_group_scenario(client, auth, users, team):
    resp = client.post("/messages", json={"group_id": team, "content": "hello"}, headers=auth(users["sam"]))
    assert resp.status_code == 201
    m1 = resp.json()["message_id"]

    receipts = client.get(f"/messages/{m1}/receipts", headers=auth(users["sam"])).json()
    assert {(r["recipient_id"], r["is_read"]) for r in receipts} == {
        (users["alice"], False),
        (users["bob"], False),
    }

    resp = client.post(f"/messages/{m1}/read", headers=auth(users["alice"]))
    assert resp.status_code == 200
    body = resp.json()
    assert body["is_read"] is True
    assert body["read_at"] is not None

    again = client.post(f"/messages/{m1}/read", headers=auth(users["alice"])).json()
    assert again["read_at"] == body["read_at"]

    resp = client.post(f"/messages/{m1}/read", headers=auth(users["carol"]))
    assert resp.status_code == 404
    assert resp.json()["error"] == "StatusNotFound"


def test_cannot_mark_another_recipients_copy(client, auth, users, team):
    m1 = client.post(
        "/messages", json={"group_id": team, "content": "hello"}, headers=auth(users["sam"])
    ).json()["message_id"]

    resp = client.post(
        f"/messages/{m1}/read",
        params={"recipient_id": users["alice"]},
        headers=auth(users["bob"]),
    )
    assert resp.status_code == 404
    assert resp.json() == {"error": "StatusNotFound", "detail": "Status not found"}

    assert client.get("/messages/unread/count", headers=auth(users["alice"])).json() == {"unread": 1}

    resp = client.post(
        f"/messages/{m1}/read",
        params={"recipient_id": users["alice"]},
        headers=auth(users["alice"]),
    )
    assert resp.status_code == 200
    assert resp.json()["recipient_id"] == users["alice"]


def test_list_group_messages(client, auth, users, team):
    client.post("/messages", json={"group_id": team, "content": "first"}, headers=auth(users["sam"]))
    client.post("/messages", json={"group_id": team, "content": "second"}, headers=auth(users["bob"]))

    resp = client.get("/messages", params={"group_id": team}, headers=auth(users["alice"]))
    assert resp.status_code == 200
    items = resp.json()

    assert [m["content"] for m in items] == ["first", "second"]
    assert items[0]["sender"]["username"] == "sam"
    assert "password_hash" not in items[0]["sender"]
    assert "email" not in items[0]["sender"]
    assert items[0]["is_read"] is False

    own = client.get("/messages", params={"group_id": team}, headers=auth(users["sam"])).json()
    assert own[0]["is_read"] is None


def test_non_member_cannot_read_group(client, auth, users, team):
    resp = client.get("/messages", params={"group_id": team}, headers=auth(users["carol"]))
    assert resp.status_code == 403
    assert resp.json() == {"error": "NotAMember", "detail": "Not a member of this group"}


def test_direct_messages_and_unread_count(client, auth, users):
    resp = client.post(
        "/messages",
        json={"receiver_id": users["bob"], "content": "hey\nhow are you?"},
        headers=auth(users["alice"]),
    )
    assert resp.status_code == 201
    mid = resp.json()["message_id"]

    assert client.get("/messages/unread/count", headers=auth(users["bob"])).json() == {"unread": 1}

    thread = client.get("/messages", params={"receiver_id": users["alice"]}, headers=auth(users["bob"])).json()
    assert [m["id"] for m in thread] == [mid]
    assert thread[0]["receiver_id"] == users["bob"]

    client.post(f"/messages/{mid}/read", headers=auth(users["bob"]))
    assert client.get("/messages/unread/count", headers=auth(users["bob"])).json() == {"unread": 0}


@pytest.mark.parametrize("payload", [
    {"content": "nowhere"},
    {"group_id": "g", "receiver_id": "u", "content": "everywhere"},
])
def test_invalid_destination(client, auth, users, payload):
    resp = client.post("/messages", json=payload, headers=auth(users["alice"]))
    assert resp.status_code == 400
    assert resp.json()["error"] == "InvalidDestination"


def test_self_message(client, auth, users):
    resp = client.post(
        "/messages",
        json={"receiver_id": users["alice"], "content": "me"},
        headers=auth(users["alice"]),
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "SelfMessageDisallowed"


@pytest.mark.parametrize("content", ["", "   ", "bad\x00byte", "bell\x07"])
def test_content_is_sanitized(client, auth, users, content):
    resp = client.post(
        "/messages",
        json={"receiver_id": users["bob"], "content": content},
        headers=auth(users["alice"]),
    )
    assert resp.status_code == 422


def test_delete_message(client, auth, users, team):
    mid = client.post(
        "/messages", json={"group_id": team, "content": "typo"}, headers=auth(users["sam"])
    ).json()["message_id"]

    resp = client.delete(f"/messages/{mid}", headers=auth(users["alice"]))
    assert resp.status_code == 403
    assert resp.json()["error"] == "NotMessageSender"

    resp = client.delete(f"/messages/{mid}", headers=auth(users["sam"]))
    assert resp.status_code == 200
    assert resp.json() == {"status": "deleted"}

    assert client.get("/messages", params={"group_id": team}, headers=auth(users["bob"])).json() == []
    assert client.post(f"/messages/{mid}/read", headers=auth(users["bob"])).status_code == 404
    assert client.delete(f"/messages/{mid}", headers=auth(users["sam"])).status_code == 404


def test_group_membership_endpoints(client, auth, users, team):
    resp = client.post(f"/groups/{team}/join", headers=auth(users["alice"]))
    assert resp.status_code == 409
    assert resp.json()["error"] == "AlreadyMember"

    resp = client.post(f"/groups/{team}/leave", headers=auth(users["bob"]))
    assert resp.status_code == 200
    assert resp.json()["left_at"] is not None

    groups = client.get("/groups", headers=auth(users["bob"])).json()
    assert groups == []

    assert client.post("/groups/nope/join", headers=auth(users["bob"])).status_code == 404


def test_store_failure_is_a_json_error(client, auth, team):
    resp = client.post(f"/groups/{team}/join", headers=auth("ghost-user"))
    assert resp.status_code == 503
    body = resp.json()
    assert body["error"] == "StoreUnavailable"
    assert "ghost-user" not in body["detail"]

    resp = client.post("/groups", json={"name": "orphan"}, headers=auth("ghost-user"))
    assert resp.status_code == 503
    assert resp.json()["error"] == "StoreUnavailable"


def test_delete_group(client, auth, users, team):
    client.post("/messages", json={"group_id": team, "content": "last words"}, headers=auth(users["sam"]))

    resp = client.delete(f"/groups/{team}", headers=auth(users["alice"]))
    assert resp.status_code == 403
    assert resp.json() == {"error": "NotGroupCreator", "detail": "Only the creator can delete this group"}

    resp = client.delete(f"/groups/{team}", headers=auth(users["sam"]))
    assert resp.status_code == 200
    assert resp.json() == {"status": "deleted"}

    assert client.get("/groups", headers=auth(users["alice"])).json() == []
    assert client.get("/messages/unread/count", headers=auth(users["bob"])).json() == {"unread": 0}

    resp = client.delete(f"/groups/{team}", headers=auth(users["sam"]))
    assert resp.status_code == 404
    assert resp.json()["error"] == "GroupNotFound"
