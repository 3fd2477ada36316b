import pytest

from app.core.errors import ValidationFailed
from app.models import TimelineEntry
from app.services import timeline
from tests.conftest import auth


def _comment(client, email, issue_id, text="Still broken this morning"):
    return client.post("/comments", json={"issue_id": issue_id, "text": text}, headers=auth(email))


def test_add_and_list_comments(client, citizen, other_citizen, report):
    issue = report(citizen.email)
    r = _comment(client, other_citizen.email, issue["id"], "First")
    assert r.status_code == 201
    assert r.json()["user_email"] == other_citizen.email
    _comment(client, citizen.email, issue["id"], "Second")

    r = client.get(f"/comments/{issue['id']}")
    assert r.status_code == 200
    assert [c["text"] for c in r.json()] == ["First", "Second"]


def test_comment_on_missing_issue(client, citizen):
    r = _comment(client, citizen.email, 999)
    assert r.status_code == 404
    assert r.json()["message"] == "Issue not found"


def test_comment_on_hidden_issue(client, citizen, other_citizen, admin, report):
    issue = report(citizen.email)
    client.patch(f"/issues/{issue['id']}/visibility", json={"is_hidden": True}, headers=auth(admin.email))
    assert _comment(client, other_citizen.email, issue["id"]).status_code == 404
    assert _comment(client, citizen.email, issue["id"]).status_code == 201


def test_empty_comment(client, citizen, report):
    issue = report(citizen.email)
    assert _comment(client, citizen.email, issue["id"], "").status_code == 400


def test_blank_comment_is_rejected(client, citizen, report):
    issue = report(citizen.email)
    r = _comment(client, citizen.email, issue["id"], "   ")
    assert r.status_code == 400
    assert r.json() == {"message": "Comment text cannot be empty", "error": "validation_error"}
    assert client.get(f"/comments/{issue['id']}").json() == []


def test_blocked_user_cannot_comment(client, citizen, make_user, report):
    issue = report(citizen.email)
    blocked = make_user("blocked@example.com", is_blocked=True)
    r = _comment(client, blocked.email, issue["id"])
    assert r.status_code == 403


def test_delete_comment(client, citizen, other_citizen, admin, report):
    issue = report(citizen.email)
    first = _comment(client, other_citizen.email, issue["id"]).json()
    second = _comment(client, other_citizen.email, issue["id"]).json()

    r = client.delete(f"/comments/{first['id']}", headers=auth(citizen.email))
    assert r.status_code == 403

    assert client.delete(f"/comments/{first['id']}", headers=auth(other_citizen.email)).json() == {"ok": True}
    assert client.delete(f"/comments/{second['id']}", headers=auth(admin.email)).status_code == 200
    assert client.get(f"/comments/{issue['id']}").json() == []

    assert client.delete(f"/comments/{first['id']}", headers=auth(admin.email)).status_code == 404


def test_timeline_newest_first(client, citizen, staff, admin, report):
    issue = report(citizen.email)
    client.patch(f"/issues/assign/{issue['id']}", json={"staff_email": staff.email}, headers=auth(admin.email))
    client.patch(f"/issues/{issue['id']}/status", json={"status": "resolved"}, headers=auth(staff.email))

    entries = client.get(f"/timeline/{issue['id']}").json()
    assert [e["status"] for e in entries] == ["resolved", "in-progress", "pending"]
    assert all(e["issue_id"] == str(issue["id"]) for e in entries)


def test_timeline_for_unknown_issue_is_empty(client, db):
    assert client.get("/timeline/31337").json() == []


def test_append_rejects_incomplete_entries(db):
    with pytest.raises(ValidationFailed):
        timeline.append(db, 1, "pending", "", "a@x")
    with pytest.raises(ValidationFailed):
        timeline.append(db, None, "pending", "Issue reported", "a@x")
    with pytest.raises(ValidationFailed):
        timeline.append(db, 1, "pending", "Issue reported", "")
    assert db.query(TimelineEntry).count() == 0
