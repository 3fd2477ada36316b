"""User directory routes."""
from app.models import User, UserRole
from tests.conftest import auth


def test_register_creates_citizen(client, db):
    r = client.post("/users", json={"email": "ana@example.com", "name": "Ana", "role": "admin", "premium": True})
    assert r.status_code == 200
    body = r.json()
    assert body["message"] == "User created"
    assert body["inserted_id"] is not None
    assert body["user"]["role"] == "citizen"
    assert body["user"]["premium"] is False
    assert body["user"]["name"] == "Ana"


def test_register_is_idempotent(client, db, make_user):
    make_user("ana@example.com", role=UserRole.staff, name="Ana")
    r = client.post("/users", json={"email": "ana@example.com", "name": "Someone else"})
    body = r.json()
    assert body["message"] == "User already exists"
    assert body["inserted_id"] is None
    assert body["user"]["role"] == "staff"
    assert body["user"]["name"] == "Ana"
    assert db.query(User).count() == 1


def test_registered_address_is_the_identity_key(client, db):
    r = client.post("/users", json={"email": "Ana.Lopez@Example.COM", "name": "Ana", "has_password": True})
    assert r.json()["user"]["email"] == "Ana.Lopez@Example.COM"

    r = client.get("/users/Ana.Lopez@Example.COM", headers=auth("Ana.Lopez@Example.COM"))
    assert r.status_code == 200
    assert r.json()["name"] == "Ana"
    assert r.json()["has_password"] is True
    assert [u.email for u in db.query(User).all()] == ["Ana.Lopez@Example.COM"]


def test_register_rejects_bad_email(client, db):
    r = client.post("/users", json={"email": "not-an-email"})
    assert r.status_code == 400
    assert r.json()["error"] == "validation_error"


def test_read_profile_self_or_admin(client, citizen, other_citizen, admin):
    assert client.get(f"/users/{citizen.email}", headers=auth(citizen.email)).status_code == 200
    assert client.get(f"/users/{citizen.email}", headers=auth(admin.email)).status_code == 200
    r = client.get(f"/users/{citizen.email}", headers=auth(other_citizen.email))
    assert r.status_code == 403
    assert r.json()["error"] == "forbidden"


def test_admin_reads_unknown_user_as_null(client, admin):
    r = client.get("/users/ghost@example.com", headers=auth(admin.email))
    assert r.status_code == 200
    assert r.json() is None


def test_list_users_admin_only(client, citizen, admin):
    r = client.get("/users", headers=auth(admin.email))
    assert r.status_code == 200
    assert {u["email"] for u in r.json()} == {citizen.email, admin.email}
    assert client.get("/users", headers=auth(citizen.email)).status_code == 403


def test_change_role(client, citizen, admin):
    r = client.patch(f"/users/role/{citizen.email}", json={"role": "staff"}, headers=auth(admin.email))
    assert r.status_code == 200
    assert r.json()["role"] == "staff"

    r = client.patch(f"/users/role/{citizen.email}", json={"role": "admin"}, headers=auth(citizen.email))
    assert r.status_code == 403

    r = client.patch("/users/role/ghost@example.com", json={"role": "staff"}, headers=auth(admin.email))
    assert r.status_code == 404

    r = client.patch(f"/users/role/{citizen.email}", json={"role": "mayor"}, headers=auth(admin.email))
    assert r.status_code == 400


def test_block_and_unblock(client, citizen, admin):
    r = client.patch(f"/users/block/{citizen.email}", json={"is_blocked": True}, headers=auth(admin.email))
    assert r.json()["is_blocked"] is True

    # reads still work for a blocked account
    assert client.get("/issues", headers=auth(citizen.email)).status_code == 200
    r = client.post("/issues", json={"title": "Loose paving"}, headers=auth(citizen.email))
    assert r.status_code == 403

    client.patch(f"/users/block/{citizen.email}", json={"is_blocked": False}, headers=auth(admin.email))
    r = client.post("/issues", json={"title": "Loose paving"}, headers=auth(citizen.email))
    assert r.status_code == 201


def test_premium_is_self_only_and_sticky(client, citizen, other_citizen):
    r = client.patch(f"/users/premium/{citizen.email}", headers=auth(other_citizen.email))
    assert r.status_code == 403

    r = client.patch(f"/users/premium/{citizen.email}", headers=auth(citizen.email))
    assert r.status_code == 200
    assert r.json()["premium"] is True
    r = client.patch(f"/users/premium/{citizen.email}", headers=auth(citizen.email))
    assert r.json()["premium"] is True


def test_update_profile(client, citizen, other_citizen):
    r = client.patch(
        f"/users/profile/{citizen.email}",
        json={"name": "Cit Izen", "image": "https://img.example/me.png"},
        headers=auth(citizen.email),
    )
    assert r.status_code == 200
    assert r.json()["name"] == "Cit Izen"
    assert r.json()["image"] == "https://img.example/me.png"
    assert r.json()["role"] == "citizen"

    r = client.patch(f"/users/profile/{citizen.email}", json={"name": "X"}, headers=auth(other_citizen.email))
    assert r.status_code == 403
