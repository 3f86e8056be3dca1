from sqlalchemy.exc import SQLAlchemyError

import utils.audit as audit
from models.users import User
from utils.tokenJWT import decode_access_token

NEW_USER = {"name": "Grace", "email": "grace@example.com", "password": "s3cret!", "role": "customer"}


def _assert_no_password(user):
    assert "password" not in user
    assert "password_hash" not in user


def test_register_returns_user_and_token(client, db, settings):
    res = client.post("/api/users/register", json=NEW_USER)
    assert res.status_code == 201
    body = res.json()
    assert body["success"] is True
    assert body["user"]["email"] == "grace@example.com"
    assert body["user"]["role"] == "customer"
    _assert_no_password(body["user"])

    identity = decode_access_token(body["token"], settings)
    assert identity.user_id == body["user"]["id"]
    assert identity.role == "customer"

    stored = db.query(User).one()
    assert stored.password_hash != NEW_USER["password"]


def test_register_duplicate_email(client, db):
    assert client.post("/api/users/register", json=NEW_USER).status_code == 201

    res = client.post("/api/users/register", json={**NEW_USER, "email": "Grace@Example.com", "name": "Other"})
    assert res.status_code == 400
    assert res.json() == {"success": False, "message": "User already exists"}
    assert db.query(User).count() == 1


def test_register_requires_all_fields(client, db):
    for field in NEW_USER:
        payload = {k: v for k, v in NEW_USER.items() if k != field}
        res = client.post("/api/users/register", json=payload)
        assert res.status_code == 400, field
        assert res.json()["success"] is False
    assert db.query(User).count() == 0


def test_register_rejects_unknown_role(client):
    res = client.post("/api/users/register", json={**NEW_USER, "role": "superuser"})
    assert res.status_code == 400
    assert "role" in res.json()["message"]


def test_register_without_signing_key(client, db, no_secret):
    res = client.post("/api/users/register", json=NEW_USER)
    assert res.status_code == 500
    assert res.json()["message"] == "JWT secret not set"
    assert db.query(User).count() == 0


def test_login(client, make_user):
    make_user(email="ada@example.com", password="secret123")
    res = client.post("/api/users/login", json={"email": "ada@example.com", "password": "secret123"})
    assert res.status_code == 200
    body = res.json()
    assert body["success"] is True
    assert body["token"]
    _assert_no_password(body["user"])


def test_login_failures_are_indistinguishable(client, make_user):
    make_user(email="ada@example.com", password="secret123")
    wrong_password = client.post("/api/users/login", json={"email": "ada@example.com", "password": "nope"})
    unknown_email = client.post("/api/users/login", json={"email": "ghost@example.com", "password": "secret123"})

    assert wrong_password.status_code == unknown_email.status_code == 400
    assert wrong_password.json() == unknown_email.json() == {
        "success": False, "message": "Invalid email or password",
    }


def test_login_requires_email_and_password(client):
    assert client.post("/api/users/login", json={"email": "ada@example.com"}).status_code == 400
    assert client.post("/api/users/login", json={"password": "x"}).status_code == 400


def test_login_without_signing_key(client, make_user, no_secret):
    make_user(email="ada@example.com", password="secret123")
    res = client.post("/api/users/login", json={"email": "ada@example.com", "password": "secret123"})
    assert res.status_code == 500
    assert res.json()["message"] == "JWT secret not set"


def test_me(client, make_user, auth_header):
    user = make_user()
    res = client.get("/api/users/me", headers=auth_header(user))
    assert res.status_code == 200
    assert res.json()["user"]["id"] == user.id
    _assert_no_password(res.json()["user"])


def test_me_requires_token(client):
    res = client.get("/api/users/me")
    assert res.status_code == 401
    assert res.json() == {"success": False, "message": "Unauthorized"}

    res = client.get("/api/users/me", headers={"Authorization": "Bearer garbage"})
    assert res.status_code == 401


def test_me_for_deleted_account(client, db, make_user, auth_header):
    user = make_user()
    headers = auth_header(user)
    db.delete(user)
    db.commit()
    assert client.get("/api/users/me", headers=headers).status_code == 404


def test_admin_routes_require_admin(client, make_user, auth_header):
    customer = make_user()
    assert client.get("/api/users").status_code == 401
    res = client.get("/api/users", headers=auth_header(customer))
    assert res.status_code == 403


def test_admin_list_and_get(client, make_user, admin_headers):
    user = make_user()
    res = client.get("/api/users", headers=admin_headers)
    assert res.status_code == 200
    users = res.json()["users"]
    assert {u["email"] for u in users} == {"admin@example.com", "ada@example.com"}
    for u in users:
        _assert_no_password(u)

    res = client.get(f"/api/users/{user.id}", headers=admin_headers)
    assert res.status_code == 200
    assert res.json()["user"]["name"] == "Ada"
    _assert_no_password(res.json()["user"])

    assert client.get("/api/users/9999", headers=admin_headers).status_code == 404


def test_admin_partial_update(client, make_user, admin_headers):
    user = make_user()
    res = client.put(f"/api/users/{user.id}", json={"role": "admin"}, headers=admin_headers)
    assert res.status_code == 200
    body = res.json()["user"]
    assert body["role"] == "admin"
    assert body["name"] == "Ada"
    assert body["email"] == "ada@example.com"
    _assert_no_password(body)


def test_admin_update_rehashes_password(client, make_user, admin_headers):
    user = make_user(password="old-pass")
    res = client.put(f"/api/users/{user.id}", json={"password": "new-pass"}, headers=admin_headers)
    assert res.status_code == 200
    _assert_no_password(res.json()["user"])

    old = client.post("/api/users/login", json={"email": "ada@example.com", "password": "old-pass"})
    new = client.post("/api/users/login", json={"email": "ada@example.com", "password": "new-pass"})
    assert old.status_code == 400
    assert new.status_code == 200


def test_admin_update_email_conflict(client, make_user, admin_headers):
    user = make_user()
    res = client.put(f"/api/users/{user.id}", json={"email": "admin@example.com"}, headers=admin_headers)
    assert res.status_code == 400
    assert res.json()["message"] == "User already exists"


def test_admin_update_unknown_user(client, admin_headers):
    assert client.put("/api/users/9999", json={"name": "x"}, headers=admin_headers).status_code == 404


def test_admin_delete(client, make_user, admin_headers):
    user = make_user()
    res = client.delete(f"/api/users/{user.id}", headers=admin_headers)
    assert res.status_code == 200
    assert res.json()["success"] is True
    assert client.delete(f"/api/users/{user.id}", headers=admin_headers).status_code == 404


def test_admin_cannot_delete_self(client, make_user, auth_header):
    admin = make_user(email="boss@example.com", role="admin")
    res = client.delete(f"/api/users/{admin.id}", headers=auth_header(admin))
    assert res.status_code == 400


def test_admin_delete_survives_audit_failure(client, db, make_user, admin_headers, monkeypatch):
    user = make_user()

    def broken_log(**kwargs):
        raise SQLAlchemyError("logs table locked")

    monkeypatch.setattr(audit, "Log", broken_log)

    res = client.delete(f"/api/users/{user.id}", headers=admin_headers)
    assert res.status_code == 200
    assert res.json()["success"] is True
    db.expire_all()
    assert db.query(User).filter(User.id == user.id).count() == 0
