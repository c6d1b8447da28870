# tests/test_auth_api.py

from datetime import timedelta

from jose import jwt

import auth_service
import config


def test_register_returns_token_and_user(client):
    resp = client.post("/api/auth/register", json={"email": "Alice@Mail.com", "password": "secret123"})

    assert resp.status_code == 201
    body = resp.json()
    assert body["token"]
    assert body["token_type"] == "bearer"
    assert body["user"]["email"] == "alice@mail.com"
    assert "createdAt" in body["user"]
    assert "password" not in body["user"]


def test_register_same_email_twice_fails(client):
    first = client.post("/api/auth/register", json={"email": "alice@mail.com", "password": "secret123"})
    second = client.post("/api/auth/register", json={"email": "ALICE@mail.com", "password": "other-pass"})

    assert first.status_code == 201
    assert second.status_code == 400
    assert second.json() == {"message": "User already exists"}


def test_register_rejects_bad_input(client):
    resp = client.post("/api/auth/register", json={"email": "not-an-email", "password": "secret123"})
    assert resp.status_code == 400
    assert "email" in resp.json()["message"]

    resp = client.post("/api/auth/register", json={"email": "carol@mail.com", "password": "123"})
    assert resp.status_code == 400
    assert "password" in resp.json()["message"]

    resp = client.post("/api/auth/register", json={"email": "carol@mail.com"})
    assert resp.status_code == 400


def test_login_and_me(client, alice):
    resp = client.post("/api/auth/login", json={"email": "alice@mail.com", "password": "secret123"})
    assert resp.status_code == 200
    token = resp.json()["token"]

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["email"] == "alice@mail.com"


def test_login_with_wrong_password_or_unknown_email(client, alice):
    wrong = client.post("/api/auth/login", json={"email": "alice@mail.com", "password": "nope-nope"})
    unknown = client.post("/api/auth/login", json={"email": "zed@mail.com", "password": "secret123"})

    assert wrong.status_code == 401
    assert unknown.status_code == 401
    assert wrong.json() == unknown.json() == {"message": "Invalid credentials"}


def test_me_requires_token(client):
    resp = client.get("/api/auth/me")
    assert resp.status_code == 401
    assert resp.json() == {"message": "No token, authorization denied"}


def test_me_rejects_garbage_token(client):
    resp = client.get("/api/auth/me", headers={"Authorization": "Bearer not.a.jwt"})
    assert resp.status_code == 401
    assert resp.json() == {"message": "Token is not valid"}


def test_me_rejects_token_signed_with_other_secret(client, make_user):
    user = make_user("dave@mail.com")
    forged = jwt.encode({"sub": str(user.id)}, "someone-elses-secret", algorithm=config.ALGORITHM)

    resp = client.get("/api/auth/me", headers={"Authorization": f"Bearer {forged}"})
    assert resp.status_code == 401


def test_me_rejects_expired_token(client, make_user):
    user = make_user("erin@mail.com")
    expired = auth_service.create_access_token({"sub": str(user.id)}, expires_delta=timedelta(minutes=-5))

    resp = client.get("/api/auth/me", headers={"Authorization": f"Bearer {expired}"})
    assert resp.status_code == 401
    assert resp.json() == {"message": "Token has expired"}


def test_me_rejects_token_for_missing_user(client):
    token = auth_service.create_access_token({"sub": "4242"})

    resp = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401


def test_concurrent_register_of_same_email_is_rejected(client, make_user, monkeypatch):
    make_user("quinn@mail.com")
    monkeypatch.setattr(auth_service, "get_user_by_email", lambda db, email: None)

    resp = client.post("/api/auth/register", json={"email": "quinn@mail.com", "password": "secret123"})

    assert resp.status_code == 400
    assert resp.json() == {"message": "User already exists"}


def test_password_limit_counts_utf8_bytes(client):
    # 40 characters but 80 bytes
    resp = client.post("/api/auth/register", json={"email": "rosa@mail.com", "password": "é" * 40})
    assert resp.status_code == 400
    assert "72 bytes" in resp.json()["message"]

    ok = client.post("/api/auth/register", json={"email": "rosa@mail.com", "password": "é" * 36})
    assert ok.status_code == 201
