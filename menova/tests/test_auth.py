import pytest

from menova.app import app
from menova.auth.deps import get_current_user
from menova.auth.jwt import create_access_token, create_refresh_token, hash_password, verify_password


@pytest.fixture
def real_auth():
    app.dependency_overrides.pop(get_current_user, None)
    yield


def test_password_hashing():
    h = hash_password("correct horse")
    assert h.startswith("$pbkdf2-sha256$")
    assert verify_password("correct horse", h)
    assert not verify_password("wrong", h)
    assert not verify_password("correct horse", "plain-text")
    with pytest.raises(ValueError):
        hash_password("")


def test_register_login_refresh(client, real_auth):
    r = client.post("/api/auth/register", json={"email": "Jane@Example.com", "password": "s3cret-pass", "name": "Jane"})
    assert r.status_code == 201, r.text
    assert r.json()["refresh_token"]

    r = client.post("/api/auth/register", json={"email": "jane@example.com", "password": "s3cret-pass"})
    assert r.status_code == 409
    assert r.json()["code"] == "CONFLICT"

    r = client.post("/api/auth/login", json={"email": "jane@example.com", "password": "wrong-pass"})
    assert r.status_code == 401

    r = client.post("/api/auth/login", json={"email": "jane@example.com", "password": "s3cret-pass"})
    assert r.status_code == 200
    tokens = r.json()

    r = client.get("/api/profile/", headers={"Authorization": f"Bearer {tokens['access_token']}"})
    assert r.status_code == 200

    r = client.post("/api/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert r.status_code == 200
    assert r.json()["access_token"]


def test_refresh_token_is_not_an_access_token(client, real_auth):
    token = create_refresh_token({"sub": "user-1"})
    r = client.get("/api/profile/", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 401

    r = client.post("/api/auth/refresh", json={"refresh_token": create_access_token({"sub": "user-1"})})
    assert r.status_code == 401


def test_missing_and_bad_tokens(client, real_auth):
    r = client.post("/api/symptoms/detect", json={"text": "hot flashes"})
    assert r.status_code == 401
    j = r.json()
    assert j["code"] == "UNAUTHORIZED"
    assert j["trace_id"]

    r = client.get("/api/goals/today", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 401

    token = create_access_token({"sub": "ghost"})
    r = client.get("/api/goals/today", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 401
    assert r.json()["message"] == "User not found"
