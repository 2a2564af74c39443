"""
Daygrid Backend - Authentication API Tests
============================================

What:  Sign-up, sign-in, refresh, sign-out and /me against a temporary
       SQLite database, through the full middleware stack.
"""

import pytest

from daygrid.models.profile import USERNAME_MAX_LENGTH
from daygrid.services.auth_service import generate_username


class TestGenerateUsername:

    def test_uses_local_part_and_suffix(self):
        username = generate_username("Jane.Doe+journal@example.com", suffix_length=4)
        base, suffix = username.rsplit("_", 1)
        assert base == "Jane.Doejournal"
        assert len(suffix) == 4 and suffix.isalnum()

    def test_falls_back_when_local_part_is_unusable(self):
        assert generate_username("+++@example.com", suffix_length=4).startswith("user_")

    def test_long_local_part_fits_username_column(self):
        email = "a" * 80 + "@example.com"
        for suffix_length in (4, 16):
            username = generate_username(email, suffix_length=suffix_length)
            assert len(username) <= USERNAME_MAX_LENGTH
            assert len(username.rsplit("_", 1)[1]) == suffix_length


@pytest.mark.asyncio
async def test_signup_returns_tokens_and_creates_profile(test_client):
    response = await test_client.post(
        "/api/auth/signup", json={"email": "Alice@Example.com", "password": "secret123"}
    )
    assert response.status_code == 201
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["expires_in"] > 0

    me = await test_client.get(
        "/api/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"}
    )
    assert me.status_code == 200
    profile = me.json()
    assert profile["id"] == body["user_id"]
    assert profile["email"] == "alice@example.com"
    assert profile["username"].startswith("alice_")
    assert profile["tasks"] == []
    assert profile["daily_images"] == []
    assert profile["avatar_url"]


@pytest.mark.asyncio
async def test_signup_with_username(test_client, signup):
    alice = await signup("alice@example.com", username="  alice  ")
    me = await test_client.get("/api/auth/me", headers=alice["headers"])
    assert me.json()["username"] == "alice"


@pytest.mark.asyncio
async def test_signup_duplicate_email(test_client, signup):
    await signup("alice@example.com")
    response = await test_client.post(
        "/api/auth/signup", json={"email": "ALICE@example.com", "password": "secret123"}
    )
    assert response.status_code == 409
    assert response.json()["error"] == "conflict"


@pytest.mark.asyncio
async def test_signup_duplicate_username(test_client, signup):
    await signup("alice@example.com", username="sunny")
    response = await test_client.post(
        "/api/auth/signup",
        json={"email": "bob@example.com", "password": "secret123", "username": "Sunny"},
    )
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_signup_short_password(test_client):
    response = await test_client.post(
        "/api/auth/signup", json={"email": "alice@example.com", "password": "123"}
    )
    assert response.status_code == 400
    assert response.json()["error"] == "validation_error"


@pytest.mark.asyncio
async def test_signup_invalid_email(test_client):
    response = await test_client.post(
        "/api/auth/signup", json={"email": "not-an-email", "password": "secret123"}
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_signin(test_client, signup):
    alice = await signup("alice@example.com", password="secret123")

    response = await test_client.post(
        "/api/auth/signin", json={"email": "alice@example.com", "password": "secret123"}
    )
    assert response.status_code == 200
    assert response.json()["user_id"] == alice["user_id"]


@pytest.mark.asyncio
async def test_signin_wrong_password_and_unknown_email_look_the_same(test_client, signup):
    await signup("alice@example.com", password="secret123")

    wrong = await test_client.post(
        "/api/auth/signin", json={"email": "alice@example.com", "password": "nope-nope"}
    )
    unknown = await test_client.post(
        "/api/auth/signin", json={"email": "nobody@example.com", "password": "secret123"}
    )
    assert wrong.status_code == unknown.status_code == 401
    assert wrong.json()["message"] == unknown.json()["message"]
    assert wrong.headers["WWW-Authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_refresh(test_client, signup):
    alice = await signup("alice@example.com")

    response = await test_client.post(
        "/api/auth/refresh", json={"refresh_token": alice["tokens"]["refresh_token"]}
    )
    assert response.status_code == 200
    new_access = response.json()["access_token"]
    me = await test_client.get("/api/auth/me", headers={"Authorization": f"Bearer {new_access}"})
    assert me.status_code == 200


@pytest.mark.asyncio
async def test_access_token_cannot_refresh(test_client, signup):
    alice = await signup("alice@example.com")
    response = await test_client.post(
        "/api/auth/refresh", json={"refresh_token": alice["tokens"]["access_token"]}
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_protected_route_requires_token(test_client):
    assert (await test_client.get("/api/auth/me")).status_code == 401
    bad = await test_client.get("/api/tasks", headers={"Authorization": "Bearer garbage"})
    assert bad.status_code == 401
    assert bad.json()["error"] == "authentication_error"


@pytest.mark.asyncio
async def test_signout(test_client, signup):
    alice = await signup("alice@example.com")
    response = await test_client.post("/api/auth/signout", headers=alice["headers"])
    assert response.status_code == 204


@pytest.mark.asyncio
async def test_request_id_is_echoed(test_client):
    response = await test_client.get("/api/auth/me", headers={"X-Request-ID": "abc12345"})
    assert response.headers["X-Request-ID"] == "abc12345"
    assert response.json()["request_id"] == "abc12345"


@pytest.mark.asyncio
async def test_health(test_client):
    response = await test_client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["database"] == "connected"
    assert body["storage"] == "writable"
