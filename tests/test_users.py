"""Identity resolution and public profiles."""

from __future__ import annotations

from datetime import timedelta

from fastapi.testclient import TestClient

from conftest import auth_headers
from guildhall.core.security import create_access_token, verify_access_token


def test_token_round_trip():
    token = create_access_token("user-1")
    assert verify_access_token(token) == "user-1"


def test_expired_or_garbage_tokens_are_rejected():
    expired = create_access_token("user-1", expires_delta=timedelta(minutes=-5))
    assert verify_access_token(expired) is None
    assert verify_access_token("garbage") is None


def test_read_current_user(client: TestClient, make_user):
    alice = make_user("alice", role="MODERATOR")

    response = client.get("/api/v1/users/me", headers=auth_headers(alice))
    assert response.status_code == 200
    body = response.json()
    assert body["id"] == alice.id
    assert body["role"] == "MODERATOR"

    response = client.get("/api/v1/users/me")
    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"


def test_unknown_token_subject_is_unauthenticated(client: TestClient):
    response = client.get(
        "/api/v1/users/me",
        headers={"Authorization": f"Bearer {create_access_token('ghost')}"},
    )
    assert response.status_code == 401


def test_read_public_profile(client: TestClient, make_user):
    alice = make_user("alice")

    response = client.get(f"/api/v1/users/{alice.id}")
    assert response.status_code == 200
    assert response.json()["username"] == "alice"

    response = client.get("/api/v1/users/ghost")
    assert response.status_code == 404
    assert response.json() == {"detail": "User not found", "error": "not_found"}
