from __future__ import annotations

from fastapi.testclient import TestClient

from pollster.models import User

SIGNUP = {
    "nickname": "Dana",
    "phone": "+15559990001",
    "email": "dana@example.com",
    "password": "s3cret-pass",
}


def test_signup_then_login_with_phone_or_email(client: TestClient) -> None:
    response = client.post("/api/auth/signup", json=SIGNUP)

    assert response.status_code == 201
    body = response.json()
    assert body["nickname"] == "Dana"
    assert "password" not in body and "hashed_password" not in body

    for username in (SIGNUP["phone"], SIGNUP["email"]):
        login = client.post("/api/auth/login", json={"username": username, "password": SIGNUP["password"]})
        assert login.status_code == 200
        assert login.json()["token_type"] == "bearer"
        assert login.json()["expires_in"] > 0

    token = login.json()["access_token"]
    listing = client.get("/api/organizations", headers={"Authorization": f"Bearer {token}"})
    assert listing.status_code == 200


def test_duplicate_signup_conflicts(client: TestClient, alice: User) -> None:
    response = client.post("/api/auth/signup", json={**SIGNUP, "email": alice.email})

    assert response.status_code == 409


def test_signup_validates_payload(client: TestClient) -> None:
    response = client.post("/api/auth/signup", json={**SIGNUP, "email": "not-an-email"})

    assert response.status_code == 422


def test_login_rejects_bad_credentials(client: TestClient) -> None:
    client.post("/api/auth/signup", json=SIGNUP)
    password = SIGNUP["password"]

    assert client.post("/api/auth/login", json={"username": SIGNUP["phone"], "password": "nope"}).status_code == 401
    assert client.post("/api/auth/login", json={"username": "ghost", "password": password}).status_code == 401


def test_protected_routes_require_a_token(client: TestClient) -> None:
    response = client.get("/api/organizations")

    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"
    assert client.get("/api/organizations", headers={"Authorization": "Bearer garbage"}).status_code == 401
