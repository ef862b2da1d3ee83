import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from app.core.security import create_access_token, create_refresh_token, decode_refresh_token
from app.services.auth import AuthService

REGISTER_PAYLOAD = {
    "email": "Ada@Example.com",
    "password": "changeme123",
    "first_name": "Ada",
    "last_name": "Lovelace",
}


def _register(client: TestClient, **overrides) -> dict:
    payload = {**REGISTER_PAYLOAD, **overrides}
    response = client.post("/api/v1/auth/register", json=payload)
    assert response.status_code == 201, response.text
    return response.json()["data"]


def _login(client: TestClient, email: str = "ada@example.com", password: str = "changeme123"):
    return client.post("/api/v1/auth/login", json={"email": email, "password": password})


def test_register_returns_user_without_password(client: TestClient) -> None:
    data = _register(client)

    assert data["email"] == "ada@example.com"
    assert data["first_name"] == "Ada"
    assert data["skills"] == []
    assert "password" not in data
    assert "password_hash" not in data


def test_register_duplicate_email_returns_auth002(client: TestClient) -> None:
    _register(client)

    duplicate_response = client.post("/api/v1/auth/register", json={**REGISTER_PAYLOAD, "email": "ADA@example.com"})
    assert duplicate_response.status_code == 409
    body = duplicate_response.json()
    assert body["code"] == "AUTH002"
    assert body["message"] == "An account with this email already exists"


def test_register_validates_payload(client: TestClient) -> None:
    response = client.post(
        "/api/v1/auth/register",
        json={"email": "not-an-email", "password": "short", "first_name": " ", "last_name": "X"},
    )

    assert response.status_code == 422
    body = response.json()
    assert body["code"] == "V001"
    fields = {error["loc"][-1] for error in body["data"]}
    assert {"email", "password", "first_name"} <= fields


def test_login_invalid_credentials_returns_auth001(client: TestClient) -> None:
    _register(client)

    invalid_login = _login(client, password="wrongpass123")
    unknown_user = _login(client, email="nobody@example.com")

    for response in (invalid_login, unknown_user):
        assert response.status_code == 401
        body = response.json()
        assert body["code"] == "AUTH001"
        assert body["message"] == "Invalid email or password"


def test_login_returns_token_and_sets_refresh_cookie(client: TestClient) -> None:
    _register(client)

    response = _login(client, email="ADA@example.com")

    assert response.status_code == 200
    body = response.json()
    assert body["code"] == "SUCCESS"
    assert body["message"] == "Login successful"
    assert body["data"]["token_type"] == "bearer"
    assert body["data"]["expires_in"] == 15 * 60
    assert body["data"]["user"]["email"] == "ada@example.com"
    assert isinstance(body["data"]["access_token"], str) and body["data"]["access_token"].strip()

    cookie = response.headers["set-cookie"]
    assert cookie.startswith("refreshToken=")
    assert "HttpOnly" in cookie
    assert "Path=/api/v1/auth" in cookie
    assert "samesite=strict" in cookie.lower()
    assert "refreshToken" not in body["data"]

    me = client.get("/api/v1/users/me", headers={"Authorization": f"Bearer {body['data']['access_token']}"})
    assert me.status_code == 200
    assert me.json()["data"]["email"] == "ada@example.com"


def test_refresh_rotates_cookie(client: TestClient) -> None:
    _register(client)
    login_response = _login(client)
    first_cookie = login_response.cookies.get("refreshToken")

    refreshed = client.post("/api/v1/auth/refresh")

    assert refreshed.status_code == 200, refreshed.text
    assert refreshed.json()["message"] == "Token refreshed"
    assert refreshed.json()["data"]["access_token"]
    assert refreshed.cookies.get("refreshToken") not in (None, first_cookie)


def test_refresh_without_cookie_returns_auth003(client: TestClient) -> None:
    response = client.post("/api/v1/auth/refresh")

    assert response.status_code == 401
    assert response.json()["code"] == "AUTH003"
    assert response.json()["message"] == "Refresh token is required"


def test_logout_revokes_refresh_token(client: TestClient) -> None:
    _register(client)
    _login(client)

    logout_response = client.post("/api/v1/auth/logout")
    assert logout_response.status_code == 200
    assert logout_response.json()["message"] == "Logged out successfully"

    refresh_after_logout = client.post("/api/v1/auth/refresh")
    assert refresh_after_logout.status_code == 401
    assert refresh_after_logout.json()["code"] == "AUTH003"


def test_reused_refresh_token_is_rejected(db_session, make_user) -> None:
    user = make_user(email="rotate@example.com")
    service = AuthService(db_session)
    issued = service.login("rotate@example.com", "changeme123")

    rotated = service.refresh(issued.refresh_token)
    assert rotated.refresh_token != issued.refresh_token
    assert decode_refresh_token(rotated.refresh_token)["sub"] == str(user.id)

    with pytest.raises(HTTPException) as excinfo:
        service.refresh(issued.refresh_token)
    assert excinfo.value.status_code == 401
    assert excinfo.value.detail["code"] == "AUTH003"


def test_refresh_rejects_unknown_and_access_tokens(db_session, make_user) -> None:
    user = make_user()
    service = AuthService(db_session)
    unstored, _ = create_refresh_token(str(user.id))

    for token in (unstored, create_access_token(str(user.id)), "garbage"):
        with pytest.raises(HTTPException) as excinfo:
            service.refresh(token)
        assert excinfo.value.detail["code"] == "AUTH003"


def test_missing_token_returns_a001(client: TestClient) -> None:
    response = client.get("/api/v1/users/me")

    assert response.status_code == 401
    assert response.json()["code"] == "A001"
    assert response.headers["www-authenticate"] == "Bearer"


def test_invalid_tokens_return_auth003(client: TestClient, make_user) -> None:
    user = make_user()
    refresh_token, _ = create_refresh_token(str(user.id))

    for token in ("not-a-jwt", refresh_token, create_access_token("999999")):
        response = client.get("/api/v1/users/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert response.json()["code"] == "AUTH003"
