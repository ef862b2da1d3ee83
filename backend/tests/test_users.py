from __future__ import annotations

from fastapi.testclient import TestClient

from app.core.security import create_access_token
from app.models import User


def _auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(str(user.id))}"}


def test_update_profile_trims_and_clears(client: TestClient, make_user) -> None:
    user = make_user("Ada", "Lovelace", github_url="https://github.com/ada", school_name="MIT")

    response = client.put(
        "/api/v1/users/me",
        json={
            "first_name": "  Augusta ",
            "bio": "  Analytical engines  ",
            "github_url": "",
            "custom_skills": ["Poetry", "poetry", " "],
        },
        headers=_auth_headers(user),
    )

    assert response.status_code == 200, response.text
    data = response.json()["data"]
    assert data["first_name"] == "Augusta"
    assert data["last_name"] == "Lovelace"
    assert data["bio"] == "Analytical engines"
    assert data["github_url"] is None
    assert data["school_name"] == "MIT"
    assert data["custom_skills"] == ["Poetry"]


def test_update_profile_rejects_blank_name(client: TestClient, make_user) -> None:
    user = make_user()

    response = client.put("/api/v1/users/me", json={"last_name": "   "}, headers=_auth_headers(user))

    assert response.status_code == 422
    assert response.json()["code"] == "V001"


def test_replace_skills_ignores_unknown_ids(client: TestClient, make_user, seeded_skills) -> None:
    user = make_user()
    python, react = seeded_skills[0], seeded_skills[1]

    first = client.put(
        "/api/v1/users/me/skills",
        json={"skill_ids": [react.id, python.id, 9999], "custom_skills": ["Rust"]},
        headers=_auth_headers(user),
    )
    assert first.status_code == 200
    assert [skill["name"] for skill in first.json()["data"]["skills"]] == ["Python", "React"]
    assert first.json()["data"]["custom_skills"] == ["Rust"]

    second = client.put("/api/v1/users/me/skills", json={"skill_ids": []}, headers=_auth_headers(user))
    assert second.json()["data"]["skills"] == []
    assert second.json()["data"]["custom_skills"] == ["Rust"]


def test_get_user_by_id(client: TestClient, make_user) -> None:
    viewer = make_user()
    target = make_user("Grace", "Hopper")

    found = client.get(f"/api/v1/users/{target.id}", headers=_auth_headers(viewer))
    missing = client.get("/api/v1/users/999999", headers=_auth_headers(viewer))

    assert found.status_code == 200
    assert found.json()["data"]["first_name"] == "Grace"
    assert missing.status_code == 404
    assert missing.json()["message"] == "User not found"
