from __future__ import annotations

from fastapi.testclient import TestClient

from app.core.security import create_access_token
from app.models import Notification, NotificationType, User
from app.services.notifications import NotificationDispatcher


def _auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(str(user.id))}"}


def _seed(db_session, user: User, count: int) -> list[Notification]:
    dispatcher = NotificationDispatcher(db_session)
    created = [
        dispatcher.notify(user.id, NotificationType.JOIN_REQUEST_RECEIVED, f"Request {index}", reference_id=index)
        for index in range(count)
    ]
    db_session.commit()
    return created


def test_list_notifications_newest_first(client: TestClient, db_session, make_user) -> None:
    user = make_user()
    other = make_user()
    created = _seed(db_session, user, 3)
    _seed(db_session, other, 1)

    response = client.get("/api/v1/notifications", headers=_auth_headers(user))

    assert response.status_code == 200
    data = response.json()["data"]
    assert [item["id"] for item in data["items"]] == [item.id for item in reversed(created)]
    assert data["pagination"] == {"page": 1, "page_size": 20, "total": 3, "total_pages": 1}
    first = data["items"][0]
    assert first["type"] == "JOIN_REQUEST_RECEIVED"
    assert first["reference_type"] == "PROJECT"
    assert first["is_read"] is False

    paged = client.get("/api/v1/notifications", params={"page": 2, "page_size": 2}, headers=_auth_headers(user))
    assert [item["id"] for item in paged.json()["data"]["items"]] == [created[0].id]


def test_mark_read_and_unread_count(client: TestClient, db_session, make_user) -> None:
    user = make_user()
    other = make_user()
    created = _seed(db_session, user, 2)

    count = client.get("/api/v1/notifications/unread-count", headers=_auth_headers(user))
    assert count.json()["data"] == {"count": 2}

    marked = client.put(f"/api/v1/notifications/{created[0].id}/read", headers=_auth_headers(user))
    assert marked.status_code == 200
    assert marked.json()["data"]["is_read"] is True
    assert client.put(f"/api/v1/notifications/{created[0].id}/read", headers=_auth_headers(user)).status_code == 200

    assert client.get("/api/v1/notifications/unread-count", headers=_auth_headers(user)).json()["data"] == {"count": 1}

    foreign = client.put(f"/api/v1/notifications/{created[1].id}/read", headers=_auth_headers(other))
    assert foreign.status_code == 404
    assert foreign.json()["message"] == "Notification not found"


def test_mark_all_read_only_touches_own_notifications(client: TestClient, db_session, make_user) -> None:
    user = make_user()
    other = make_user()
    _seed(db_session, user, 3)
    _seed(db_session, other, 2)

    response = client.put("/api/v1/notifications/read-all", headers=_auth_headers(user))

    assert response.status_code == 200
    assert response.json()["data"] == {"updated": 3}
    assert client.get("/api/v1/notifications/unread-count", headers=_auth_headers(user)).json()["data"] == {"count": 0}
    assert client.get("/api/v1/notifications/unread-count", headers=_auth_headers(other)).json()["data"] == {"count": 2}


def test_notifications_require_authentication(client: TestClient) -> None:
    response = client.get("/api/v1/notifications")

    assert response.status_code == 401
    assert response.json()["code"] == "A001"
