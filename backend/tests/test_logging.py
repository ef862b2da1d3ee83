from fastapi.testclient import TestClient

from app.core.config import get_settings
from app.logging import (
    MAX_LOG_VALUE_LENGTH,
    TRUNCATION_SUFFIX,
    _add_service_context,
    _mask_sensitive_values,
    _truncate_large_values,
    get_logger,
)


def test_get_logger_accepts_optional_name() -> None:
    named_logger = get_logger(__name__)
    unnamed_logger = get_logger()

    for logger in (named_logger, unnamed_logger):
        assert hasattr(logger, "info")
        assert callable(logger.info)
        assert hasattr(logger, "bind")
        assert callable(logger.bind)


def test_sensitive_values_are_masked() -> None:
    event = {
        "event": "user_authenticated",
        "password": "changeme123",
        "payload": {"Authorization": "Bearer abc", "nested": [{"refresh_token": "xyz"}]},
        "user_id": 7,
    }

    masked = _mask_sensitive_values(None, "info", event)

    assert masked["password"] == "***"
    assert masked["payload"]["Authorization"] == "***"
    assert masked["payload"]["nested"][0]["refresh_token"] == "***"
    assert masked["user_id"] == 7


def test_large_values_are_truncated() -> None:
    event = {"event": "notification_recorded", "body": "x" * (MAX_LOG_VALUE_LENGTH + 10)}

    truncated = _truncate_large_values(None, "info", event)

    assert truncated["body"].endswith(TRUNCATION_SUFFIX)
    assert len(truncated["body"]) == MAX_LOG_VALUE_LENGTH + len(TRUNCATION_SUFFIX)


def test_request_id_header_is_echoed(client: TestClient) -> None:
    response = client.get("/api/v1/health", headers={"X-Request-ID": "req-123"})

    assert response.headers["X-Request-ID"] == "req-123"


def test_request_id_is_generated(client: TestClient) -> None:
    response = client.get("/api/v1/health")

    assert response.headers["X-Request-ID"]


def test_service_context_is_added() -> None:
    event = _add_service_context(None, "info", {"event": "project_created"})

    assert event["service"] == "collabhub-api"
    assert event["environment"] == get_settings().app_env
