from fastapi import FastAPI
from fastapi.testclient import TestClient
from prometheus_client import REGISTRY

from app.core.config import get_settings
from app.observability import metrics as metrics_module
from app.observability.metrics import metrics_response


def test_liveness(client: TestClient) -> None:
    response = client.get("/api/v1/health")

    assert response.status_code == 200
    assert response.json()["data"]["status"] == "ok"


def test_readiness_checks_database(client: TestClient) -> None:
    response = client.get("/api/readyz")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["status"] == "ready"
    assert data["checks"]["database"]["status"] == "ok"


def test_unknown_route_uses_error_envelope(client: TestClient) -> None:
    response = client.get("/api/v1/does-not-exist")

    assert response.status_code == 404
    body = response.json()
    assert body["status"] == "error"
    assert body["code"] == "N001"
    assert body["timestamp"].endswith("Z")


def test_metrics_route_is_not_mounted_by_default(client: TestClient) -> None:
    assert client.get("/metrics").status_code == 404


def test_metrics_payload_exposes_membership_counters() -> None:
    response = metrics_response()

    assert response.media_type.startswith("text/plain")
    assert b"collabhub_join_request_transitions" in response.body
    assert b"collabhub_notification_failed" in response.body


def test_request_metrics_use_route_template(monkeypatch) -> None:
    enabled = get_settings().model_copy(update={"metrics_enabled": True})
    monkeypatch.setattr(metrics_module, "get_settings", lambda: enabled)

    metered_app = FastAPI()
    metered_app.add_middleware(metrics_module.MetricsMiddleware)

    @metered_app.get("/projects/{project_id}")
    def read_project(project_id: int) -> dict[str, int]:
        return {"id": project_id}

    with TestClient(metered_app) as test_client:
        assert test_client.get("/projects/41").status_code == 200
        assert test_client.get("/projects/42").status_code == 200
        assert test_client.get("/nowhere").status_code == 404

    def _count(endpoint: str, status: str) -> float | None:
        return REGISTRY.get_sample_value(
            "collabhub_http_requests_total",
            {"method": "GET", "endpoint": endpoint, "status": status},
        )

    assert _count("/projects/{project_id}", "200") >= 2
    assert _count("/projects/41", "200") is None
    assert _count("unmatched", "404") >= 1
