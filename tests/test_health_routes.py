"""Tests for the health endpoints."""

from unittest.mock import patch

from fastapi.testclient import TestClient

from abgate.api.routes.health import overall_status
from abgate.core.app_factory import create_app
from abgate.services.experiment_registry import ExperimentRegistry


def test_health_reports_feature_checks(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.headers["Cache-Control"].startswith("no-cache")
    body = response.json()
    assert body["status"] == "healthy"
    assert body["active_experiments"] == 2
    assert body["checks"]["features"] == {
        "forms": True,
        "analytics": True,
        "ab_testing": True,
        "rate_limiting": True,
    }


def test_health_degraded_without_experiments_or_rate_limits() -> None:
    app = create_app(registry=ExperimentRegistry([]), configure_logs=False)

    with patch("abgate.api.routes.health.settings") as mock_settings:
        mock_settings.app.rate_limit_enabled = False
        response = TestClient(app).get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "degraded"
    assert body["checks"]["features"]["ab_testing"] is False


def test_head_health_has_no_body(client: TestClient) -> None:
    response = client.head("/health")

    assert response.status_code == 200
    assert response.content == b""


def test_overall_status_rules() -> None:
    healthy = {"forms": True, "analytics": True, "ab_testing": False, "rate_limiting": True}
    degraded = {"forms": True, "analytics": False, "ab_testing": False, "rate_limiting": True}
    unhealthy = {"forms": False, "analytics": True, "ab_testing": True, "rate_limiting": True}

    assert overall_status(healthy) == "healthy"
    assert overall_status(degraded) == "degraded"
    assert overall_status(unhealthy) == "unhealthy"
