from fastapi import status
from fastapi.testclient import TestClient

from app.main import app


def test_metrics_fail_closed_without_token(monkeypatch):
    from app import settings
    monkeypatch.setattr(settings.settings, "obs_admin_token", None)
    monkeypatch.setattr(settings.settings, "obs_metrics_public", False)

    client = TestClient(app)

    response = client.get("/metrics", headers={"X-Admin-Token": "whatever"})

    # no token configured on the server side
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["detail"] == "admin_token_not_configured"


def test_metrics_work_with_correct_token(monkeypatch):
    from app import settings
    monkeypatch.setattr(settings.settings, "obs_admin_token", "secret-token")
    monkeypatch.setattr(settings.settings, "obs_metrics_public", False)

    client = TestClient(app)

    response = client.get("/metrics", headers={"X-Admin-Token": "secret-token"})
    assert response.status_code == 200
    assert "devconnect_http_requests_total" in response.text

    bearer = client.get("/metrics", headers={"Authorization": "Bearer secret-token"})
    assert bearer.status_code == 200


def test_metrics_reject_wrong_token(monkeypatch):
    from app import settings
    monkeypatch.setattr(settings.settings, "obs_admin_token", "secret-token")
    monkeypatch.setattr(settings.settings, "obs_metrics_public", False)

    client = TestClient(app)

    response = client.get("/metrics", headers={"X-Admin-Token": "wrong-token"})
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["detail"] == "forbidden"


def test_metrics_can_be_public(monkeypatch):
    from app import settings
    monkeypatch.setattr(settings.settings, "obs_metrics_public", True)

    client = TestClient(app)

    assert client.get("/metrics").status_code == 200
