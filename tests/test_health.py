"""Tests pour l'endpoint de santé et l'exposition des métriques."""

from fastapi.testclient import TestClient

from pitch_history.app.main import app
from pitch_history.core.http_constants import HTTP_OK


def test_health():
    """Teste que l'endpoint de santé retourne un statut OK."""
    client = TestClient(app)
    r = client.get("/health")
    assert r.status_code == HTTP_OK
    body = r.json()
    assert body["status"] == "ok"
    assert body["storage"] == "memory"
    assert body["retention_dispatch"] == "local"


def test_metrics_exposed():
    """Teste que /metrics expose les compteurs HTTP et métier."""
    c = TestClient(app)
    c.get("/health")
    r = c.get("/metrics")
    assert r.status_code == HTTP_OK
    assert b"http_requests_total" in r.content
    assert b"pitch_versions_created_total" in r.content
    assert b"pitch_retention_failures_total" in r.content
