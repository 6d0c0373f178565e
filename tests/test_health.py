"""Tests for the /health endpoint."""

from imagesec.core.config import settings


def test_health_returns_200(client):
    res = client.get("/health")
    assert res.status_code == 200


def test_health_reports_healthy(client):
    data = client.get("/health").json()
    assert data["status"] == "healthy"
    assert data["version"] == settings.VERSION


def test_openapi_has_tag_descriptions(client):
    schema = client.get("/openapi.json").json()
    tags = {t["name"]: t["description"] for t in schema.get("tags", [])}
    assert "scans" in tags
    assert "health" in tags


def test_all_endpoints_have_summaries(client):
    paths = client.get("/openapi.json").json().get("paths", {})
    for path, methods in paths.items():
        for method, details in methods.items():
            if method in ("get", "post", "put", "delete", "patch"):
                assert "summary" in details, f"{method.upper()} {path} missing summary"
