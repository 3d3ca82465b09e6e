"""Tests for the Flask API. The pipeline and GEE setup are mocked."""

from unittest.mock import patch

import pytest

import app as app_module
from analysis import AnalysisError


@pytest.fixture
def client():
    app_module.app.config["TESTING"] = True
    app_module.gee_connected = False
    with app_module.app.test_client() as client:
        yield client


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.get_json()["status"] == "healthy"


def test_thresholds(client):
    body = client.get("/api/thresholds").get_json()
    assert body["thresholds"]["min_precip"] == 800
    assert body["growing_season_months"] == [5, 6, 7, 8]
    assert body["kill_temp_month"] == 4


def test_suitability_success(client):
    with patch("app.setup_gee", return_value=True), \
            patch("app.analyze_suitability",
                  return_value={"export": {"started": True}}) as analyze:
        response = client.post("/api/suitability",
                               json={"scale": 500, "summary": True})

    assert response.status_code == 200
    assert response.get_json()["success"] is True
    kwargs = analyze.call_args.kwargs
    assert kwargs["scale"] == 500
    assert kwargs["summary"] is True
    assert kwargs["start_export"] is True


def test_empty_body_uses_defaults(client):
    with patch("app.setup_gee", return_value=True), \
            patch("app.analyze_suitability", return_value={}) as analyze:
        response = client.post("/api/suitability")
    assert response.status_code == 200
    assert analyze.call_args.kwargs["region"] is None


@pytest.mark.parametrize("body", [
    {"region": [-75, 39, -77, 41]},
    {"region": [1, 2, 3]},
    {"scale": -1},
    {"crs": "mercator"},
    {"destination": "ftp"},
    {"summary": "yes"},
])
def test_validation_errors(client, body):
    with patch("app.analyze_suitability") as analyze:
        response = client.post("/api/suitability", json=body)
    assert response.status_code == 400
    assert response.get_json()["details"]
    analyze.assert_not_called()


def test_gee_not_connected(client):
    with patch("app.setup_gee", return_value=False):
        response = client.post("/api/suitability", json={})
    assert response.status_code == 503


def test_pipeline_failure_reports_stage(client):
    with patch("app.setup_gee", return_value=True), \
            patch("app.analyze_suitability",
                  side_effect=AnalysisError("export", "bad region")):
        response = client.post("/api/suitability", json={})
    assert response.status_code == 422
    body = response.get_json()
    assert body["stage"] == "export"
    assert body["message"] == "bad region"


def test_unknown_endpoint(client):
    assert client.get("/api/nope").status_code == 404
