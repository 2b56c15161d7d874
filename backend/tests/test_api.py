"""
Unit Tests for API Endpoints

Tests the FastAPI routes and responses.
"""

import pytest
from fastapi.testclient import TestClient
from unittest.mock import AsyncMock, MagicMock

from match_analytics.api.dependencies import build_container, get_match_prediction_use_case
from match_analytics.api.main import create_app
from match_analytics.config import Settings
from match_analytics.domain.exceptions import PredictionTimeoutException


@pytest.fixture
def container():
    # No database, remote service or Redis: offline dataset and local engine only
    return build_container(Settings())


@pytest.fixture
def app(container):
    return create_app(container=container)


@pytest.fixture
def client(app):
    """Create test client."""
    with TestClient(app) as client:
        yield client


class TestHealthEndpoint:
    """Tests for health check endpoint."""

    def test_health_check(self, client):
        """Test health check returns healthy status."""
        response = client.get("/health")
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "healthy"
        assert data["worker_running"] is True
        assert "version" in data
        assert "timestamp" in data

    def test_shutdown_terminates_worker(self, app, container):
        with TestClient(app):
            assert container.scheduler.running
        assert container.processor.is_running is False
        assert not container.scheduler.running

    def test_container_survives_second_lifespan(self, app, container):
        with TestClient(app):
            pass

        with TestClient(app) as client:
            assert container.processor.is_running
            response = client.post(
                "/api/v1/predictions",
                json={"home_team": "Barcelona", "away_team": "Real Madrid"},
            )
            assert response.status_code == 200
            assert client.get("/health").json()["worker_running"] is True
        assert container.processor.is_running is False


class TestRootEndpoint:
    """Tests for root endpoint."""

    def test_root_returns_api_info(self, client):
        response = client.get("/")
        assert response.status_code == 200

        data = response.json()
        assert "name" in data
        assert "version" in data
        assert "endpoints" in data


class TestMatchesEndpoints:
    """Tests for match endpoints."""

    def test_get_matches(self, client):
        response = client.get("/api/v1/matches")
        assert response.status_code == 200
        assert response.json()["total"] == 10

    def test_get_matches_limit(self, client):
        data = client.get("/api/v1/matches", params={"limit": 2}).json()
        assert [m["id"] for m in data["matches"]] == [10, 9]

    def test_invalid_limit(self, client):
        assert client.get("/api/v1/matches", params={"limit": 0}).status_code == 422

    def test_search(self, client):
        response = client.get("/api/v1/matches/search", params={"home_team": "barcelona"})
        assert response.status_code == 200

        match = response.json()["matches"][0]
        assert match["result"] == "2-1"
        assert match["half_time_result"] == "1-0"
        assert match["both_teams_scored"] is True

    def test_team_names(self, client):
        teams = client.get("/api/v1/matches/teams").json()["teams"]
        assert "Barcelona" in teams
        assert teams == sorted(teams)

    def test_team_statistics(self, client):
        response = client.get("/api/v1/matches/team/Juventus/statistics")
        assert response.status_code == 200

        data = response.json()
        assert data["statistics"]["losses"] == 1
        assert data["statistics"]["recent_form"] == "L"

    def test_head_to_head(self, client):
        response = client.get(
            "/api/v1/matches/head-to-head",
            params={"home_team": "Manchester City", "away_team": "Liverpool"},
        )
        assert response.status_code == 200
        assert response.json()["summary"]["record"] == "0-1-0"

    def test_head_to_head_requires_teams(self, client):
        response = client.get("/api/v1/matches/head-to-head", params={"home_team": "Arsenal"})
        assert response.status_code == 422


class TestPredictionsEndpoints:
    """Tests for prediction endpoints."""

    def test_local_prediction(self, client):
        response = client.post(
            "/api/v1/predictions",
            json={"home_team": "Barcelona", "away_team": "Real Madrid"},
        )
        assert response.status_code == 200

        data = response.json()
        assert data["prediction_source"] == "local"
        assert data["league"] == "Premier League"
        total = data["home_win_probability"] + data["draw_probability"] + data["away_win_probability"]
        assert total == pytest.approx(1.0)

    def test_blank_team_returns_400(self, client):
        response = client.post("/api/v1/predictions", json={"home_team": "  ", "away_team": "Real Madrid"})
        assert response.status_code == 400

    def test_timeout_returns_504(self, app, client):
        use_case = MagicMock()
        use_case.execute = AsyncMock(side_effect=PredictionTimeoutException("too slow"))
        app.dependency_overrides[get_match_prediction_use_case] = lambda: use_case

        response = client.post("/api/v1/predictions", json={"home_team": "A", "away_team": "B"})

        assert response.status_code == 504
        assert response.json()["detail"] == "too slow"

    def test_unhandled_error_returns_500(self, app, container):
        use_case = MagicMock()
        use_case.execute = AsyncMock(side_effect=RuntimeError("unexpected"))
        app.dependency_overrides[get_match_prediction_use_case] = lambda: use_case

        with TestClient(app, raise_server_exceptions=False) as client:
            response = client.post("/api/v1/predictions", json={"home_team": "A", "away_team": "B"})

        assert response.status_code == 500
        assert response.json()["error"] == "internal_server_error"

    def test_refresh_without_remote_service(self, client):
        response = client.post("/api/v1/predictions/refresh", json={"home_team": "A", "away_team": "B"})
        assert response.status_code == 200
        assert response.json()["triggered"] is False

    def test_accuracy_without_remote_service(self, client):
        response = client.get(
            "/api/v1/predictions/accuracy",
            params={"date_from": "2024-01-01T00:00:00Z", "date_to": "2024-02-01T00:00:00Z"},
        )
        assert response.status_code == 404

    def test_accuracy_inverted_range(self, client):
        response = client.get(
            "/api/v1/predictions/accuracy",
            params={"date_from": "2024-02-01T00:00:00Z", "date_to": "2024-01-01T00:00:00Z"},
        )
        assert response.status_code == 400

    def test_accuracy_inverted_range_mixed_offsets(self, client):
        response = client.get(
            "/api/v1/predictions/accuracy",
            params={"date_from": "2024-02-01T00:00:00", "date_to": "2024-01-01T00:00:00Z"},
        )
        assert response.status_code == 400
