"""Tests for FastAPI application."""

from fastapi.testclient import TestClient
from web.backend.main import app

client = TestClient(app)


def test_health_endpoint():
    """Test health check endpoint returns 200."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_cors_headers():
    """Test CORS headers are present."""
    response = client.options(
        "/health",
        headers={
            "Origin": "http://localhost:5173",
            "Access-Control-Request-Method": "GET",
        },
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "http://localhost:5173"


def test_routes_mounted_under_api():
    """Test every feature route lives under the /api prefix."""
    paths = {route.path for route in app.routes}
    assert "/api/import/youtube-playlist" in paths
    assert "/api/import/spotify-playlist" in paths
    assert "/api/stream/{video_id}" in paths
    assert "/api/songs" in paths
    assert "/api/songs/{song_id}" in paths
    assert "/api/youtube/info" in paths
