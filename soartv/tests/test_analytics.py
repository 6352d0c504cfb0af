from __future__ import annotations

from fastapi.testclient import TestClient

from soartv.analytics.aggregator import compute_analytics
from soartv.analytics.store import clear_events, get_events, record_event
from soartv.app import app

client = TestClient(app)


def _login_user(c):
    c.post("/auth/login", json={"username": "maya", "password": "maya123"})


def _login_admin(c):
    c.post("/auth/login", json={"username": "admin", "password": "admin123"})


def test_analytics_returns_empty_initially():
    clear_events()
    _login_admin(client)
    resp = client.get("/analytics")
    assert resp.status_code == 200
    body = resp.json()
    assert body["total_requests"] == 0
    assert body["avg_response_time_ms"] == 0.0
    assert body["empty_rate"] == 0.0


def test_analytics_tracks_recommendation_requests():
    clear_events()
    _login_user(client)
    client.get("/api/recommendations")
    client.get("/api/recommendations")
    client.get("/api/recommended")
    _login_admin(client)
    body = client.get("/analytics").json()
    assert body["total_requests"] == 2
    assert body["avg_users_returned"] == 3.0
    assert body["recommended_row_requests"] == 1
    assert {"name": "Drama", "count": 2} in body["top_genres"]


def test_get_events_filters_by_type():
    clear_events()
    record_event("recommendations", {"users_returned": 1})
    record_event("recommended_row", {"results": 4})
    assert len(get_events()) == 2
    assert [e["results"] for e in get_events("recommended_row")] == [4]


def test_compute_analytics_empty_rate():
    events = [
        {"type": "recommendations", "users_returned": 0, "projects_returned": 0, "response_time_ms": 10.0},
        {"type": "recommendations", "users_returned": 2, "projects_returned": 0, "response_time_ms": 20.0},
        {"type": "recommendations", "users_returned": 0, "projects_returned": 8, "response_time_ms": 30.0},
        {"type": "recommendations", "users_returned": 0, "projects_returned": 0, "response_time_ms": 40.0},
    ]
    body = compute_analytics(events)
    assert body["empty_rate"] == 50.0
    assert body["avg_response_time_ms"] == 25.0
    assert body["avg_projects_returned"] == 2.0
