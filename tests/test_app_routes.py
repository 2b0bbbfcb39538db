import pytest

pytest.importorskip("fastapi")

from peermentor.main import app, health_check, list_routes


def test_health_check():
    assert health_check()["status"] == "healthy"


def test_lifecycle_routes_registered():
    paths = app.openapi()["paths"]

    assert {
        "/sessions/request",
        "/sessions/{session_id}/accept",
        "/sessions/{session_id}/end",
        "/sessions/active",
        "/sessions/logs",
        "/sessions/pending",
        "/questions/{question_id}/answer",
        "/notifications/read-all",
        "/matching/mentors",
        "/admin/stats",
        "/users/{user_id}",
        "/users/mentors/apply",
    } <= set(paths)
    assert "post" in paths["/sessions/{session_id}/accept"]


def test_debug_routes_include_router_endpoints():
    routes = {r["path"]: r["methods"] for r in list_routes()["routes"]}

    assert routes["/sessions/request"] == ["POST"]
    assert routes["/health"] == ["GET"]
    assert "PUT" in routes["/users/{user_id}"]
    assert "GET" in routes["/users/{user_id}"]
