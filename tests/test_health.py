from fastapi.testclient import TestClient

from taskview.main import create_app


def _get_health_route(app):
    for route in app.routes:
        if getattr(route, "path", None) == "/health" and "GET" in getattr(
            route, "methods", set()
        ):
            return route
    raise AssertionError("Health route not registered")


def test_health_endpoint():
    app = create_app()

    route = _get_health_route(app)

    assert route.status_code == 200
    assert route.endpoint() == {"status": "ok"}


def test_startup_loads_config(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("TASKVIEW_DEFAULT_PER_PAGE", "15")
    monkeypatch.delenv("TASKVIEW_RAW_FALLBACK", raising=False)

    app = create_app()
    with TestClient(app) as client:
        response = client.get("/health")
        config = app.state.config

    assert response.json() == {"status": "ok"}
    assert config.default_per_page == 15
    assert config.raw_fallback is True
