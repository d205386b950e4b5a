"""Integration tests for GET /health."""

from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock

from fastapi import FastAPI
from fastapi.testclient import TestClient

from errors import register_error_handlers
from routes.health_routes import router as health_router


def _build_test_app(store_ok: bool = True, store_raises: bool = False) -> FastAPI:
    """
    Build a minimal FastAPI app with a mocked token store injected via lifespan.
    No real network connections are made.
    """
    mock_store = MagicMock()
    if store_raises:
        mock_store.ping = AsyncMock(side_effect=Exception("connection refused"))
    else:
        mock_store.ping = AsyncMock(return_value=store_ok)

    mock_manager = MagicMock()
    mock_manager.store = mock_store

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.token_manager = mock_manager
        yield

    app = FastAPI(lifespan=lifespan)
    register_error_handlers(app)
    app.include_router(health_router)
    return app


class TestHealthEndpoint:
    def test_healthy_when_store_ok(self):
        app = _build_test_app(store_ok=True)
        with TestClient(app) as client:
            resp = client.get("/health")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "healthy"
        assert body["checks"]["token_store"] == "ok"

    def test_unhealthy_when_ping_false(self):
        app = _build_test_app(store_ok=False)
        with TestClient(app) as client:
            resp = client.get("/health")
        assert resp.status_code == 503
        body = resp.json()
        assert body["status"] == "unhealthy"
        assert body["checks"]["token_store"] == "error"

    def test_unhealthy_when_ping_raises(self):
        app = _build_test_app(store_raises=True)
        with TestClient(app) as client:
            resp = client.get("/health")
        assert resp.status_code == 503
        assert resp.json()["checks"]["token_store"] == "error"

    def test_response_has_status_and_checks(self):
        app = _build_test_app()
        with TestClient(app) as client:
            body = client.get("/health").json()
        assert set(body) == {"status", "checks"}
