from __future__ import annotations

import json
import logging
from types import SimpleNamespace
from uuid import UUID

from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from scan2eat.core import rate_limiter as rate_limiter_module
from scan2eat.core.database import get_db
from scan2eat.core.errors import register_exception_handlers
from scan2eat.core.logging_setup import JsonFormatter
from scan2eat.core.rate_limiter import InMemoryRateLimiterService
from scan2eat.middleware.rate_limit import ApiRateLimitMiddleware
from scan2eat.routers.orders import router as orders_router


def test_request_id_is_returned_in_response_header(monkeypatch):
    from scan2eat import main

    monkeypatch.setattr(main, "_startup_tasks", lambda: None)

    with TestClient(main.app) as client:
        generated = client.get("/health")
        propagated = client.get("/health", headers={"X-Request-ID": "req-123"})

    assert generated.status_code == 200
    UUID(generated.headers.get("X-Request-ID"))
    assert propagated.headers.get("X-Request-ID") == "req-123"


def test_cors_preflight_allows_access_token_header(monkeypatch):
    from scan2eat import main
    from scan2eat.core.config import CORS_ORIGINS

    monkeypatch.setattr(main, "_startup_tasks", lambda: None)
    origin = CORS_ORIGINS[0] if CORS_ORIGINS[0] != "*" else "http://localhost:5173"

    with TestClient(main.app) as client:
        response = client.options(
            "/api/orders/1",
            headers={
                "Origin": origin,
                "Access-Control-Request-Method": "PATCH",
                "Access-Control-Request-Headers": "x-access-token",
            },
        )

    assert response.status_code == 200
    assert "x-access-token" in response.headers.get("access-control-allow-headers", "").lower()


def test_rate_limit_is_isolated_per_client() -> None:
    service = InMemoryRateLimiterService(limit=2, window_seconds=60)

    first = service.check(client_id="10.0.0.1")
    second = service.check(client_id="10.0.0.1")
    blocked = service.check(client_id="10.0.0.1")
    other_client = service.check(client_id="10.0.0.2")

    assert first.allowed is True
    assert second.remaining == 0
    assert blocked.allowed is False
    assert blocked.retry_after_seconds >= 1
    assert other_client.allowed is True


def test_middleware_limits_api_paths_only() -> None:
    limiter = InMemoryRateLimiterService(limit=1, window_seconds=60)
    app = FastAPI()
    app.add_middleware(ApiRateLimitMiddleware, rate_limiter=limiter)

    @app.get("/api/ping")
    def ping():
        return {"ok": True}

    @app.get("/health")
    def health():
        return {"status": "ok"}

    with TestClient(app) as client:
        ok = client.get("/api/ping")
        blocked = client.get("/api/ping")
        health_one = client.get("/health")
        health_two = client.get("/health")

    assert ok.status_code == 200
    assert ok.headers["X-RateLimit-Limit"] == "1"
    assert blocked.status_code == 429
    assert "Retry-After" in blocked.headers
    assert health_one.status_code == 200
    assert health_two.status_code == 200


def test_middleware_ignores_client_supplied_forwarded_hops() -> None:
    limiter = InMemoryRateLimiterService(limit=2, window_seconds=60)
    app = FastAPI()
    app.add_middleware(ApiRateLimitMiddleware, rate_limiter=limiter)

    @app.get("/api/ping")
    def ping():
        return {"ok": True}

    with TestClient(app) as client:
        codes = [
            client.get("/api/ping", headers={"X-Forwarded-For": f"10.0.0.{i}, 203.0.113.7"}).status_code
            for i in range(5)
        ]

    assert codes == [200, 200, 429, 429, 429]


def test_idle_clients_are_forgotten_after_window(monkeypatch) -> None:
    clock = SimpleNamespace(now=1000.0)
    monkeypatch.setattr(rate_limiter_module, "time", SimpleNamespace(monotonic=lambda: clock.now))
    service = InMemoryRateLimiterService(limit=5, window_seconds=60)

    for i in range(3):
        service.check(client_id=f"10.0.0.{i}")
    clock.now += 61
    service.check(client_id="10.0.0.99")

    assert list(service._store) == ["10.0.0.99"]


class FailingQuery:
    def filter(self, *_args, **_kwargs):
        return self

    def order_by(self, *_args, **_kwargs):
        return self

    def all(self):
        raise OperationalError("SELECT", {}, Exception("password=hunter2 host=db.internal"))


class FailingDb:
    def query(self, _model):
        return FailingQuery()


def test_store_failure_returns_generic_500_without_details(caplog):
    app = FastAPI()
    register_exception_handlers(app)
    app.include_router(orders_router)
    app.dependency_overrides[get_db] = lambda: FailingDb()

    with caplog.at_level(logging.ERROR):
        with TestClient(app) as client:
            response = client.get("/api/orders")

    assert response.status_code == 500
    assert response.json() == {"detail": "Server error"}
    assert "hunter2" not in response.text
    assert any("store failure" in record.getMessage() for record in caplog.records)


def test_json_formatter_masks_tokens():
    formatter = JsonFormatter("%(message)s")
    record = logging.LogRecord(
        name="scan2eat.test",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg="rejected x-access-token: %s",
        args=("super-secret",),
        exc_info=None,
    )

    payload = json.loads(formatter.format(record))

    assert "super-secret" not in payload["message"]
    assert payload["level"] == "WARNING"
    assert payload["module"] == "scan2eat.test"
