from __future__ import annotations

import json
import logging
from unittest.mock import patch

import pytest
from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient

from easymeal.app import app
from easymeal.middleware.errors import (
    PRODUCTION_ERROR_MESSAGE,
    ErrorHandlerMiddleware,
    RequestLoggingMiddleware,
)
from easymeal.middleware.rate_limit import RateLimiter, RateLimitMiddleware
from easymeal.middleware.security import (
    SECURITY_HEADERS,
    MAX_STRING_LENGTH,
    RequestSizeLimitMiddleware,
    is_valid_uuid,
    sanitize_preferences,
    sanitize_string,
)
from easymeal.preferences.models import RecipePreferences

client = TestClient(app)


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def _app_with(*middleware: tuple) -> FastAPI:
    test_app = FastAPI()

    @test_app.get("/api/ping")
    def ping() -> dict:
        return {"pong": True}

    @test_app.post("/api/echo")
    def echo(body: dict) -> dict:
        return body

    @test_app.get("/api/boom")
    def boom() -> dict:
        raise RuntimeError("kitchen on fire")

    @test_app.get("/api/teapot")
    def teapot() -> dict:
        raise HTTPException(status_code=418, detail="short and stout")

    for cls, kwargs in middleware:
        test_app.add_middleware(cls, **kwargs)
    return test_app


# ── Security headers ─────────────────────────────────────────────────────


def test_security_headers_on_every_response():
    resp = client.get("/health")
    for name, value in SECURITY_HEADERS.items():
        assert resp.headers[name] == value


def test_security_headers_on_error_responses():
    resp = client.get("/api/auth/me")
    assert resp.status_code == 401
    assert resp.headers["X-Frame-Options"] == "DENY"


@patch("easymeal.recipes.store.list_recipes", side_effect=RuntimeError("pantry exploded"))
def test_security_headers_on_unhandled_errors(mock_list):
    c = TestClient(app)
    c.post("/api/auth/login", json={"username": "demo", "password": "demo123"})
    resp = c.get("/api/recipes")
    assert resp.status_code == 500
    assert resp.json()["error"] in ("pantry exploded", PRODUCTION_ERROR_MESSAGE)
    for name, value in SECURITY_HEADERS.items():
        assert resp.headers[name] == value


# ── Request size limit ───────────────────────────────────────────────────


def test_oversized_request_rejected():
    test_app = _app_with((RequestSizeLimitMiddleware, {"max_bytes": 64}))
    c = TestClient(test_app)
    resp = c.post("/api/echo", json={"notes": "x" * 200})
    assert resp.status_code == 413
    assert resp.json() == {"error": "Request too large"}


def test_small_request_passes_size_limit():
    test_app = _app_with((RequestSizeLimitMiddleware, {"max_bytes": 64}))
    c = TestClient(test_app)
    resp = c.post("/api/echo", json={"notes": "short"})
    assert resp.status_code == 200
    assert resp.json() == {"notes": "short"}


# ── Rate limiting ────────────────────────────────────────────────────────


class TestRateLimiter:
    def test_allows_up_to_max(self):
        limiter = RateLimiter(window_seconds=60, max_requests=3, clock=FakeClock())
        assert [limiter.hit("1.2.3.4") for _ in range(4)] == [True, True, True, False]

    def test_keys_are_independent(self):
        limiter = RateLimiter(window_seconds=60, max_requests=1, clock=FakeClock())
        assert limiter.hit("a")
        assert limiter.hit("b")
        assert not limiter.hit("a")

    def test_window_resets_after_expiry(self):
        clock = FakeClock()
        limiter = RateLimiter(window_seconds=60, max_requests=1, clock=clock)
        assert limiter.hit("a")
        assert not limiter.hit("a")
        clock.now += 61
        assert limiter.hit("a")

    def test_expired_windows_are_pruned(self):
        clock = FakeClock()
        limiter = RateLimiter(window_seconds=10, max_requests=1000, clock=clock)
        for i in range(50):
            limiter.hit(f"client-{i}")
        clock.now += 11
        for _ in range(50):
            limiter.hit("fresh")
        assert len(limiter) == 1

    def test_reset(self):
        limiter = RateLimiter(window_seconds=60, max_requests=1, clock=FakeClock())
        limiter.hit("a")
        limiter.reset()
        assert limiter.hit("a")


def test_rate_limit_middleware_returns_429():
    limiter = RateLimiter(window_seconds=60, max_requests=2, clock=FakeClock())
    c = TestClient(_app_with((RateLimitMiddleware, {"limiter": limiter})))
    headers = {"X-Forwarded-For": "203.0.113.7"}
    assert c.get("/api/ping", headers=headers).status_code == 200
    assert c.get("/api/ping", headers=headers).status_code == 200
    resp = c.get("/api/ping", headers=headers)
    assert resp.status_code == 429
    assert resp.json() == {"error": "Too many requests"}
    # Another address still has its own budget
    assert c.get("/api/ping", headers={"X-Forwarded-For": "198.51.100.1"}).status_code == 200


def test_rate_limit_only_applies_to_api_paths():
    limiter = RateLimiter(window_seconds=60, max_requests=0, clock=FakeClock())
    test_app = _app_with((RateLimitMiddleware, {"limiter": limiter}))

    @test_app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    c = TestClient(test_app)
    assert c.get("/health").status_code == 200
    assert c.get("/api/ping").status_code == 429


# ── Error handling ───────────────────────────────────────────────────────


def test_unhandled_error_returns_json_500(caplog):
    c = TestClient(_app_with((ErrorHandlerMiddleware, {"production": False})))
    with caplog.at_level(logging.ERROR, logger="easymeal.middleware.errors"):
        resp = c.get("/api/boom")
    assert resp.status_code == 500
    assert resp.json() == {"error": "kitchen on fire", "type": "RuntimeError"}
    assert "Unhandled exception on GET /api/boom" in caplog.text


def test_unhandled_error_hides_message_in_production():
    c = TestClient(_app_with((ErrorHandlerMiddleware, {"production": True})))
    resp = c.get("/api/boom")
    assert resp.status_code == 500
    assert resp.json() == {"error": PRODUCTION_ERROR_MESSAGE}


def test_http_exceptions_pass_through():
    c = TestClient(_app_with((ErrorHandlerMiddleware, {"production": False})))
    resp = c.get("/api/teapot")
    assert resp.status_code == 418
    assert resp.json() == {"detail": "short and stout"}


def test_request_logging_writes_json_line(caplog):
    c = TestClient(_app_with((RequestLoggingMiddleware, {})))
    with caplog.at_level(logging.INFO, logger="easymeal.requests"):
        c.get("/api/ping")
    record = json.loads(caplog.records[-1].getMessage())
    assert record["method"] == "GET"
    assert record["path"] == "/api/ping"
    assert record["status"] == 200
    assert isinstance(record["duration"], int)
    assert "timestamp" in record


# ── Sanitisation ─────────────────────────────────────────────────────────


@pytest.mark.parametrize(
    "value,expected",
    [
        ("  hello  ", "hello"),
        ("<b>bold</b>", "bbold/b"),
        (42, ""),
        (None, ""),
    ],
)
def test_sanitize_string(value, expected):
    assert sanitize_string(value) == expected


def test_sanitize_string_truncates():
    assert len(sanitize_string("a" * (MAX_STRING_LENGTH + 50))) == MAX_STRING_LENGTH


def test_is_valid_uuid():
    assert is_valid_uuid("3f2b8c1e-4a5d-4e6f-8a9b-0c1d2e3f4a5b")
    assert not is_valid_uuid("3f2b8c1e-4a5d-0e6f-8a9b-0c1d2e3f4a5b")  # version 0
    assert not is_valid_uuid("not-a-uuid")


def test_sanitize_preferences_leaves_original_untouched():
    prefs = RecipePreferences(protein=" <tofu> ", cuisine="   ", fruits=["fig", ""])
    cleaned = sanitize_preferences(prefs)
    assert cleaned.protein == "tofu"
    assert cleaned.cuisine is None
    assert cleaned.fruits == ["fig"]
    assert prefs.protein == " <tofu> "
