"""
Name: Middleware Tests

Responsibilities:
  - Validate request id propagation and generation
  - Validate body limit (declared and streamed) and security headers
"""

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from taller_charli.crosscutting.error_responses import (
    AppHTTPException,
    app_exception_handler,
)
from taller_charli.crosscutting.middleware import (
    BodyLimitMiddleware,
    RequestContextMiddleware,
)
from taller_charli.crosscutting.security import SecurityHeadersMiddleware, build_csp

pytestmark = pytest.mark.unit


def _app(*, max_bytes: int = 16, is_production: bool = False) -> FastAPI:
    app = FastAPI()
    app.add_exception_handler(AppHTTPException, app_exception_handler)

    @app.post("/echo")
    async def echo(request: Request):
        body = await request.body()
        return {"size": len(body), "request_id": request.state.request_id}

    @app.get("/ping")
    async def ping(request: Request):
        return {"request_id": request.state.request_id}

    app.add_middleware(BodyLimitMiddleware, max_bytes=max_bytes)
    app.add_middleware(SecurityHeadersMiddleware, is_production=is_production)
    app.add_middleware(RequestContextMiddleware)
    return app


def test_generates_request_id_when_missing():
    res = TestClient(_app()).get("/ping")

    assert res.status_code == 200
    assert res.headers["x-request-id"] == res.json()["request_id"]
    assert len(res.json()["request_id"]) == 36


def test_keeps_incoming_request_id():
    res = TestClient(_app()).get("/ping", headers={"X-Request-Id": "abc-123"})

    assert res.headers["x-request-id"] == "abc-123"
    assert res.json()["request_id"] == "abc-123"


def test_replaces_oversized_request_id():
    res = TestClient(_app()).get("/ping", headers={"X-Request-Id": "x" * 200})

    assert res.headers["x-request-id"] != "x" * 200


def test_body_within_limit_passes():
    res = TestClient(_app()).post("/echo", content=b"0123456789")

    assert res.status_code == 200
    assert res.json()["size"] == 10


def test_declared_body_over_limit_is_413():
    res = TestClient(_app()).post("/echo", content=b"x" * 17)

    assert res.status_code == 413
    assert res.headers["content-type"].startswith("application/problem+json")
    body = res.json()
    assert body["code"] == "PAYLOAD_TOO_LARGE"
    assert body["success"] is False
    assert body["errors"][0]["request_id"] == res.headers["x-request-id"]


def test_streamed_body_over_limit_is_413():
    def chunks():
        yield b"x" * 10
        yield b"x" * 10

    res = TestClient(_app()).post("/echo", content=chunks())

    assert res.status_code == 413
    assert res.json()["code"] == "PAYLOAD_TOO_LARGE"


def test_security_headers_outside_production():
    res = TestClient(_app()).get("/ping")

    assert res.headers["x-content-type-options"] == "nosniff"
    assert res.headers["x-frame-options"] == "DENY"
    assert "'unsafe-inline'" in res.headers["content-security-policy"]
    assert "strict-transport-security" not in res.headers


def test_hsts_only_in_production_behind_https():
    client = TestClient(_app(is_production=True))

    plain = client.get("/ping")
    proxied = client.get("/ping", headers={"X-Forwarded-Proto": "https"})

    assert "strict-transport-security" not in plain.headers
    assert proxied.headers["strict-transport-security"].startswith("max-age=")
    assert "'unsafe-inline'" not in proxied.headers["content-security-policy"]


def test_csp_always_denies_framing():
    for strict in (True, False):
        assert "frame-ancestors 'none'" in build_csp(strict)


def test_streamed_body_over_limit_on_json_route_is_413():
    app = _app()

    @app.post("/json")
    async def json_route(payload: dict):
        return payload

    def chunks():
        yield b'{"a": "' + b"x" * 20
        yield b'"}'

    res = TestClient(app).post(
        "/json", content=chunks(), headers={"Content-Type": "application/json"}
    )

    assert res.status_code == 413
    assert res.json()["code"] == "PAYLOAD_TOO_LARGE"
