"""Unit tests for RequestBodyCaptureMiddleware."""

from __future__ import annotations

import pytest
from fastapi import FastAPI, Request
from httpx import ASGITransport, AsyncClient

from tree_service.app.middleware.body_capture import RequestBodyCaptureMiddleware


class TestRequestBodyCaptureMiddleware:
    """Test suite for RequestBodyCaptureMiddleware."""

    @pytest.fixture
    def app(self) -> FastAPI:
        """Minimal app echoing the captured body next to the body the route read."""
        app = FastAPI()
        app.add_middleware(RequestBodyCaptureMiddleware, max_bytes=16)

        @app.post("/echo")
        async def echo(request: Request):
            body = await request.body()
            captured = getattr(request.state, "request_body", None)
            return {
                "received": body.decode(),
                "captured": captured.decode() if captured is not None else None,
            }

        return app

    @pytest.fixture
    async def client(self, app: FastAPI) -> AsyncClient:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            yield ac

    async def test_captures_json_body(self, client: AsyncClient):
        response = await client.post(
            "/echo", content=b'{"a": 1}', headers={"content-type": "application/json"}
        )

        assert response.json() == {"received": '{"a": 1}', "captured": '{"a": 1}'}

    async def test_truncates_to_max_bytes_without_touching_route_body(self, client: AsyncClient):
        payload = '{"name": "' + "x" * 40 + '"}'

        response = await client.post(
            "/echo", content=payload.encode(), headers={"content-type": "application/json"}
        )

        data = response.json()
        assert data["received"] == payload
        assert data["captured"] == payload[:16]

    async def test_ignores_non_json_bodies(self, client: AsyncClient):
        response = await client.post(
            "/echo", content=b"plain text", headers={"content-type": "text/plain"}
        )

        assert response.json() == {"received": "plain text", "captured": None}
