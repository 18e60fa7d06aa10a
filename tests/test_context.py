"""Tests for detour.context — request-scoped ContextVar."""

import pytest

from detour.app import App
from detour.context import get_request, request_var
from detour.http.request import Request
from detour.testing import TestClient


class TestRequestVar:
    def test_get_request_raises_outside_context(self) -> None:
        """get_request raises LookupError when no request is active."""
        with pytest.raises(LookupError):
            get_request()

    def test_set_and_get_request(self) -> None:
        scope = {
            "type": "http",
            "method": "GET",
            "path": "/test",
            "headers": [],
            "query_string": b"",
        }

        async def receive():
            return {"type": "http.request", "body": b"", "more_body": False}

        request = Request.from_asgi(scope, receive)
        token = request_var.set(request)
        try:
            assert get_request() is request
            assert get_request().path == "/test"
        finally:
            request_var.reset(token)


class TestRequestVarInPipeline:
    async def test_router_callback_can_reach_request(self, make_proxy_app) -> None:
        seen: list[str] = []

        def router(request):
            seen.append(get_request().path)
            return None

        app = make_proxy_app(router)
        async with TestClient(app) as client:
            await client.get("/via-context")

        assert seen == ["/via-context"]

    async def test_reset_after_request(self) -> None:
        app = App()

        @app.route("/")
        def index():
            return get_request().path

        async with TestClient(app) as client:
            response = await client.get("/")

        assert response.text == "/"
        with pytest.raises(LookupError):
            get_request()
