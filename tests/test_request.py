"""Tests for detour.http.request — the immutable request context."""

import pytest

from detour.http.headers import Headers
from detour.http.request import Request


def _scope(**overrides) -> dict:
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/api",
        "raw_path": b"/api",
        "headers": [(b"host", b"localhost:6000"), (b"content-length", b"11")],
        "query_string": b"page=2",
    }
    scope.update(overrides)
    return scope


def _receive(*chunks: bytes):
    messages = [
        {"type": "http.request", "body": chunk, "more_body": i < len(chunks) - 1}
        for i, chunk in enumerate(chunks)
    ]

    async def receive():
        if messages:
            return messages.pop(0)
        return {"type": "http.disconnect"}

    return receive


class TestRequestMetadata:
    def test_from_asgi(self) -> None:
        request = Request.from_asgi(_scope(client=["10.0.0.7", 51000]), _receive(b""))
        assert request.method == "GET"
        assert request.path == "/api"
        assert request.host == "localhost:6000"
        assert request.client == ("10.0.0.7", 51000)

    def test_scheme_defaults_to_http(self) -> None:
        request = Request.from_asgi(_scope(), _receive(b""))
        assert request.scheme == "http"
        assert request.protocol == "http:"

    def test_https_protocol(self) -> None:
        request = Request.from_asgi(_scope(scheme="https"), _receive(b""))
        assert request.protocol == "https:"

    def test_no_host(self) -> None:
        request = Request.from_asgi(_scope(headers=[]), _receive(b""))
        assert request.host is None

    def test_frozen(self) -> None:
        request = Request.from_asgi(_scope(), _receive(b""))
        with pytest.raises(AttributeError):
            request.path = "/other"  # type: ignore[misc]


class TestRawUrl:
    def test_includes_query(self) -> None:
        request = Request.from_asgi(_scope(), _receive(b""))
        assert request.raw_url == "/api?page=2"

    def test_without_query(self) -> None:
        request = Request.from_asgi(_scope(query_string=b""), _receive(b""))
        assert request.raw_url == "/api"

    def test_keeps_client_encoding(self) -> None:
        scope = _scope(path="/files/a?b/c", raw_path=b"/files/a%3Fb%2Fc", query_string=b"")
        request = Request.from_asgi(scope, _receive(b""))
        assert request.path == "/files/a?b/c"
        assert request.raw_url == "/files/a%3Fb%2Fc"

    def test_reencodes_when_raw_path_missing(self) -> None:
        request = Request(method="GET", path="/a b", query_string=b"x=1")
        assert request.raw_url == "/a%20b?x=1"


class TestHasBody:
    def test_content_length(self) -> None:
        assert Request.from_asgi(_scope(), _receive(b"")).has_body

    def test_chunked(self) -> None:
        request = Request("POST", "/", headers=Headers([("Transfer-Encoding", "chunked")]))
        assert request.has_body

    def test_neither(self) -> None:
        assert not Request("GET", "/", headers=Headers([("host", "a")])).has_body


class TestRequestBody:
    async def test_body_joins_chunks(self) -> None:
        request = Request.from_asgi(_scope(), _receive(b"hello ", b"world"))
        assert await request.body() == b"hello world"

    async def test_stream_skips_empty_chunks(self) -> None:
        request = Request.from_asgi(_scope(), _receive(b"a", b"", b"b"))
        assert [chunk async for chunk in request.stream()] == [b"a", b"b"]

    async def test_stream_stops_on_disconnect(self) -> None:
        async def receive():
            return {"type": "http.disconnect"}

        request = Request.from_asgi(_scope(), receive)
        assert [chunk async for chunk in request.stream()] == []

    async def test_without_channel_is_empty(self) -> None:
        assert await Request("GET", "/").body() == b""
