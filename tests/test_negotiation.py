"""Tests for detour.server.negotiation — handler return values to responses."""

import json

import pytest

from detour.http.response import Response, StreamingResponse
from detour.server.negotiation import negotiate


async def _empty():
    yield b""


class TestNegotiate:
    def test_response_passthrough(self) -> None:
        original = Response(body="hello", status=201)
        assert negotiate(original) is original

    def test_streaming_passthrough(self) -> None:
        original = StreamingResponse(_empty())
        assert negotiate(original) is original

    def test_str(self) -> None:
        result = negotiate("An error thrown in the router")
        assert result.status == 200
        assert result.content_type == "text/plain; charset=utf-8"
        assert result.text == "An error thrown in the router"

    def test_bytes(self) -> None:
        assert negotiate(b"\x00\x01").content_type == "application/octet-stream"

    def test_dict(self) -> None:
        result = negotiate({"target": "https://localhost:6003"})
        assert result.content_type == "application/json"
        assert json.loads(result.text) == {"target": "https://localhost:6003"}

    def test_value_and_status(self) -> None:
        result = negotiate(("bad gateway", 502))
        assert result.status == 502
        assert result.text == "bad gateway"


@pytest.mark.parametrize("value", [42, [1, 2], ("slow down", 503, {"Retry-After": "5"})])
def test_unsupported_value(value: object) -> None:
    with pytest.raises(TypeError, match="expected str, bytes, dict or Response"):
        negotiate(value)
