"""The inbound request, as the proxy sees it.

Router callbacks receive a :class:`Request` as their request context.
It is frozen: resolution reads the method, ``Host`` header, path and
scheme, and cannot alter them. The body is left unread on the ASGI
channel until the dispatcher streams it upstream.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote

from detour._internal.asgi import Receive
from detour.http.headers import Headers


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable inbound request.

    ``path`` is percent-decoded and is what routing tables and callbacks
    match on. ``raw_path`` is the path exactly as the client sent it and
    is what gets forwarded, so ``/files/a%3Fb.txt`` reaches the upstream
    with its ``%3F`` intact.
    """

    method: str
    path: str
    headers: Headers = field(default_factory=Headers)
    query_string: bytes = b""
    raw_path: bytes = b""
    scheme: str = "http"
    client: tuple[str, int] | None = None
    _receive: Receive | None = field(default=None, repr=False, compare=False)

    @property
    def host(self) -> str | None:
        """The ``Host`` header, exactly as the client sent it."""
        return self.headers.get("host")

    @property
    def protocol(self) -> str:
        """Protocol of the inbound connection, URL style (``"https:"``)."""
        return f"{self.scheme}:"

    @property
    def raw_url(self) -> str:
        """Still-encoded path plus query string, ready to append to an origin.

        Falls back to re-encoding ``path`` when the server did not supply
        ``raw_path`` (it is optional in ASGI).
        """
        path = self.raw_path.decode("latin-1") if self.raw_path else quote(self.path)
        if self.query_string:
            return f"{path}?{self.query_string.decode('latin-1')}"
        return path

    @property
    def has_body(self) -> bool:
        """True when the client announced a body (length or chunked)."""
        return "content-length" in self.headers or "transfer-encoding" in self.headers

    async def stream(self) -> AsyncIterator[bytes]:
        """Yield body chunks straight from the ASGI channel. Single use."""
        if self._receive is None:
            return
        while True:
            message = await self._receive()
            if message["type"] == "http.disconnect":
                return
            if chunk := message.get("body", b""):
                yield chunk
            if not message.get("more_body", False):
                return

    async def body(self) -> bytes:
        """Read the whole body. Consumes :meth:`stream`."""
        return b"".join([chunk async for chunk in self.stream()])

    @classmethod
    def from_asgi(cls, scope: dict[str, Any], receive: Receive) -> Request:
        client = scope.get("client")
        return cls(
            method=scope["method"],
            path=scope["path"],
            headers=Headers.from_asgi(scope.get("headers", ())),
            query_string=scope.get("query_string", b""),
            raw_path=scope.get("raw_path") or b"",
            scheme=scope.get("scheme", "http"),
            client=tuple(client) if client else None,
            _receive=receive,
        )
