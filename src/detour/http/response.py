"""Responses produced by the host pipeline.

Two shapes: :class:`Response` for bodies the app builds itself (local
routes, error handlers) and :class:`StreamingResponse` for upstream
answers, which are relayed chunk by chunk without buffering. Both are
frozen; middleware adjusts them through ``with_status``/``with_header``,
which return copies.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from dataclasses import dataclass, replace
from typing import Self


class _Adjustable:
    """``with_*`` helpers shared by both response types."""

    __slots__ = ()

    status: int
    headers: tuple[tuple[str, str], ...]

    def with_status(self, status: int) -> Self:
        return replace(self, status=status)  # type: ignore[type-var]

    def with_header(self, name: str, value: str) -> Self:
        return replace(self, headers=(*self.headers, (name, value)))  # type: ignore[type-var]

    def header(self, name: str) -> str | None:
        """First value of header *name*, case-insensitive."""
        wanted = name.lower()
        return next((value for key, value in self.headers if key.lower() == wanted), None)


@dataclass(frozen=True, slots=True)
class Response(_Adjustable):
    """A complete, in-memory response::

        Response("An error thrown in the router", status=502)
    """

    body: str | bytes = b""
    status: int = 200
    content_type: str | None = "text/plain; charset=utf-8"
    headers: tuple[tuple[str, str], ...] = ()

    @property
    def body_bytes(self) -> bytes:
        return self.body.encode("utf-8") if isinstance(self.body, str) else self.body

    @property
    def text(self) -> str:
        return self.body if isinstance(self.body, str) else self.body.decode("utf-8")


@dataclass(frozen=True, slots=True)
class StreamingResponse(_Adjustable):
    """A response whose body arrives as an async iterator of byte chunks.

    The proxy dispatcher wraps every upstream answer in one. Status and
    headers go out first; the sender then relays each chunk as it comes.
    """

    chunks: AsyncIterator[bytes]
    status: int = 200
    content_type: str | None = None
    headers: tuple[tuple[str, str], ...] = ()
