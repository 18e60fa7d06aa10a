"""Detour exception hierarchy.

Shared across the host app, middleware and the proxy core so every
module raises and catches the same types.

Errors raised by a router callback are deliberately *not* part of this
hierarchy: they travel to the host error handlers exactly as raised.
"""

from dataclasses import dataclass


class DetourError(Exception):
    """Base for all detour-specific errors."""


class ConfigurationError(DetourError):
    """Raised when app or proxy configuration is invalid.

    Always raised at construction time (``ProxyMiddleware(...)``,
    ``normalize_router(...)``, ``App._freeze()``), never per request.
    """


@dataclass(frozen=True, slots=True)
class HTTPError(DetourError):
    """An error that maps directly to an HTTP status code.

    Raised by the host app, middleware, or the dispatcher. The ASGI
    handler catches these and dispatches to the matching ``@app.error()``
    handler.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """404 — no local route and no proxy claimed the request path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class MethodNotAllowed(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """405 — local route exists but not for this HTTP method.

    Includes an ``Allow`` header listing the valid methods.
    """

    def __init__(self, allowed: frozenset[str], detail: str = "") -> None:
        allow_value = ", ".join(sorted(allowed))
        default_detail = f"Method not allowed. Allowed methods: {allow_value}"
        super().__init__(
            status=405,
            detail=detail or default_detail,
            headers=(("Allow", allow_value),),
        )


class BadGateway(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """502 — the upstream could not be reached or answered with garbage."""

    def __init__(self, detail: str = "Bad Gateway") -> None:
        super().__init__(status=502, detail=detail)


class GatewayTimeout(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """504 — the upstream did not answer within the configured timeout."""

    def __init__(self, detail: str = "Gateway Timeout") -> None:
        super().__init__(status=504, detail=detail)
