"""Middleware contract; the proxy is the main implementation."""

from detour.middleware.protocol import AnyResponse, Middleware, Next

__all__ = [
    "AnyResponse",
    "Middleware",
    "Next",
]
