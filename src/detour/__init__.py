"""Detour — reverse-proxy middleware with dynamic target resolution.

For every inbound request, detour decides which upstream receives it:
a fixed URL, a ``{host, port, protocol}`` object, a sync or async
callback, or an ordered host/path routing table.

Basic usage::

    from detour import App, ProxyConfig, ProxyMiddleware

    app = App()
    ProxyMiddleware(ProxyConfig(
        target="https://localhost:6001",
        router={
            "beta.localhost:6000": "https://localhost:6002",
            "localhost:6000/api": "https://localhost:6003",
        },
    )).install(app)

Serve ``app`` with any ASGI server.
"""

__version__ = "0.1.0"
__all__ = [
    "AnyResponse",
    "App",
    "AppConfig",
    "BadGateway",
    "ConfigurationError",
    "DetourError",
    "GatewayTimeout",
    "HTTPError",
    "Middleware",
    "Next",
    "NotFound",
    "ProxyConfig",
    "ProxyMiddleware",
    "Request",
    "Response",
    "StreamingResponse",
    "TargetSpec",
    "get_request",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import detour`` fast while providing a clean top-level API.
    """
    if name == "App":
        from detour.app import App

        return App

    if name in ("AppConfig", "ProxyConfig"):
        from detour import config as _config

        return getattr(_config, name)

    if name == "Request":
        from detour.http.request import Request

        return Request

    if name in ("Response", "StreamingResponse"):
        from detour.http import response as _resp

        return getattr(_resp, name)

    if name in ("AnyResponse", "Middleware", "Next"):
        from detour.middleware import protocol as _mw

        return getattr(_mw, name)

    if name in ("ProxyMiddleware", "TargetSpec"):
        from detour import proxy as _proxy

        return getattr(_proxy, name)

    if name == "get_request":
        from detour.context import get_request

        return get_request

    if name in (
        "BadGateway",
        "ConfigurationError",
        "DetourError",
        "GatewayTimeout",
        "HTTPError",
        "NotFound",
    ):
        from detour import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
