"""Shared fixtures: an in-process upstream and a proxy app factory."""

from collections.abc import Callable
from typing import Any

import httpx
import pytest

from detour.app import App
from detour.config import ProxyConfig
from detour.proxy import ProxyDispatcher, ProxyMiddleware

UPSTREAM_NAMES = {6001: "A", 6002: "B", 6003: "C"}


class Upstream:
    """Stand-in for three upstream servers on ports 6001-6003.

    Answers its name (``A``/``B``/``C``) when reached over https and
    ``NOT HTTPS <name>`` otherwise. Every request is recorded.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.transport = httpx.MockTransport(self.handle)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        name = UPSTREAM_NAMES.get(request.url.port or 0, "?")
        text = name if request.url.scheme == "https" else f"NOT HTTPS {name}"
        return httpx.Response(200, text=text, headers={"x-upstream": name})


@pytest.fixture
def upstream() -> Upstream:
    return Upstream()


@pytest.fixture
def make_proxy_app(upstream: Upstream) -> Callable[..., App]:
    """Build an ``App`` with a ``ProxyMiddleware`` forwarding to *upstream*."""

    def factory(router: Any = None, **options: Any) -> App:
        options.setdefault("target", "https://localhost:6001")
        config = ProxyConfig(router=router, **options)
        dispatcher = ProxyDispatcher(
            secure=config.secure,
            change_origin=config.change_origin,
            xfwd=config.xfwd,
            transport=upstream.transport,
        )
        app = App()
        ProxyMiddleware(config, dispatcher=dispatcher).install(app)
        return app

    return factory
