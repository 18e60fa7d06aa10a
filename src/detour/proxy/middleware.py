"""Reverse-proxy middleware.

Wires the pieces together for each request::

    outcome = await resolver.resolve(request)   # Resolved / NO_MATCH / Failed
    target = propagate(outcome) or default      # Failed re-raises the cause
    return await dispatcher.forward(request, target)

A router error therefore reaches the host's ``@app.error(...)`` handlers
exactly as the callback raised it, and the upstream is never contacted.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from detour.config import ProxyConfig
from detour.errors import ConfigurationError
from detour.http.request import Request
from detour.middleware.protocol import AnyResponse, Next
from detour.proxy.dispatcher import ProxyDispatcher
from detour.proxy.resolver import Resolver, propagate
from detour.proxy.routes import normalize_router
from detour.proxy.target import TargetSpec, parse_target_url

if TYPE_CHECKING:
    from detour.app import App

logger = logging.getLogger("detour.proxy")


class ProxyMiddleware:
    """Forward requests under ``config.prefix`` to a resolved upstream.

    Everything is validated here, at construction: a bad ``target`` or
    ``router`` raises ``ConfigurationError`` before the app serves a
    single request.

    Usage::

        app = App()
        proxy = ProxyMiddleware(ProxyConfig(
            target="https://localhost:6001",
            router={"beta.localhost:6000": "https://localhost:6002"},
        ))
        proxy.install(app)

    Requests outside ``prefix`` fall through to the next handler (local
    routes, then 404).
    """

    __slots__ = ("_prefix", "config", "default_target", "dispatcher", "resolver")

    def __init__(
        self,
        config: ProxyConfig,
        *,
        dispatcher: ProxyDispatcher | None = None,
    ) -> None:
        self.config = config
        try:
            self.default_target: TargetSpec = parse_target_url(config.target)
        except ValueError as exc:
            raise ConfigurationError(f"Invalid proxy target: {exc}") from exc

        self.resolver = Resolver(
            normalize_router(config.router) if config.router is not None else None
        )
        self.dispatcher = dispatcher or ProxyDispatcher(
            secure=config.secure,
            timeout=config.timeout,
            change_origin=config.change_origin,
            xfwd=config.xfwd,
        )

        stripped = "/" + config.prefix.strip("/")
        self._prefix = stripped if stripped != "/" else ""

    def install(self, app: App) -> ProxyMiddleware:
        """Add this middleware to *app* and close the upstream client on shutdown."""
        app.add_middleware(self)
        app.on_shutdown(self.dispatcher.aclose)
        return self

    def handles(self, path: str) -> bool:
        """True if *path* is under the proxied prefix."""
        if not self._prefix:
            return True
        return path == self._prefix or path.startswith(self._prefix + "/")

    async def __call__(self, request: Request, next: Next) -> AnyResponse:
        """Resolve, then forward or hand the failure to the host."""
        if not self.handles(request.path):
            return await next(request)

        outcome = await self.resolver.resolve(request)
        target = propagate(outcome)
        if target is None:
            target = self.default_target
        else:
            logger.debug("router new target: %s -> %s", self.default_target, target)

        return await self.dispatcher.forward(request, target)
