"""Reverse proxy with per-request target resolution.

Pieces, leaves first:

- ``target``     -- ``TargetSpec`` and URL parsing
- ``table``      -- ordered host/path routing table (``RouteTable``)
- ``routes``     -- ``normalize_router``: raw option -> ``RouterConfig`` variant
- ``resolver``   -- ``Resolver`` and ``propagate`` (the failure short-circuit)
- ``dispatcher`` -- ``ProxyDispatcher``: forwarding over httpx
- ``middleware`` -- ``ProxyMiddleware``: all of the above as app middleware
"""

from detour.proxy.dispatcher import ProxyDispatcher
from detour.proxy.middleware import ProxyMiddleware
from detour.proxy.resolver import (
    NO_MATCH,
    Failed,
    NoMatch,
    Resolved,
    ResolutionOutcome,
    Resolver,
    propagate,
)
from detour.proxy.routes import (
    CallbackRouter,
    ObjectTarget,
    RouterConfig,
    StringTarget,
    TableRouter,
    normalize_router,
)
from detour.proxy.table import RouteTable
from detour.proxy.target import TargetSpec, parse_target_url

__all__ = [
    "NO_MATCH",
    "CallbackRouter",
    "Failed",
    "NoMatch",
    "ObjectTarget",
    "ProxyDispatcher",
    "ProxyMiddleware",
    "Resolved",
    "ResolutionOutcome",
    "Resolver",
    "RouteTable",
    "RouterConfig",
    "StringTarget",
    "TableRouter",
    "TargetSpec",
    "normalize_router",
    "parse_target_url",
    "propagate",
]
