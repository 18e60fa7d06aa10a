"""Per-request target resolution.

:class:`Resolver` turns a request into a :data:`ResolutionOutcome`:

- ``Resolved(target)``: forward to *target*;
- ``NO_MATCH``: forward to the proxy's default target (also what an
  empty callback result means);
- ``Failed(cause)``: the router callback raised; *cause* is the exact
  exception object, unwrapped.

Resolution is always awaited, whatever the router variant, so sync and
async callbacks share one code path. Only a callback that returns an
awaitable actually suspends, and it suspends only its own request.

The strategy for the configured variant is picked once, in
``Resolver.__init__``. Requests never re-inspect the router option.
"""

import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any, TypeAlias
from dataclasses import dataclass

from detour._internal.invoke import invoke
from detour.http.request import Request
from detour.proxy.routes import (
    CallbackRouter,
    ObjectTarget,
    RouterCallback,
    RouterConfig,
    StringTarget,
    TableRouter,
)
from detour.proxy.table import RouteTable
from detour.proxy.target import TargetSpec, coerce_target

logger = logging.getLogger("detour.proxy")


@dataclass(frozen=True, slots=True)
class Resolved:
    target: TargetSpec


@dataclass(frozen=True, slots=True)
class NoMatch:
    """Nothing matched; the default target applies. Not an error."""


@dataclass(frozen=True, slots=True)
class Failed:
    cause: Exception


ResolutionOutcome: TypeAlias = Resolved | NoMatch | Failed

NO_MATCH = NoMatch()

_Strategy: TypeAlias = Callable[[Request], Awaitable[ResolutionOutcome]]


def _fixed(target: TargetSpec) -> _Strategy:
    outcome = Resolved(target)

    async def resolve(request: Request) -> ResolutionOutcome:
        return outcome

    return resolve


def _table(table: RouteTable) -> _Strategy:
    async def resolve(request: Request) -> ResolutionOutcome:
        target = table.match(request.host, request.path)
        return NO_MATCH if target is None else Resolved(target)

    return resolve


def _is_empty(result: Any) -> bool:
    """``None``, ``""`` and ``{}`` all mean "no opinion, use the default"."""
    return result is None or result == "" or (isinstance(result, Mapping) and not result)


def _callback(fn: RouterCallback) -> _Strategy:
    async def resolve(request: Request) -> ResolutionOutcome:
        # CancelledError is not an Exception: an abandoned request stops
        # here and its late result is never used.
        try:
            result = await invoke(fn, request)
            if _is_empty(result):
                return NO_MATCH
            return Resolved(coerce_target(result))
        except Exception as exc:
            logger.debug("router raised %s for %s %s", type(exc).__name__, request.method, request.path)
            return Failed(exc)

    return resolve


async def _unrouted(request: Request) -> ResolutionOutcome:
    return NO_MATCH


class Resolver:
    """Resolve the upstream for each request from a fixed router config.

    Usage::

        resolver = Resolver(normalize_router({"beta.localhost:6000": "https://localhost:6002"}))
        outcome = await resolver.resolve(request)

    A ``None`` config (no router configured) always yields ``NO_MATCH``.
    The resolver holds no per-request state and is safe to share across
    concurrent requests.
    """

    __slots__ = ("_strategy", "config")

    def __init__(self, config: RouterConfig | None) -> None:
        self.config = config
        match config:
            case None:
                self._strategy = _unrouted
            case StringTarget(target=target) | ObjectTarget(target=target):
                self._strategy = _fixed(target)
            case TableRouter(table=table):
                self._strategy = _table(table)
            case CallbackRouter(fn=fn):
                self._strategy = _callback(fn)

    async def resolve(self, request: Request) -> ResolutionOutcome:
        """Resolve *request* exactly once. Never raises for router errors."""
        return await self._strategy(request)


def propagate(outcome: ResolutionOutcome) -> TargetSpec | None:
    """Short-circuit a failed resolution into the host error path.

    Returns the target to forward to (``None`` for the default target).
    For ``Failed`` it re-raises the original exception, unchanged, so the
    host's error handlers pick the status and body. Nothing is forwarded
    and no response is written here.
    """
    match outcome:
        case Resolved(target=target):
            return target
        case NoMatch():
            return None
        case Failed(cause=cause):
            raise cause
