"""Local routes served by the host app itself.

Exact-path lookup only: a proxy host typically serves a handful of fixed
endpoints (health checks, status pages) and forwards everything else.
Routes are registered during setup and frozen when the app freezes.
"""

import inspect
from dataclasses import dataclass, field

from detour._internal.types import Handler
from detour.errors import MethodNotAllowed, NotFound


@dataclass(frozen=True, slots=True)
class Route:
    """A local route. ``takes_request`` is read off the handler signature once."""

    path: str
    handler: Handler
    methods: frozenset[str]
    takes_request: bool = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "takes_request", bool(inspect.signature(self.handler).parameters)
        )


class Router:
    """Exact-path router.

    Usage::

        router = Router()
        router.add(Route("/healthz", handler, frozenset({"GET"})))
        router.compile()
        route = router.match("GET", "/healthz")
    """

    __slots__ = ("_by_path", "_compiled")

    def __init__(self) -> None:
        self._by_path: dict[str, dict[str, Route]] = {}
        self._compiled = False

    def add(self, route: Route) -> None:
        """Add a route. Must be called before compile()."""
        if self._compiled:
            msg = "Cannot add routes after compilation."
            raise RuntimeError(msg)
        by_method = self._by_path.setdefault(route.path, {})
        for method in route.methods:
            by_method[method] = route

    def compile(self) -> None:
        """Freeze the lookup table."""
        self._compiled = True

    def match(self, method: str, path: str) -> Route:
        """Return the route for *method* and *path*.

        Raises:
            NotFound: No route is registered for *path*.
            MethodNotAllowed: *path* exists but not for *method*.
        """
        by_method = self._by_path.get(path)
        if by_method is None:
            raise NotFound(f"No route or proxy for {method} {path}")
        route = by_method.get(method)
        if route is None:
            raise MethodNotAllowed(frozenset(by_method))
        return route

    @property
    def routes(self) -> tuple[Route, ...]:
        """All registered routes, one entry per route object."""
        seen: dict[int, Route] = {}
        for by_method in self._by_path.values():
            for route in by_method.values():
                seen.setdefault(id(route), route)
        return tuple(seen.values())
