"""Router configuration, classified once.

The raw ``router`` option can be a URL string, a ``{host, port,
protocol}`` object, a callable, or a ``pattern -> url`` table.
:func:`normalize_router` decides which one it is at construction time
and returns one immutable variant, so requests never re-inspect the
option's type.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, TypeAlias

from detour.errors import ConfigurationError
from detour.proxy.table import RouteTable
from detour.proxy.target import TargetSpec, is_target_object, parse_target_url, target_from_mapping

RouterCallback: TypeAlias = Callable[[Any], Any]


@dataclass(frozen=True, slots=True)
class StringTarget:
    """A fixed upstream given as a URL string."""

    url: str
    target: TargetSpec


@dataclass(frozen=True, slots=True)
class ObjectTarget:
    """A fixed upstream given as a ``{host, port, protocol}`` object."""

    target: TargetSpec


@dataclass(frozen=True, slots=True)
class CallbackRouter:
    """A per-request function, sync or async, returning the upstream."""

    fn: RouterCallback


@dataclass(frozen=True, slots=True)
class TableRouter:
    """A static, ordered host/path routing table."""

    table: RouteTable


RouterConfig: TypeAlias = StringTarget | ObjectTarget | CallbackRouter | TableRouter


def normalize_router(router: Any) -> RouterConfig:
    """Classify a raw router option into a :data:`RouterConfig` variant.

    Raises:
        ConfigurationError: For unparseable URLs, malformed objects or
            tables, and unsupported types. Never deferred to request time.
    """
    match router:
        case TargetSpec():
            return ObjectTarget(router)
        case str():
            try:
                return StringTarget(router, parse_target_url(router))
            except ValueError as exc:
                raise ConfigurationError(f"Invalid router URL: {exc}") from exc
        case Mapping() if is_target_object(router):
            try:
                return ObjectTarget(target_from_mapping(router))
            except (TypeError, ValueError) as exc:
                raise ConfigurationError(f"Invalid router object: {exc}") from exc
        case Mapping():
            return TableRouter(RouteTable.from_mapping(router))
        case _ if callable(router):
            return CallbackRouter(router)
        case _:
            msg = (
                f"Unsupported router option of type {type(router).__name__}. "
                f"Use a URL string, a {{host, port, protocol}} object, "
                f"a callable, or a pattern -> URL mapping."
            )
            raise ConfigurationError(msg)
