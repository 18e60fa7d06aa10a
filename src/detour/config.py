"""Application and proxy configuration.

Both are frozen dataclasses. Neither touches logging: handlers and levels
for the ``detour`` logger belong to the embedding application.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from detour.errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Host application configuration. Immutable after creation.

    ``debug`` puts exception type and message into 500 bodies::

        config = AppConfig(debug=True)
    """

    debug: bool = False


@dataclass(frozen=True, slots=True)
class ProxyConfig:
    """Reverse-proxy configuration. Immutable after creation.

    ``target`` is the default upstream, used whenever the router yields
    no match. ``router`` accepts a URL string, a ``{host, port, protocol}``
    object, a sync or async callable, or an ordered ``pattern -> url``
    table::

        ProxyConfig(
            target="https://localhost:6001",
            router={
                "alpha.localhost:6000": "https://localhost:6001",
                "localhost:6000/api": "https://localhost:6003",
            },
        )

    ``secure`` controls upstream certificate verification and is passed
    straight to the HTTP client. It is never turned off implicitly.
    """

    target: str
    router: Any = None
    prefix: str = "/"
    change_origin: bool = False
    secure: bool = True
    xfwd: bool = False
    timeout: float = 30.0

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> ProxyConfig:
        """Build a config from a plain mapping (e.g. a parsed JSON/TOML file).

        Raises:
            ConfigurationError: On unknown keys or a missing ``target``.
        """
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            msg = f"Unknown proxy option(s): {', '.join(unknown)}"
            raise ConfigurationError(msg)
        if "target" not in data:
            msg = "Proxy configuration requires a 'target' URL."
            raise ConfigurationError(msg)
        return cls(**dict(data))
