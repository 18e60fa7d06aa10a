"""Upstream target descriptors.

A :class:`TargetSpec` names one upstream as ``(protocol, host, port)``.

``protocol`` is a *literal* string, not a parsed URI scheme. Only the
exact value ``"https:"`` (with the trailing colon) selects a secure
channel; ``"https"`` without the colon forwards in plaintext. Existing
router callbacks rely on this legacy distinction, so it is preserved
as-is and never normalized.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlsplit

SECURE_PROTOCOL = "https:"
OBJECT_KEYS = frozenset({"host", "port", "protocol"})


@dataclass(frozen=True, slots=True)
class TargetSpec:
    """A resolved upstream: where the proxy forwards a request."""

    protocol: str
    host: str
    port: int

    @property
    def is_secure(self) -> bool:
        """True only for the exact literal ``"https:"``."""
        return self.protocol == SECURE_PROTOCOL

    @property
    def scheme(self) -> str:
        """URL scheme actually used on the wire."""
        return "https" if self.is_secure else "http"

    @property
    def netloc(self) -> str:
        return f"{self.host}:{self.port}"

    @property
    def origin(self) -> str:
        """Base URL of the upstream, e.g. ``https://localhost:6003``."""
        return f"{self.scheme}://{self.netloc}"

    def __str__(self) -> str:
        return self.origin


def default_port(protocol: str) -> int:
    return 443 if protocol == SECURE_PROTOCOL else 80


def parse_target_url(url: str) -> TargetSpec:
    """Parse ``scheme://host[:port]`` into a :class:`TargetSpec`.

    The protocol is reported the way URL objects report it, scheme plus
    colon (``"https://localhost:6003"`` gives ``"https:"``). A missing
    port defaults to 443 for ``https:`` and 80 otherwise. Any path or
    query on the URL is ignored.

    Raises:
        ValueError: If *url* has no scheme or host, or a bad port.
    """
    parts = urlsplit(url.strip())
    if not parts.scheme or not parts.hostname:
        msg = f"Invalid target URL {url!r}: expected scheme://host[:port]"
        raise ValueError(msg)
    protocol = f"{parts.scheme.lower()}:"
    port = parts.port  # raises ValueError for out-of-range ports
    return TargetSpec(
        protocol=protocol,
        host=parts.hostname,
        port=port if port is not None else default_port(protocol),
    )


def is_target_object(value: Mapping[Any, Any]) -> bool:
    """True if *value* looks like a ``{host, port, protocol}`` object."""
    keys = set(value)
    return "host" in keys and keys <= OBJECT_KEYS


def target_from_mapping(value: Mapping[str, Any]) -> TargetSpec:
    """Build a :class:`TargetSpec` from a ``{host, port, protocol}`` object.

    ``protocol`` defaults to ``"http:"``; ``port`` defaults by protocol.
    The protocol string is kept verbatim.

    Raises:
        ValueError: On unknown keys, an empty host, or a bad port.
        TypeError: If host or protocol is not a string.
    """
    if not is_target_object(value):
        msg = (
            f"Invalid target object {dict(value)!r}: "
            f"expected keys {sorted(OBJECT_KEYS)} with at least 'host'"
        )
        raise ValueError(msg)

    host = value["host"]
    protocol = value.get("protocol", "http:")
    if not isinstance(host, str) or not isinstance(protocol, str):
        msg = "Target object 'host' and 'protocol' must be strings"
        raise TypeError(msg)
    if not host:
        msg = "Target object 'host' must not be empty"
        raise ValueError(msg)

    port = value.get("port")
    if port is None:
        port = default_port(protocol)
    elif isinstance(port, bool) or not isinstance(port, int | str):
        msg = f"Target object 'port' must be an integer, got {port!r}"
        raise ValueError(msg)
    else:
        port = int(port)
    if not 0 < port < 65536:
        msg = f"Target object 'port' out of range 1-65535, got {port}"
        raise ValueError(msg)

    return TargetSpec(protocol=protocol, host=host, port=port)


def coerce_target(value: Any) -> TargetSpec:
    """Turn a router result into a :class:`TargetSpec`.

    Accepts a ``TargetSpec``, a URL string, or a ``{host, port, protocol}``
    mapping.

    Raises:
        ValueError: If a string or mapping is malformed.
        TypeError: For any other type.
    """
    match value:
        case TargetSpec():
            return value
        case str():
            return parse_target_url(value)
        case Mapping():
            return target_from_mapping(value)
        case _:
            msg = (
                f"Router returned {type(value).__name__}; expected a URL string, "
                f"a TargetSpec, or a {{host, port, protocol}} mapping"
            )
            raise TypeError(msg)
