"""Static host/path routing table.

A table maps patterns to upstream URLs, evaluated in insertion order::

    {
        "alpha.localhost:6000": "https://localhost:6001",
        "beta.localhost:6000": "https://localhost:6002",
        "localhost:6000/api": "https://localhost:6003",
    }

Pattern shapes:

- ``host[:port]`` matches when the request ``Host`` header equals it.
  Hostnames compare case-insensitively, ports exactly.
- ``host[:port]/path`` additionally requires the request path to start
  with ``/path``.

The first matching entry wins. Entries are never re-ordered by
specificity, so a broad entry listed first shadows narrower ones after
it. No match means "use the default target", not an error.

The table is parsed once; matching is synchronous and side-effect free.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from detour.errors import ConfigurationError
from detour.proxy.target import TargetSpec, parse_target_url


@dataclass(frozen=True, slots=True)
class HostKey:
    """A ``host[:port]`` split for comparison.

    ``hostname`` is lower-cased; ``port`` is kept as the literal text
    after the colon (``None`` when absent).
    """

    hostname: str
    port: str | None

    @classmethod
    def parse(cls, value: str) -> HostKey:
        value = value.strip()
        if value.startswith("["):
            # IPv6 literal: [::1]:8080
            end = value.find("]")
            if end == -1:
                return cls(value.lower(), None)
            hostname, rest = value[: end + 1], value[end + 1 :]
            port = rest[1:] if rest.startswith(":") else None
            return cls(hostname.lower(), port)
        hostname, sep, port = value.partition(":")
        return cls(hostname.lower(), port if sep else None)

    def __str__(self) -> str:
        return self.hostname if self.port is None else f"{self.hostname}:{self.port}"


@dataclass(frozen=True, slots=True)
class TableEntry:
    """One compiled ``pattern -> target`` row."""

    pattern: str
    host: HostKey
    path: str | None
    url: str
    target: TargetSpec

    def matches(self, host: HostKey, path: str) -> bool:
        if self.host != host:
            return False
        return self.path is None or path.startswith(self.path)


def parse_pattern(pattern: str) -> tuple[HostKey, str | None]:
    """Split ``host[:port][/path]`` into its host key and optional path prefix.

    Raises:
        ConfigurationError: If the host part is empty.
    """
    host_part, slash, rest = pattern.partition("/")
    if not host_part.strip():
        msg = f"Invalid routing pattern {pattern!r}: missing host"
        raise ConfigurationError(msg)
    return HostKey.parse(host_part), (f"/{rest}" if slash else None)


class RouteTable:
    """Immutable, ordered routing table.

    Usage::

        table = RouteTable.from_mapping({"beta.localhost:6000": "https://localhost:6002"})
        table.match("beta.localhost:6000", "/api")  # TargetSpec(...)
        table.match("localhost:6000", "/")  # None
    """

    __slots__ = ("_entries",)

    def __init__(self, entries: tuple[TableEntry, ...]) -> None:
        self._entries = entries

    @classmethod
    def from_mapping(cls, table: Mapping[Any, Any]) -> RouteTable:
        """Compile a ``pattern -> url`` mapping, keeping insertion order.

        Raises:
            ConfigurationError: On non-string keys or values, empty hosts,
                or unparseable target URLs.
        """
        entries: list[TableEntry] = []
        for pattern, url in table.items():
            if not isinstance(pattern, str) or not isinstance(url, str):
                msg = (
                    f"Routing table entries must map strings to URL strings, "
                    f"got {pattern!r}: {url!r}"
                )
                raise ConfigurationError(msg)
            host, path = parse_pattern(pattern)
            try:
                target = parse_target_url(url)
            except ValueError as exc:
                msg = f"Routing table entry {pattern!r}: {exc}"
                raise ConfigurationError(msg) from exc
            entries.append(TableEntry(pattern, host, path, url, target))
        return cls(tuple(entries))

    def match_entry(self, host: str | None, path: str) -> TableEntry | None:
        """Return the first entry matching *host* and *path*, if any."""
        if not host:
            return None
        key = HostKey.parse(host)
        for entry in self._entries:
            if entry.matches(key, path):
                return entry
        return None

    def match(self, host: str | None, path: str) -> TargetSpec | None:
        """Return the target of the first matching entry, or ``None``."""
        entry = self.match_entry(host, path)
        return entry.target if entry is not None else None

    @property
    def entries(self) -> tuple[TableEntry, ...]:
        return self._entries

    def __iter__(self) -> Iterator[TableEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"RouteTable({[e.pattern for e in self._entries]!r})"
