"""Read-only, case-insensitive request headers.

Names are lower-cased once, when the request arrives. Repeated headers
keep every value in arrival order: the proxy dispatcher rebuilds the
outbound request from :meth:`Headers.multi_items`, and dropping a second
``X-Forwarded-For`` or ``Cookie`` line would change what the upstream sees.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping


class Headers(Mapping[str, str]):
    """Ordered ``(name, value)`` pairs with a case-insensitive mapping view.

    Usage::

        headers = Headers([("Host", "beta.localhost:6000")])
        headers["host"]             # "beta.localhost:6000"
        headers.get_list("cookie")  # every Cookie line, in order
    """

    __slots__ = ("_items",)

    def __init__(self, items: Iterable[tuple[str, str]] = ()) -> None:
        self._items = tuple((name.lower(), value) for name, value in items)

    @classmethod
    def from_asgi(cls, raw: Iterable[tuple[bytes, bytes]]) -> Headers:
        """Decode ASGI header byte pairs (latin-1, per RFC 9110)."""
        return cls((name.decode("latin-1"), value.decode("latin-1")) for name, value in raw)

    def __getitem__(self, name: str) -> str:
        wanted = name.lower()
        for key, value in self._items:
            if key == wanted:
                return value
        raise KeyError(name)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and any(key == name.lower() for key, _ in self._items)

    def __iter__(self) -> Iterator[str]:
        return iter(dict.fromkeys(key for key, _ in self._items))

    def __len__(self) -> int:
        return len(dict.fromkeys(key for key, _ in self._items))

    def __repr__(self) -> str:
        return f"Headers({list(self._items)!r})"

    def get_list(self, name: str) -> list[str]:
        """Every value sent for *name*, in arrival order."""
        wanted = name.lower()
        return [value for key, value in self._items if key == wanted]

    def multi_items(self) -> list[tuple[str, str]]:
        """All pairs in arrival order, names lower-cased."""
        return list(self._items)
