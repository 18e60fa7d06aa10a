"""``detour resolve`` — show where a request would be forwarded.

Runs the real resolver against a synthetic request, so the answer is
exactly what the proxy would do for that ``Host`` and path.
"""

import argparse
import sys

import anyio

from detour.cli._load import load_or_exit
from detour.errors import ConfigurationError
from detour.http.headers import Headers
from detour.http.request import Request
from detour.proxy.resolver import Resolver, propagate
from detour.proxy.routes import normalize_router
from detour.proxy.target import parse_target_url


def build_request(method: str, host: str, path: str) -> Request:
    """A body-less request carrying only what resolution looks at."""
    path_part, _, query = path.partition("?")
    return Request(
        method=method.upper(),
        path=path_part,
        headers=Headers([("host", host)]),
        query_string=query.encode("latin-1"),
    )


def run_resolve(args: argparse.Namespace) -> None:
    """Print the target for ``--host``/``--path``; ``(default)`` on fallback."""
    config = load_or_exit(args.config)
    try:
        default = parse_target_url(config.target)
        resolver = Resolver(
            normalize_router(config.router) if config.router is not None else None
        )
    except (ConfigurationError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    request = build_request(args.method, args.host, args.path)
    try:
        target = propagate(anyio.run(resolver.resolve, request))
    except Exception as exc:
        print(f"Error: router raised {type(exc).__name__}: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    if target is None:
        print(f"{default.origin} (default)")
    else:
        print(target.origin)
