"""``detour table`` — list routing table entries in evaluation order."""

import argparse
import sys

from detour.cli._load import load_or_exit
from detour.errors import ConfigurationError
from detour.proxy.routes import TableRouter, normalize_router


def run_table(args: argparse.Namespace) -> None:
    """Print the ``#``, ``PATTERN``, ``TARGET`` columns of the router table.

    Exits 1 when the config is invalid or its router is not a table.
    """
    config = load_or_exit(args.config)
    try:
        router = normalize_router(config.router) if config.router is not None else None
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    if not isinstance(router, TableRouter):
        print("Error: router is not a routing table.", file=sys.stderr)
        raise SystemExit(1)

    rows = [(str(i), entry.pattern, entry.url) for i, entry in enumerate(router.table, 1)]
    if not rows:
        print("Routing table is empty.")
        return

    max_num = max(max(len(r[0]) for r in rows), 1)
    max_pattern = max(max(len(r[1]) for r in rows), 7)  # "PATTERN" header

    fmt = f"{{:<{max_num}}}  {{:<{max_pattern}}}  {{}}"
    print(fmt.format("#", "PATTERN", "TARGET"))
    sep_len = max_num + max_pattern + 4 + max(len(r[2]) for r in rows)
    print("-" * min(sep_len, 80))
    for row in rows:
        print(fmt.format(*row))
    print(f"(default) {config.target}")
