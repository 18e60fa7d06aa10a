"""Detour CLI — inspect proxy routing configuration offline.

Entry point registered as ``detour`` in ``pyproject.toml``::

    [project.scripts]
    detour = "detour.cli:main"
"""

import argparse
import logging
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``detour`` command."""
    parser = argparse.ArgumentParser(
        prog="detour",
        description="Detour — reverse-proxy routing for ASGI apps.",
    )
    parser.add_argument(
        "--log-level",
        default="warning",
        choices=["debug", "info", "warning", "error"],
        help="Log level for router and upstream messages (default: warning)",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- detour table -----------------------------------------------------
    table_parser = subparsers.add_parser("table", help="List routing table entries in order")
    table_parser.add_argument("config", help="Proxy config file (.json or .toml)")

    # -- detour resolve ---------------------------------------------------
    resolve_parser = subparsers.add_parser(
        "resolve", help="Show which upstream a request would be forwarded to"
    )
    resolve_parser.add_argument("config", help="Proxy config file (.json or .toml)")
    resolve_parser.add_argument("--host", required=True, help="Host header of the request")
    resolve_parser.add_argument("--path", default="/", help="Request path (default: /)")
    resolve_parser.add_argument("--method", default="GET", help="HTTP method (default: GET)")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "table":
        from detour.cli._table import run_table

        run_table(args)
    elif args.command == "resolve":
        from detour.cli._resolve import run_resolve

        run_resolve(args)
