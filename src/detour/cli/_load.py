"""Config file loading shared by ``detour table`` and ``detour resolve``.

JSON and TOML files hold the same shape as ``ProxyConfig``::

    target = "https://localhost:6001"

    [router]
    "alpha.localhost:6000" = "https://localhost:6001"
    "localhost:6000/api" = "https://localhost:6003"

Both formats preserve the key order of the router table.
"""

import json
import sys
import tomllib
from pathlib import Path

from detour.config import ProxyConfig
from detour.errors import ConfigurationError


def load_config(path: str | Path) -> ProxyConfig:
    """Read a ``.json`` or ``.toml`` proxy config file.

    Raises:
        ConfigurationError: Unsupported extension, unreadable or
            malformed file, or invalid options.
    """
    path = Path(path)
    try:
        raw = path.read_bytes()
    except OSError as exc:
        raise ConfigurationError(f"Cannot read {path}: {exc}") from exc

    try:
        if path.suffix == ".json":
            data = json.loads(raw)
        elif path.suffix == ".toml":
            data = tomllib.loads(raw.decode("utf-8"))
        else:
            msg = f"Unsupported config format {path.suffix!r}; use .json or .toml"
            raise ConfigurationError(msg)
    except (json.JSONDecodeError, tomllib.TOMLDecodeError, UnicodeDecodeError) as exc:
        raise ConfigurationError(f"Malformed config {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config {path} must contain an object at the top level")
    return ProxyConfig.from_mapping(data)


def load_or_exit(path: str | Path) -> ProxyConfig:
    """Load a config file, printing the error and exiting 1 on failure."""
    try:
        return load_config(path)
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
