"""Shared type aliases used across detour modules."""

from collections.abc import Callable
from typing import Any, TypeAlias

# Local route handler — receives the request (or nothing) and returns a response value
Handler: TypeAlias = Callable[..., Any]

# Error handler — receives (request, error?) and returns a response value
ErrorHandler: TypeAlias = Callable[..., Any]

# Lifecycle hook — sync or async, no arguments
Hook: TypeAlias = Callable[[], Any]
