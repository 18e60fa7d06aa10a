"""Request-scoped context via ContextVar.

Provides ``request_var``: the current ``Request`` for this task. It is
set by the handler pipeline and reset after each request, so code deep
inside a router callback can reach the request without threading it
through every call.

``ContextVar`` is task-local under asyncio. No locks needed.
"""

from contextvars import ContextVar

from detour.http.request import Request

request_var: ContextVar[Request] = ContextVar("detour_request")
"""The current request. Set by the ASGI handler before dispatch."""


def get_request() -> Request:
    """Return the current request.

    Raises ``LookupError`` if called outside a request context.
    """
    return request_var.get()
