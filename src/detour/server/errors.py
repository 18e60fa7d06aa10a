"""Turn a failed request into a response.

Two kinds of failure reach here. ``HTTPError`` subclasses carry their own
status: a local 404/405, or a 502/504 from the proxy dispatcher when an
upstream is down. Everything else is an unexpected exception, and that
includes whatever a router callback raised, re-raised by the proxy as-is.
The app's ``@app.error`` registry decides the answer for both; without a
matching handler the plain-text defaults below apply.
"""

import inspect
import logging
from typing import Any, TypeAlias

from detour._internal.invoke import invoke
from detour.errors import HTTPError
from detour.http.request import Request
from detour.http.response import Response
from detour.middleware.protocol import AnyResponse
from detour.server.negotiation import negotiate

logger = logging.getLogger("detour.server")

ErrorHandlers: TypeAlias = dict[int | type, Any]


def lookup(error_handlers: ErrorHandlers, exc: Exception) -> Any:
    """Handler for the nearest class in *exc*'s MRO, or ``None``."""
    return next(
        (error_handlers[cls] for cls in type(exc).__mro__ if cls in error_handlers), None
    )


async def _run(handler: Any, request: Request, exc: Exception) -> AnyResponse:
    # Handlers take (), (request) or (request, exc).
    arity = len(inspect.signature(handler).parameters)
    result = await invoke(handler, *(request, exc)[:arity])
    return negotiate(result)


async def handle_http_error(
    exc: HTTPError,
    request: Request,
    error_handlers: ErrorHandlers,
    debug: bool,
) -> AnyResponse:
    logger.debug("%d %s %s: %s", exc.status, request.method, request.path, exc.detail)

    handler = error_handlers.get(type(exc)) or error_handlers.get(exc.status)
    if handler is not None:
        response = await _run(handler, request, exc)
        # A handler that returned a bare value keeps the error's status.
        return response.with_status(exc.status) if response.status == 200 else response

    body = f"{exc.status}: {exc.detail}" if debug and exc.detail else exc.detail or str(exc.status)
    return Response(body, status=exc.status, headers=exc.headers)


async def handle_internal_error(
    exc: Exception,
    request: Request,
    error_handlers: ErrorHandlers,
    debug: bool,
) -> AnyResponse:
    """Answer an unexpected exception.

    A handler registered for the exception's class or a base class owns
    the whole response, status included. Otherwise the request is a 500,
    answered by the ``500`` handler if there is one.
    """
    handler = lookup(error_handlers, exc)
    if handler is not None:
        logger.debug("%s handled for %s %s", type(exc).__name__, request.method, request.path)
        return await _run(handler, request, exc)

    logger.exception("500 %s %s", request.method, request.path)
    handler = error_handlers.get(500)
    if handler is not None:
        response = await _run(handler, request, exc)
        return response.with_status(500) if response.status == 200 else response

    if debug:
        return Response(f"Internal Server Error: {type(exc).__name__}: {exc}", status=500)
    return Response("Internal Server Error", status=500)
