"""Per-request entry point.

The middleware chain is composed once, when the app freezes, into a
single ``Next`` callable. Each request then only builds a
:class:`Request`, runs that callable, maps any error to a response and
sends it.
"""

from collections.abc import Sequence

from detour._internal.asgi import Receive, Scope, Send
from detour._internal.invoke import invoke
from detour.context import request_var
from detour.errors import HTTPError
from detour.http.request import Request
from detour.middleware.protocol import AnyResponse, Middleware, Next
from detour.routing import Router
from detour.server.errors import ErrorHandlers, handle_http_error, handle_internal_error
from detour.server.negotiation import negotiate
from detour.server.sender import send_response


def local_routes(router: Router) -> Next:
    """The end of the chain: requests no middleware answered."""

    async def endpoint(request: Request) -> AnyResponse:
        route = router.match(request.method, request.path)
        if route.takes_request:
            return negotiate(await invoke(route.handler, request))
        return negotiate(await invoke(route.handler))

    return endpoint


def build_pipeline(middleware: Sequence[Middleware], endpoint: Next) -> Next:
    """Wrap *endpoint* so the first middleware in *middleware* runs first."""
    pipeline = endpoint
    for mw in reversed(middleware):
        pipeline = _link(mw, pipeline)
    return pipeline


def _link(mw: Middleware, inner: Next) -> Next:
    async def call(request: Request) -> AnyResponse:
        return await mw(request, inner)

    return call


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    pipeline: Next,
    error_handlers: ErrorHandlers,
    debug: bool,
) -> None:
    request = Request.from_asgi(scope, receive)
    token = request_var.set(request)
    try:
        response = await pipeline(request)
    except HTTPError as exc:
        response = await handle_http_error(exc, request, error_handlers, debug)
    except Exception as exc:
        response = await handle_internal_error(exc, request, error_handlers, debug)
    finally:
        request_var.reset(token)
    await send_response(response, send)
