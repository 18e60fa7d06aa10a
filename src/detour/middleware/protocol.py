"""The middleware contract.

Anything awaitable as ``mw(request, next)`` is a middleware: a plain
``async def`` or an object with ``async __call__``, like
:class:`detour.proxy.ProxyMiddleware`. A middleware either answers the
request itself or hands it on with ``await next(request)``.
"""

from collections.abc import Awaitable, Callable
from typing import Protocol, TypeAlias

from detour.http.request import Request
from detour.http.response import Response, StreamingResponse

AnyResponse: TypeAlias = Response | StreamingResponse

Next: TypeAlias = Callable[[Request], Awaitable[AnyResponse]]


class Middleware(Protocol):
    """Structural type for middleware; no base class to inherit::

        async def stamp(request: Request, next: Next) -> AnyResponse:
            response = await next(request)
            return response.with_header("Via", "1.1 detour")
    """

    async def __call__(self, request: Request, next: Next) -> AnyResponse: ...
