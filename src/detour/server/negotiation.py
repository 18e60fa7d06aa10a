"""Turn what a local route or error handler returns into a response.

Handlers mostly return short strings (health checks, error bodies), so
that is the cheap case. ``(value, status)`` lets an error handler pick a
status without building a ``Response``::

    @app.error(RuntimeError)
    def router_failed(request, exc):
        return str(exc), 502
"""

import json
from typing import Any

from detour.http.response import Response, StreamingResponse


def negotiate(value: Any) -> Response | StreamingResponse:
    """Coerce *value* into a response.

    Raises:
        TypeError: For anything that is not a response, ``str``, ``bytes``,
            ``dict`` or a ``(value, status)`` pair.
    """
    match value:
        case Response() | StreamingResponse():
            return value
        case str():
            return Response(value)
        case bytes():
            return Response(value, content_type="application/octet-stream")
        case dict():
            return Response(json.dumps(value), content_type="application/json")
        case (body, int() as status) if isinstance(value, tuple):
            return negotiate(body).with_status(status)
    msg = f"Handler returned {type(value).__name__}; expected str, bytes, dict or Response"
    raise TypeError(msg)
