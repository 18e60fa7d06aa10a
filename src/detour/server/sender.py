"""Write responses out as ASGI ``http.response.*`` messages."""

import logging
from collections.abc import AsyncIterator

from detour._internal.asgi import Send
from detour.http.response import Response, StreamingResponse

logger = logging.getLogger("detour.server")

# Statuses that never carry a body (RFC 9110 §6.4.1)
_NO_BODY = frozenset({204, 304})


def _raw_headers(response: Response | StreamingResponse) -> list[tuple[bytes, bytes]]:
    pairs = list(response.headers)
    if response.content_type is not None:
        pairs.insert(0, ("content-type", response.content_type))
    return [(name.lower().encode("latin-1"), value.encode("latin-1")) for name, value in pairs]


async def send_response(response: Response | StreamingResponse, send: Send) -> None:
    """Send *response*: one body message, or one per streamed chunk."""
    headers = _raw_headers(response)
    body_allowed = response.status >= 200 and response.status not in _NO_BODY

    if isinstance(response, StreamingResponse):
        if body_allowed and not any(name == b"content-length" for name, _ in headers):
            headers.append((b"transfer-encoding", b"chunked"))
        await send({"type": "http.response.start", "status": response.status, "headers": headers})
        await _relay(response.chunks, response.status, send)
        return

    body = response.body_bytes if body_allowed else b""
    headers.append((b"content-length", str(len(body)).encode("latin-1")))
    await send({"type": "http.response.start", "status": response.status, "headers": headers})
    await send({"type": "http.response.body", "body": body})


async def _relay(chunks: AsyncIterator[bytes], status: int, send: Send) -> None:
    # The status line is already out, so a failing upstream can only be
    # logged; the body is then closed short.
    try:
        async for chunk in chunks:
            if chunk:
                await send({"type": "http.response.body", "body": chunk, "more_body": True})
    except Exception:
        logger.exception("Upstream stream aborted after %d was sent", status)
    await send({"type": "http.response.body", "body": b"", "more_body": False})
