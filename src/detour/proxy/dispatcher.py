"""Forwarding to the resolved upstream over httpx.

The dispatcher only moves bytes: it never decides *where* a request
goes. The scheme on the wire follows ``TargetSpec.is_secure``, i.e.
TLS is used only for the exact protocol literal ``"https:"``.
"""

import logging
from collections.abc import AsyncIterator

import httpx

from detour.errors import BadGateway, GatewayTimeout
from detour.http.request import Request
from detour.http.response import StreamingResponse
from detour.proxy.target import TargetSpec

logger = logging.getLogger("detour.proxy")

# RFC 9110 hop-by-hop headers (must not be forwarded)
HOP_BY_HOP = frozenset(
    {
        "connection",
        "keep-alive",
        "proxy-authenticate",
        "proxy-authorization",
        "proxy-connection",
        "te",
        "trailer",
        "trailers",
        "transfer-encoding",
        "upgrade",
    }
)


def strip_hop_by_hop(items: list[tuple[str, str]]) -> list[tuple[str, str]]:
    """Drop hop-by-hop headers, including any named in ``Connection``."""
    extra = {
        token.strip().lower()
        for name, value in items
        if name.lower() == "connection"
        for token in value.split(",")
    }
    return [(k, v) for k, v in items if k.lower() not in HOP_BY_HOP and k.lower() not in extra]


class ProxyDispatcher:
    """Forward requests to an upstream and stream the answer back.

    Owns one ``httpx.AsyncClient``, created on first use unless one is
    injected. Call :meth:`aclose` on shutdown.

    Args:
        secure: Verify upstream TLS certificates.
        timeout: Upstream timeout in seconds.
        change_origin: Rewrite the outbound ``Host`` header to the upstream.
        xfwd: Add ``X-Forwarded-For``/``-Host``/``-Proto`` headers.
        client: Pre-built client to use instead of creating one.
        transport: Transport for the created client (tests pass
            ``httpx.MockTransport``).
    """

    __slots__ = ("_client", "_owns_client", "_transport", "change_origin", "secure", "timeout", "xfwd")

    def __init__(
        self,
        *,
        secure: bool = True,
        timeout: float = 30.0,
        change_origin: bool = False,
        xfwd: bool = False,
        client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.secure = secure
        self.timeout = timeout
        self.change_origin = change_origin
        self.xfwd = xfwd
        self._client = client
        self._owns_client = client is None
        self._transport = transport

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                verify=self.secure,
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=False,
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        """Close the HTTP client if this dispatcher created it."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    def build_headers(self, request: Request, target: TargetSpec) -> list[tuple[str, str]]:
        """Outbound headers: inbound minus hop-by-hop, ``Host`` per ``change_origin``."""
        headers = [
            (name, value)
            for name, value in strip_hop_by_hop(request.headers.multi_items())
            if name != "host"
        ]
        host = target.netloc if self.change_origin else request.host
        if host:
            headers.insert(0, ("host", host))

        if self.xfwd:
            if request.client is not None:
                prior = request.headers.get("x-forwarded-for")
                client_ip = request.client[0]
                headers = [(k, v) for k, v in headers if k != "x-forwarded-for"]
                headers.append(("x-forwarded-for", f"{prior}, {client_ip}" if prior else client_ip))
            if request.host and "x-forwarded-host" not in request.headers:
                headers.append(("x-forwarded-host", request.host))
            if "x-forwarded-proto" not in request.headers:
                headers.append(("x-forwarded-proto", request.scheme))
        return headers

    async def forward(self, request: Request, target: TargetSpec) -> StreamingResponse:
        """Send *request* to *target* and return the streamed upstream response.

        Raises:
            GatewayTimeout: The upstream did not answer in time.
            BadGateway: The upstream could not be reached.
        """
        url = f"{target.origin}{request.raw_url}"
        upstream_request = self.client.build_request(
            request.method,
            url,
            headers=self.build_headers(request, target),
            content=request.stream() if request.has_body else None,
        )

        logger.debug("%s %s -> %s", request.method, request.path, url)
        try:
            upstream = await self.client.send(upstream_request, stream=True)
        except httpx.TimeoutException as exc:
            logger.warning("upstream %s timed out: %s", target, exc)
            raise GatewayTimeout(f"Upstream {target.netloc} timed out") from exc
        except httpx.TransportError as exc:
            logger.warning("upstream %s unreachable: %s", target, exc)
            raise BadGateway(f"Upstream {target.netloc} unreachable") from exc

        content_type: str | None = None
        headers: list[tuple[str, str]] = []
        for name, value in strip_hop_by_hop(upstream.headers.multi_items()):
            if name.lower() == "content-type":
                content_type = value
            else:
                headers.append((name, value))

        async def body() -> AsyncIterator[bytes]:
            try:
                if upstream.is_stream_consumed:
                    # Transports that pre-read the body (httpx.MockTransport)
                    yield upstream.content
                else:
                    async for chunk in upstream.aiter_raw():
                        yield chunk
            finally:
                await upstream.aclose()

        return StreamingResponse(
            chunks=body(),
            status=upstream.status_code,
            content_type=content_type,
            headers=tuple(headers),
        )
