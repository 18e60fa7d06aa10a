"""The ASGI host that the proxy middleware is installed into.

An :class:`App` collects local routes, middleware, error handlers and
lifecycle hooks, then freezes: the first lifespan or HTTP scope compiles
the route table and composes the middleware chain. After that,
registration raises.
"""

from collections.abc import Callable

from detour._internal.asgi import Receive, Scope, Send
from detour._internal.invoke import invoke
from detour._internal.types import ErrorHandler, Handler, Hook
from detour.config import AppConfig
from detour.middleware.protocol import Middleware, Next
from detour.routing import Route, Router
from detour.server.handler import build_pipeline, handle_request, local_routes


class App:
    """Host application for :class:`detour.proxy.ProxyMiddleware`::

        app = App()
        ProxyMiddleware(ProxyConfig(target="https://localhost:6001")).install(app)

        @app.route("/healthz")
        def healthz():
            return "ok"

        @app.error(RuntimeError)
        def router_failed(request, exc):
            return str(exc), 502
    """

    __slots__ = ("_error_handlers", "_hooks", "_middleware", "_pipeline", "_routes", "config")

    def __init__(self, config: AppConfig | None = None) -> None:
        self.config = config or AppConfig()
        self._routes: list[Route] = []
        self._middleware: list[Middleware] = []
        self._error_handlers: dict[int | type, ErrorHandler] = {}
        self._hooks: dict[str, list[Hook]] = {"startup": [], "shutdown": []}
        self._pipeline: Next | None = None

    @property
    def frozen(self) -> bool:
        return self._pipeline is not None

    def route(self, path: str, *, methods: list[str] | None = None) -> Callable[[Handler], Handler]:
        """Register a local route for an exact *path* (``GET`` unless *methods* says otherwise).

        Local routes only see requests that no middleware answered, so
        with the proxy installed they serve the host's own endpoints.
        """

        def decorator(func: Handler) -> Handler:
            self._check_not_frozen()
            allowed = frozenset(m.upper() for m in (methods or ["GET"]))
            self._routes.append(Route(path, func, allowed))
            return func

        return decorator

    def error(
        self, code_or_exception: int | type[Exception]
    ) -> Callable[[ErrorHandler], ErrorHandler]:
        """Register an error handler keyed by status code or exception class.

        Errors raised by a proxy router callback arrive here unchanged, so
        a handler for their type chooses the status and body.
        """

        def decorator(func: ErrorHandler) -> ErrorHandler:
            self._check_not_frozen()
            self._error_handlers[code_or_exception] = func
            return func

        return decorator

    def add_middleware(self, middleware: Middleware) -> None:
        self._check_not_frozen()
        self._middleware.append(middleware)

    def on_startup(self, func: Hook) -> Hook:
        self._check_not_frozen()
        self._hooks["startup"].append(func)
        return func

    def on_shutdown(self, func: Hook) -> Hook:
        """Register a shutdown hook. The proxy closes its upstream client here."""
        self._check_not_frozen()
        self._hooks["shutdown"].append(func)
        return func

    async def startup(self) -> None:
        for hook in self._hooks["startup"]:
            await invoke(hook)

    async def shutdown(self) -> None:
        for hook in self._hooks["shutdown"]:
            await invoke(hook)

    def freeze(self) -> None:
        """Compile local routes and compose the middleware chain. Idempotent."""
        if self._pipeline is not None:
            return
        router = Router()
        for route in self._routes:
            router.add(route)
        router.compile()
        self._pipeline = build_pipeline(tuple(self._middleware), local_routes(router))

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        self.freeze()
        match scope["type"]:
            case "lifespan":
                await self._lifespan(receive, send)
            case "http":
                assert self._pipeline is not None
                await handle_request(
                    scope,
                    receive,
                    send,
                    pipeline=self._pipeline,
                    error_handlers=self._error_handlers,
                    debug=self.config.debug,
                )

    async def _lifespan(self, receive: Receive, send: Send) -> None:
        while True:
            message = await receive()
            match message["type"]:
                case "lifespan.startup":
                    try:
                        await self.startup()
                    except Exception as exc:
                        await send({"type": "lifespan.startup.failed", "message": str(exc)})
                        return
                    await send({"type": "lifespan.startup.complete"})
                case "lifespan.shutdown":
                    await self.shutdown()
                    await send({"type": "lifespan.shutdown.complete"})
                    return

    def _check_not_frozen(self) -> None:
        if self.frozen:
            msg = "Cannot modify the app once it is serving; register everything before startup."
            raise RuntimeError(msg)
