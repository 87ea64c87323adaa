"""Roost application class.

Mutable during setup (route registration, renderer, middleware, hooks).
Frozen at runtime when app.run() or __call__() is first invoked.
"""

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import anyio
from anyio.abc import TaskGroup
from kida import Environment

from roost._internal.asgi import Receive, Scope, Send
from roost._internal.invoke import invoke
from roost.cache.gateway import RenderGateway, Renderer
from roost.cache.store import CacheStore
from roost.cache.sweeper import ExpirySweeper
from roost.config import AppConfig
from roost.middleware.protocol import Middleware
from roost.routing.route import Route
from roost.routing.router import Router
from roost.server.handler import handle_request
from roost.templating.integration import create_environment

logger = logging.getLogger("roost.server")

type Handler = Callable[..., Any]


@dataclass(slots=True)
class _PendingRoute:
    """A route waiting to be compiled."""

    path: str
    handler: Handler
    methods: list[str] | None


class App:
    """The roost application.

    Explicit routes (``@app.route``) are served as registered. Every
    other ``GET``/``HEAD`` path goes to the renderer (``@app.renderer``)
    through the SSR cache::

        app = App()

        @app.route("/api/hello")
        def hello():
            return {"message": "Hello, world!"}

        @app.renderer
        async def render(request):
            return Template("document.html", path=request.path)

    The cache store, gateway and sweeper are built when the app freezes
    and owned by the app. The sweeper runs for the lifetime of the ASGI
    lifespan and the store is drained at shutdown.
    """

    __slots__ = (
        "_clock",
        "_error_handlers",
        "_freeze_lock",
        "_frozen",
        "_gateway",
        "_kida_env",
        "_middleware",
        "_middleware_list",
        "_pending_routes",
        "_renderer",
        "_router",
        "_shutdown_hooks",
        "_startup_hooks",
        "_store",
        "_sweeper",
        "config",
    )

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config: AppConfig = config or AppConfig()
        self._clock = clock
        self._pending_routes: list[_PendingRoute] = []
        self._middleware_list: list[Middleware] = []
        self._error_handlers: dict[int | type, Handler] = {}
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []
        self._renderer: Renderer | None = None
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()

        # Compiled state, set during _freeze()
        self._router: Router | None = None
        self._middleware: tuple[Callable[..., Any], ...] = ()
        self._kida_env: Environment | None = None
        self._store: CacheStore | None = None
        self._gateway: RenderGateway | None = None
        self._sweeper: ExpirySweeper | None = None

    # -- Registration --

    def route(
        self,
        path: str,
        *,
        methods: list[str] | None = None,
    ) -> Callable[[Handler], Handler]:
        """Register an uncached route handler via decorator.

        Args:
            path: URL path pattern. Use ``{param}`` for path parameters.
            methods: HTTP methods. Defaults to ``["GET"]``.
        """

        def decorator(func: Handler) -> Handler:
            self._check_not_frozen()
            self._pending_routes.append(_PendingRoute(path, func, methods))
            return func

        return decorator

    def renderer(self, func: Renderer) -> Renderer:
        """Register the SSR render capability via decorator.

        The renderer receives the ``Request`` and returns the HTML
        document as ``str`` or a ``Template``. It may be sync or async.
        Its output is cached per page for ``config.cache_ttl`` seconds.
        """
        self._check_not_frozen()
        self._renderer = func
        return func

    def error(
        self,
        code_or_exception: int | type[Exception],
    ) -> Callable[[Handler], Handler]:
        """Register an error handler via decorator."""

        def decorator(func: Handler) -> Handler:
            self._check_not_frozen()
            self._error_handlers[code_or_exception] = func
            return func

        return decorator

    def add_middleware(self, middleware: Middleware) -> None:
        """Add a middleware to the pipeline."""
        self._check_not_frozen()
        self._middleware_list.append(middleware)

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync startup hook via decorator.

        Hooks run in registration order during ASGI lifespan startup,
        before the sweeper starts and before requests are accepted.
        """
        self._check_not_frozen()
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync shutdown hook via decorator.

        Hooks run in registration order after the sweeper has stopped
        and before the cache is drained.
        """
        self._check_not_frozen()
        self._shutdown_hooks.append(func)
        return func

    # -- Cache access --

    @property
    def cache(self) -> CacheStore:
        """The SSR cache store. Freezes the app on first access."""
        self._ensure_frozen()
        assert self._store is not None
        return self._store

    @property
    def gateway(self) -> RenderGateway | None:
        """The render gateway, or ``None`` when no renderer is registered."""
        self._ensure_frozen()
        return self._gateway

    @property
    def sweeper(self) -> ExpirySweeper:
        """The expiry sweeper bound to this app's cache store."""
        self._ensure_frozen()
        assert self._sweeper is not None
        return self._sweeper

    # -- Server --

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Start the server.

        Compiles the app (freezing routes, templates and the cache) and
        starts serving requests with pounce.
        """
        self._ensure_frozen()

        from roost.server.dev import run_server

        run_server(
            self,
            host or self.config.host,
            port or self.config.port,
            reload=self.config.debug,
            log_level=self.config.log_level,
        )

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        self._ensure_frozen()
        assert self._router is not None

        await handle_request(
            scope,
            receive,
            send,
            router=self._router,
            middleware=self._middleware,
            error_handlers=self._error_handlers,
            gateway=self._gateway,
            kida_env=self._kida_env,
            debug=self.config.debug,
        )

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Run the ASGI lifespan protocol.

        Startup runs hooks and starts the sweeper in a task group that
        lives as long as the lifespan. Shutdown stops the sweeper, runs
        hooks, and drains the cache.
        """
        self._ensure_frozen()

        async with anyio.create_task_group() as tg:
            while True:
                message = await receive()
                msg_type = message["type"]

                if msg_type == "lifespan.startup":
                    try:
                        await self.startup(tg)
                    except Exception as exc:
                        logger.exception("Startup failed")
                        await send({"type": "lifespan.startup.failed", "message": str(exc)})
                        return
                    await send({"type": "lifespan.startup.complete"})

                elif msg_type == "lifespan.shutdown":
                    await self.shutdown()
                    await send({"type": "lifespan.shutdown.complete"})
                    return

    async def startup(self, task_group: TaskGroup) -> None:
        """Run startup hooks, then start the sweeper in *task_group*."""
        self._ensure_frozen()
        for hook in self._startup_hooks:
            await invoke(hook)
        assert self._sweeper is not None
        await task_group.start(self._sweeper.run)

    async def shutdown(self) -> None:
        """Stop the sweeper, run shutdown hooks, drain the cache."""
        assert self._sweeper is not None and self._store is not None
        self._sweeper.stop()
        for hook in self._shutdown_hooks:
            await invoke(hook)
        dropped = self._store.clear()
        logger.debug("Drained %d cached page(s)", dropped)

    # -- Internal --

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Compile the app into its frozen runtime state.

        MUST only be called while holding _freeze_lock.
        """
        # 1. Validate configuration before anything is built
        self.config.validate()
        cache_config = self.config.cache_config()

        # 2. Compile route table
        router = Router()
        for pending in self._pending_routes:
            methods = frozenset(m.upper() for m in (pending.methods or ["GET"]))
            router.add(Route(path=pending.path, handler=pending.handler, methods=methods))
        router.compile()
        self._router = router

        # 3. Capture middleware as immutable tuple
        self._middleware = tuple(self._middleware_list)

        # 4. Template environment
        self._kida_env = create_environment(self.config)

        # 5. Cache: one store shared by the gateway and the sweeper
        self._store = CacheStore()
        self._sweeper = ExpirySweeper(self._store, cache_config, clock=self._clock)
        if self._renderer is not None:
            self._gateway = RenderGateway(
                self._store,
                self._renderer,
                cache_config,
                key_policy=self.config.key_policy(),
                clock=self._clock,
                render_timeout=self.config.render_timeout,
                kida_env=self._kida_env,
            )

        self._frozen = True

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started serving requests. "
                "Register routes, the renderer, middleware, and hooks before calling app.run()."
            )
            raise RuntimeError(msg)
