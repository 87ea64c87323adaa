"""ASGI handler — translates ASGI scope/messages to roost types.

The only component that touches raw ASGI HTTP messages directly. Converts
scope dicts to Request objects, dispatches through middleware and routing
(falling back to the cached SSR renderer), and sends the Response back.
"""

import inspect
from collections.abc import Callable
from typing import Any

from kida import Environment

from roost._internal.asgi import Receive, Scope, Send
from roost._internal.invoke import invoke
from roost.cache.gateway import RenderGateway
from roost.errors import HTTPError, NotFound
from roost.http.request import Request
from roost.http.response import Response
from roost.middleware.protocol import Next
from roost.routing.route import RouteMatch
from roost.routing.router import Router
from roost.server.errors import handle_http_error, handle_internal_error
from roost.server.negotiation import negotiate
from roost.server.sender import send_response
from roost.server.ssr import SSR_METHODS, serve_page


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    router: Router,
    middleware: tuple[Callable[..., Any], ...],
    error_handlers: dict[int | type, Callable[..., Any]],
    gateway: RenderGateway | None,
    kida_env: Environment | None = None,
    debug: bool,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)

    try:

        async def dispatch(req: Request) -> Response:
            try:
                match = router.match(req.method, req.path)
            except NotFound:
                if gateway is not None and req.method in SSR_METHODS:
                    return await serve_page(gateway, req)
                raise
            return await _invoke_handler(match, req, kida_env=kida_env)

        # Wrap middleware around the dispatch
        handler: Next = dispatch
        for mw in reversed(middleware):

            async def make_next(req: Request, _mw: Any = mw, _next: Next = handler) -> Response:
                return await _mw(req, _next)

            handler = make_next

        response = await handler(request)

    except HTTPError as exc:
        response = await handle_http_error(exc, request, error_handlers, kida_env)
    except Exception as exc:
        response = await handle_internal_error(exc, request, error_handlers, kida_env, debug)

    await send_response(response, send, head=request.method == "HEAD")


async def _invoke_handler(
    match: RouteMatch,
    request: Request,
    *,
    kida_env: Environment | None = None,
) -> Response:
    """Call the matched route handler, converting path params and return value."""
    handler = match.route.handler
    request = request.with_path_params(match.path_params)
    kwargs = _build_handler_kwargs(handler, request, match.path_params)
    result = await invoke(handler, **kwargs)
    return negotiate(result, kida_env=kida_env)


def _build_handler_kwargs(
    handler: Callable[..., Any],
    request: Request,
    path_params: dict[str, str],
) -> dict[str, Any]:
    """Inspect handler signature and build kwargs from request + path params.

    A parameter named ``request`` (or annotated ``Request``) receives the
    request; any parameter named after a path parameter receives its value,
    converted to the annotated type when possible.
    """
    sig = inspect.signature(handler, eval_str=True)
    kwargs: dict[str, Any] = {}

    for name, param in sig.parameters.items():
        if name == "request" or param.annotation is Request:
            kwargs[name] = request
        elif name in path_params:
            value = path_params[name]
            if param.annotation is not inspect.Parameter.empty:
                try:
                    kwargs[name] = param.annotation(value)
                except (ValueError, TypeError):
                    kwargs[name] = value
            else:
                kwargs[name] = value

    return kwargs
