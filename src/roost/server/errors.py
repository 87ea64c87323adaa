"""Error handling pipeline for roost requests.

Maps HTTPError exceptions and unexpected failures (including render
failures from the SSR cache) to Response objects, using registered error
handlers or plain-text defaults.
"""

import inspect
import logging
from collections.abc import Callable
from typing import Any

from kida import Environment

from roost.errors import HTTPError, RenderError
from roost.http.request import Request
from roost.http.response import Response
from roost.server.negotiation import negotiate

logger = logging.getLogger("roost.server")


async def call_error_handler(
    handler: Callable[..., Any],
    request: Request,
    exc: Exception,
    kida_env: Environment | None,
) -> Response:
    """Invoke a user-registered error handler with introspected arguments.

    Error handlers may accept zero, one (request), or two (request, exc) args.
    Supports both sync and async error handlers.
    """
    params = list(inspect.signature(handler).parameters.values())

    if len(params) >= 2:
        result = handler(request, exc)
    elif len(params) == 1:
        result = handler(request)
    else:
        result = handler()

    if inspect.isawaitable(result):
        result = await result

    return negotiate(result, kida_env=kida_env)


def _find_handler(
    exc: Exception,
    error_handlers: dict[int | type, Callable[..., Any]],
) -> Callable[..., Any] | None:
    for cls in type(exc).__mro__:
        handler = error_handlers.get(cls)
        if handler is not None:
            return handler
    return None


async def handle_http_error(
    exc: HTTPError,
    request: Request,
    error_handlers: dict[int | type, Callable[..., Any]],
    kida_env: Environment | None,
) -> Response:
    """Map an HTTPError to a Response using registered error handlers."""
    logger.debug("%d %s %s — %s", exc.status, request.method, request.path, exc.detail)

    handler = _find_handler(exc, error_handlers) or error_handlers.get(exc.status)
    if handler is not None:
        response = await call_error_handler(handler, request, exc, kida_env)
        # Keep the exception's status unless the handler chose its own
        if response.status == 200:
            response = response.with_status(exc.status)
        return response

    resp = Response(body=exc.detail or f"Error {exc.status}").with_status(exc.status)
    for name, value in exc.headers:
        resp = resp.with_header(name, value)
    return resp


async def handle_internal_error(
    exc: Exception,
    request: Request,
    error_handlers: dict[int | type, Callable[..., Any]],
    kida_env: Environment | None,
    debug: bool,
) -> Response:
    """Handle unexpected exceptions as 500 errors."""
    if isinstance(exc, RenderError):
        logger.error("SSR render failed for %s %s", request.method, request.path, exc_info=exc)
    else:
        logger.exception("500 %s %s", request.method, request.path)

    handler = _find_handler(exc, error_handlers) or error_handlers.get(500)
    if handler is not None:
        response = await call_error_handler(handler, request, exc, kida_env)
        if response.status == 200:
            response = response.with_status(500)
        return response

    if debug:
        cause = exc.__cause__ or exc
        body = f"500 Internal Server Error\n\n{type(cause).__name__}: {cause}"
        return Response(body=body, status=500, content_type="text/plain; charset=utf-8")

    return Response(body="Internal Server Error", status=500)
