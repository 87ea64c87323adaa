"""Middleware shape: ``async (request, next) -> Response``.

Middleware wraps explicit routes and the SSR catch-all alike, so it
sees ``X-Cache`` on cached pages.
"""

from collections.abc import Awaitable, Callable
from typing import Protocol

from roost.http.request import Request
from roost.http.response import Response

type Next = Callable[[Request], Awaitable[Response]]


class Middleware(Protocol):
    async def __call__(self, request: Request, next: Next) -> Response: ...
