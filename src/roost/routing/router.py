"""Compiled router for explicitly registered (uncached) routes.

Static paths resolve through a dict lookup; parameterised paths are
tried in registration order. Anything that matches nothing is left to
the SSR catch-all by the request handler.
"""

from roost.errors import MethodNotAllowed, NotFound
from roost.http.paths import canonical_path
from roost.routing.route import Route, RouteMatch


class Router:
    """Route table, frozen by ``compile()``.

    Usage::

        router = Router()
        router.add(Route("/api/hello", handler, frozenset({"GET"})))
        router.add(Route("/api/hello/{name}", handler, frozenset({"GET"})))
        router.compile()
        match = router.match("GET", "/api/hello/ada")
    """

    __slots__ = ("_compiled", "_dynamic", "_static")

    def __init__(self) -> None:
        self._static: dict[str, dict[str, Route]] = {}
        self._dynamic: list[Route] = []
        self._compiled = False

    def add(self, route: Route) -> None:
        """Add a route to the router. Must be called before compile()."""
        if self._compiled:
            msg = "Cannot add routes after compilation."
            raise RuntimeError(msg)
        if route.is_static:
            by_method = self._static.setdefault(canonical_path(route.path), {})
            for method in route.methods:
                by_method[method] = route
        else:
            self._dynamic.append(route)

    @property
    def routes(self) -> list[Route]:
        """All registered routes, static first."""
        seen: dict[int, Route] = {}
        for by_method in self._static.values():
            for route in by_method.values():
                seen.setdefault(id(route), route)
        for route in self._dynamic:
            seen.setdefault(id(route), route)
        return list(seen.values())

    def compile(self) -> None:
        """Freeze the router. No more routes can be added."""
        self._compiled = True

    def match(self, method: str, path: str) -> RouteMatch:
        """Match a request path and method against compiled routes.

        Returns a ``RouteMatch`` on success.
        Raises ``NotFound`` if no route matches the path.
        Raises ``MethodNotAllowed`` if the path matches but the method doesn't.
        """
        path = canonical_path(path)
        allowed: set[str] = set()

        by_method = self._static.get(path)
        if by_method is not None:
            route = by_method.get(method) or _head_fallback(by_method, method)
            if route is not None:
                return RouteMatch(route=route, path_params={})
            allowed.update(by_method)

        for route in self._dynamic:
            found = route.pattern.match(path)
            if found is None:
                continue
            if method in route.methods or (method == "HEAD" and "GET" in route.methods):
                return RouteMatch(route=route, path_params=found.groupdict())
            allowed.update(route.methods)

        if allowed:
            raise MethodNotAllowed(frozenset(allowed))
        raise NotFound(f"No route matches {method} {path!r}")


def _head_fallback(by_method: dict[str, Route], method: str) -> Route | None:
    # HEAD is served by the GET handler; the sender drops the body
    if method == "HEAD":
        return by_method.get("GET")
    return None
