"""Roost — server-rendered pages behind an in-memory response cache.

Explicit routes are served as registered; every other page is rendered
once, cached for a fixed time-to-live, and served from memory until it
expires. A background sweeper evicts expired pages.

Basic usage::

    from roost import App, AppConfig

    app = App(AppConfig(cache_ttl=600))

    @app.route("/api/hello")
    def hello():
        return {"message": "Hello, world!"}

    @app.renderer
    def render(request):
        return f"<!DOCTYPE html><h1>{request.path}</h1>"

    app.run()
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "CacheConfig",
    "CacheStore",
    "ConfigurationError",
    "ExpirySweeper",
    "HTTPError",
    "MethodNotAllowed",
    "NotFound",
    "RenderError",
    "RenderGateway",
    "Request",
    "Response",
    "RoostError",
    "Template",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import roost`` fast while providing a clean top-level API.
    """
    if name == "App":
        from roost.app import App

        return App

    if name == "AppConfig":
        from roost.config import AppConfig

        return AppConfig

    if name in ("CacheConfig", "CacheStore", "ExpirySweeper", "RenderGateway"):
        from roost import cache as _cache

        return getattr(_cache, name)

    if name == "Request":
        from roost.http.request import Request

        return Request

    if name == "Response":
        from roost.http.response import Response

        return Response

    if name == "Template":
        from roost.templating.returns import Template

        return Template

    if name in (
        "ConfigurationError",
        "HTTPError",
        "MethodNotAllowed",
        "NotFound",
        "RenderError",
        "RoostError",
    ):
        from roost import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
