"""SSR catch-all through the full App pipeline: headers, caching, failures."""

import logging
from pathlib import Path

import pytest

from roost.app import App
from roost.cache.gateway import CacheMeta, CacheStatus
from roost.config import AppConfig
from roost.http.request import Request
from roost.server.ssr import cache_headers
from roost.templating.returns import Template
from roost.testing import FakeClock, TestClient

TEMPLATES_DIR = Path(__file__).parent / "templates"


def _app(clock: FakeClock | None = None, **config_overrides: object) -> tuple[App, list[str]]:
    """App whose renderer records every path it renders."""
    cfg = AppConfig(template_dir=TEMPLATES_DIR, **config_overrides)
    app = App(config=cfg, clock=clock or FakeClock())
    rendered: list[str] = []

    @app.route("/api/hello", methods=["GET", "PUT"])
    def hello(request: Request):
        return {"message": "Hello, world!", "method": request.method}

    @app.renderer
    def render(request: Request):
        rendered.append(request.path)
        return f"<!DOCTYPE html><h1>{request.path}</h1>"

    return app, rendered


class TestCacheHeaders:
    def test_miss(self) -> None:
        meta = CacheMeta(status=CacheStatus.MISS, age=0.0, key="/")
        assert cache_headers(meta, 172800) == {
            "X-Cache": "MISS",
            "Cache-Control": "public, max-age=172800",
        }

    def test_hit_age_truncated(self) -> None:
        meta = CacheMeta(status=CacheStatus.HIT, age=41.9, key="/")
        headers = cache_headers(meta, 100)
        assert headers["X-Cache"] == "HIT"
        assert headers["X-Cache-Age"] == "41"


class TestSSRPages:
    @pytest.mark.anyio
    async def test_miss_then_hit(self) -> None:
        clock = FakeClock()
        app, rendered = _app(clock)

        async with TestClient(app) as client:
            first = await client.get("/about")
            clock.advance(7.5)
            second = await client.get("/about")

        assert first.status == 200
        assert first.header("x-cache") == "MISS"
        assert first.header("x-cache-age") is None
        assert first.header("cache-control") == "public, max-age=172800"
        assert "text/html" in first.content_type

        assert second.header("x-cache") == "HIT"
        assert second.header("x-cache-age") == "7"
        assert second.text == first.text
        assert rendered == ["/about"]

    @pytest.mark.anyio
    async def test_max_age_follows_ttl(self) -> None:
        app, _ = _app(cache_ttl=600)

        async with TestClient(app) as client:
            response = await client.get("/")

        assert response.header("cache-control") == "public, max-age=600"

    @pytest.mark.anyio
    async def test_expired_page_rerendered(self) -> None:
        clock = FakeClock()
        app, rendered = _app(clock, cache_ttl=100)

        async with TestClient(app) as client:
            await client.get("/p")
            clock.set(99)
            hit = await client.get("/p")
            clock.set(100)
            miss = await client.get("/p")

        assert hit.header("x-cache") == "HIT"
        assert miss.header("x-cache") == "MISS"
        assert rendered == ["/p", "/p"]

    @pytest.mark.anyio
    async def test_head_shares_get_entry(self) -> None:
        app, rendered = _app()

        async with TestClient(app) as client:
            head = await client.head("/page")
            get = await client.get("/page")

        assert head.body == b""
        assert head.header("x-cache") == "MISS"
        assert head.header("content-length") == str(len(get.body))
        assert get.header("x-cache") == "HIT"
        assert rendered == ["/page"]

    @pytest.mark.anyio
    async def test_post_to_page_is_not_found(self) -> None:
        app, rendered = _app()

        async with TestClient(app) as client:
            response = await client.post("/about")

        assert response.status == 404
        assert rendered == []

    @pytest.mark.anyio
    async def test_template_renderer(self) -> None:
        app = App(AppConfig(template_dir=TEMPLATES_DIR), clock=FakeClock())

        @app.renderer
        async def render(request: Request):
            return Template("page.html", title="Docs", path=request.path)

        async with TestClient(app) as client:
            response = await client.get("/docs")

        assert "<title>Docs</title>" in response.text
        assert response.header("x-cache") == "MISS"

    @pytest.mark.anyio
    async def test_cache_drained_on_shutdown(self) -> None:
        app, _ = _app()

        async with TestClient(app) as client:
            await client.get("/a")
            await client.get("/b")
            assert app.cache.size() == 2

        assert app.cache.size() == 0


class TestExplicitRoutes:
    @pytest.mark.anyio
    async def test_not_cached(self) -> None:
        app, rendered = _app()

        async with TestClient(app) as client:
            response = await client.get("/api/hello")

        assert response.status == 200
        assert response.header("x-cache") is None
        assert response.header("cache-control") is None
        assert rendered == []
        assert app.cache.size() == 0

    @pytest.mark.anyio
    async def test_repeated_slashes_reach_route(self) -> None:
        app, rendered = _app()

        async with TestClient(app) as client:
            response = await client.get("/api//hello")

        assert response.status == 200
        assert response.content_type.startswith("application/json")
        assert response.header("x-cache") is None
        assert rendered == []
        assert app.cache.size() == 0

    @pytest.mark.anyio
    async def test_method_not_allowed(self) -> None:
        app, rendered = _app()

        async with TestClient(app) as client:
            response = await client.post("/api/hello")

        assert response.status == 405
        assert response.header("allow") == "GET, PUT"
        assert rendered == []


class TestRenderFailure:
    @pytest.mark.anyio
    async def test_failure_is_500_and_not_cached(self, caplog: pytest.LogCaptureFixture) -> None:
        app = App(AppConfig(template_dir=TEMPLATES_DIR), clock=FakeClock())
        calls = 0

        @app.renderer
        def render(request: Request):
            nonlocal calls
            calls += 1
            if calls == 1:
                msg = "upstream down"
                raise RuntimeError(msg)
            return "<p>recovered</p>"

        with caplog.at_level(logging.ERROR, logger="roost.server"):
            async with TestClient(app) as client:
                failed = await client.get("/flaky")
                recovered = await client.get("/flaky")

        assert failed.status == 500
        assert failed.text == "Internal Server Error"
        assert failed.header("x-cache") is None
        assert recovered.status == 200
        assert recovered.header("x-cache") == "MISS"
        assert "SSR render failed" in caplog.text

    @pytest.mark.anyio
    async def test_debug_shows_cause(self) -> None:
        app = App(AppConfig(template_dir=TEMPLATES_DIR, debug=True), clock=FakeClock())

        @app.renderer
        def render(request: Request):
            msg = "upstream down"
            raise RuntimeError(msg)

        async with TestClient(app) as client:
            response = await client.get("/x")

        assert response.status == 500
        assert "RuntimeError: upstream down" in response.text

    @pytest.mark.anyio
    async def test_custom_500_handler(self) -> None:
        app = App(AppConfig(template_dir=TEMPLATES_DIR), clock=FakeClock())

        @app.renderer
        def render(request: Request):
            msg = "nope"
            raise ValueError(msg)

        @app.error(500)
        def server_error(request: Request):
            return "<h1>Something broke</h1>"

        async with TestClient(app) as client:
            response = await client.get("/x")

        assert response.status == 500
        assert response.text == "<h1>Something broke</h1>"


class TestWithoutRenderer:
    @pytest.mark.anyio
    async def test_unmatched_path_is_404(self) -> None:
        app = App(AppConfig(template_dir=TEMPLATES_DIR))

        @app.route("/")
        def index():
            return "home"

        async with TestClient(app) as client:
            response = await client.get("/missing")

        assert response.status == 404
        assert app.gateway is None
