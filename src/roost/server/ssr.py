"""SSR responses — wraps gateway output in HTTP cache headers.

Every cached page carries:

- ``X-Cache: HIT`` or ``X-Cache: MISS``
- ``X-Cache-Age: <seconds>`` (hits only)
- ``Cache-Control: public, max-age=<ttl seconds>``
"""

from roost.cache.gateway import CacheMeta, CacheStatus, RenderGateway
from roost.http.request import Request
from roost.http.response import Response

# Methods the SSR catch-all answers; HEAD shares the GET cache entry
SSR_METHODS = frozenset({"GET", "HEAD"})


def cache_headers(meta: CacheMeta, max_age: int) -> dict[str, str]:
    """Response headers describing how a page was served."""
    headers = {"X-Cache": meta.status.value}
    if meta.status is CacheStatus.HIT:
        headers["X-Cache-Age"] = str(meta.age_seconds)
    headers["Cache-Control"] = f"public, max-age={max_age}"
    return headers


async def serve_page(gateway: RenderGateway, request: Request) -> Response:
    """Serve *request* through the gateway as an HTML response.

    ``RenderError`` propagates to the error pipeline, which answers 500.
    """
    content, meta = await gateway.serve(request)
    return Response(body=content).with_headers(cache_headers(meta, gateway.config.max_age))
