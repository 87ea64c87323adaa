"""Request path canonicalisation.

The router and the SSR cache key policy both resolve paths through
``canonical_path``, so a path that misses every explicit route is cached
under the same form the router compared against.
"""

import re

_SLASHES = re.compile(r"/{2,}")


def canonical_path(path: str) -> str:
    """Collapse repeated slashes and drop the trailing slash.

    ``/blog//post/`` and ``/blog/post`` name the same page.
    """
    path = _SLASHES.sub("/", path or "/")
    if not path.startswith("/"):
        path = "/" + path
    return path.rstrip("/") or "/"
