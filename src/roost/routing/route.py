"""Route and RouteMatch frozen dataclasses."""

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

_PARAM = re.compile(r"^\{([A-Za-z_][A-Za-z0-9_]*)\}$")


def compile_path(path: str) -> tuple[re.Pattern[str], tuple[str, ...]]:
    """Compile a route path into a full-match regex and its param names.

    Examples::

        "/api/hello"        -> ^/api/hello$, ()
        "/api/hello/{name}" -> ^/api/hello/(?P<name>[^/]+)$, ("name",)
    """
    parts: list[str] = []
    names: list[str] = []
    for segment in path.strip("/").split("/"):
        if not segment:
            continue
        param = _PARAM.match(segment)
        if param:
            names.append(param.group(1))
            parts.append(f"(?P<{param.group(1)}>[^/]+)")
        else:
            parts.append(re.escape(segment))
    return re.compile("^/" + "/".join(parts) + "$"), tuple(names)


@dataclass(frozen=True, slots=True)
class Route:
    """A frozen route definition.

    Created during app setup, compiled into the router at freeze time.
    """

    path: str
    handler: Callable[..., Any]
    methods: frozenset[str]
    pattern: re.Pattern[str] = field(init=False, repr=False, compare=False)
    param_names: tuple[str, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        pattern, names = compile_path(self.path)
        object.__setattr__(self, "pattern", pattern)
        object.__setattr__(self, "param_names", names)

    @property
    def is_static(self) -> bool:
        """True when the path has no ``{param}`` segments."""
        return not self.param_names


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route match."""

    route: Route
    path_params: dict[str, str]
