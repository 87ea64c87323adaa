"""``Template``: a kida template name plus its render context.

Returned by route handlers and by the SSR renderer; negotiation and the
render gateway turn it into HTML.
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class Template:
    name: str
    context: dict[str, Any] = field(default_factory=dict)

    def __init__(self, name: str, /, **context: Any) -> None:
        # positional-only: the context may carry its own "name"
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "context", context)
