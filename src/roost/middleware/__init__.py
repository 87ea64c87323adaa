"""Request middleware for roost apps."""

from roost.middleware.protocol import Middleware, Next

__all__ = ["Middleware", "Next"]
