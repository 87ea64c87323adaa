"""Routing — route table for explicit handlers.

Routes are registered during setup and compiled into an immutable
lookup structure when the app freezes.
"""

from roost.routing.route import Route, RouteMatch
from roost.routing.router import Router

__all__ = ["Route", "RouteMatch", "Router"]
