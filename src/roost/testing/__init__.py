"""Testing utilities for roost applications.

Provides an async test client and a manually advanced clock for
deterministic cache expiry tests::

    from roost.testing import FakeClock, TestClient
"""

from roost.testing.clock import FakeClock
from roost.testing.client import TestClient

__all__ = ["FakeClock", "TestClient"]
