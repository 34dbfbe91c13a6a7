"""Test utilities for canopy applications.

::

    from canopy.testing import TestClient
"""

from canopy.testing.client import TestClient

__all__ = ["TestClient"]
