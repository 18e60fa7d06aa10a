"""In-process test client for detour apps::

    from detour.testing import TestClient

    async with TestClient(app) as client:
        response = await client.get("/api")
"""

from detour.testing.client import TestClient

__all__ = ["TestClient"]
