"""archiclaw.server - Flask REST API server.

Exposes a landscape snapshot through read-only JSON endpoints.
"""

from archiclaw.server.app import create_app

__all__ = ["create_app"]
