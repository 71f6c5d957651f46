"""API route modules.

Route organization:
- auth: Session start, poll, status and cancel (JSON)
- page: Interactive QR/status page (HTML)
- jwks: Public verification key set
- health: Liveness
"""

from . import auth, health, jwks, page

__all__ = [
    "auth",
    "health",
    "jwks",
    "page",
]
