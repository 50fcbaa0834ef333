# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - software.py: Listing upload/update/delete, browsing and purchases
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import health
from . import software

__all__ = [
    "health",
    "software",
]
