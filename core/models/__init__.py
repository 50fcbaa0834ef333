# =============================================================================
# core/models/ - Data Models
# =============================================================================
# This package contains:
# - tables.py: SQLAlchemy ORM tables (User, Software, Purchase)
# - software.py: Pydantic schemas for listings
# - purchase.py: Pydantic schemas for purchases
#
# The Pydantic models define the "contract" between API and clients.
# =============================================================================

from .purchase import PurchaseResponse, UserSummary
from .software import ApiModel, Money, OwnershipReport, SoftwareResponse
from .tables import Purchase, Software, User

__all__ = [
    # Schemas
    "ApiModel",
    "Money",
    "OwnershipReport",
    "PurchaseResponse",
    "SoftwareResponse",
    "UserSummary",
    # Tables
    "Purchase",
    "Software",
    "User",
]
