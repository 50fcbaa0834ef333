# =============================================================================
# core/models/purchase.py - Purchase Schemas
# =============================================================================

from datetime import datetime

from .software import ApiModel, Money, SoftwareResponse


class UserSummary(ApiModel):
    """The purchasing account, without anything sensitive."""

    id: int
    username: str
    is_admin: bool


class PurchaseResponse(ApiModel):
    """
    A recorded purchase.

    `software` is null when the listing was deleted after the purchase;
    `price_paid` always keeps the price charged at purchase time.
    """

    id: int
    user: UserSummary
    software: SoftwareResponse | None = None
    purchase_date: datetime
    price_paid: Money
