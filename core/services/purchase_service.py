# =============================================================================
# core/services/purchase_service.py - Purchase Ledger
# =============================================================================
# Records one-time purchases and lists a user's purchases and uploads.
#
# A (user, software) pair can be bought once. The unique constraint on the
# purchases table is the authority; the insert either succeeds or collides.
# =============================================================================

import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from app.exceptions import (
    AlreadyPurchasedError,
    SoftwareNotFoundError,
    UnauthorizedError,
    UserNotFoundError,
)
from core.models.tables import Purchase, Software, User
from core.services.authorization_service import find_user

logger = logging.getLogger(__name__)


class PurchaseLedger:
    """Purchase bookkeeping for one request's database session."""

    def __init__(self, db: Session):
        self.db = db

    def _require_user(self, identity: str | None) -> User:
        if not identity:
            raise UnauthorizedError()
        user = find_user(self.db, identity)
        if user is None:
            raise UserNotFoundError(identity)
        return user

    def _exists(self, user_id: int, software_id: int) -> bool:
        stmt = select(Purchase.id).where(
            Purchase.user_id == user_id,
            Purchase.software_id == software_id,
        )
        return self.db.scalars(stmt).first() is not None

    def purchase(self, identity: str | None, software_id: int) -> Purchase:
        """
        Record that `identity` bought a listing.

        The price is copied from the listing now and never changes.

        Raises:
            UnauthorizedError: If there is no identity
            UserNotFoundError: If the identity has no user record
            SoftwareNotFoundError: If the listing doesn't exist
            AlreadyPurchasedError: If this user already bought the listing
        """
        user = self._require_user(identity)

        software = self.db.get(Software, software_id)
        if software is None:
            raise SoftwareNotFoundError(software_id)

        purchase = Purchase(
            user=user,
            software=software,
            purchase_date=datetime.now(timezone.utc),
            price_paid=software.price,
        )
        self.db.add(purchase)

        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            if self._exists(user.id, software_id):
                logger.info(f"Duplicate purchase of software {software_id} by {identity}")
                raise AlreadyPurchasedError(identity, software_id)
            logger.error(f"Purchase of software {software_id} by {identity} failed: {e}")
            raise

        logger.info(f"Purchase recorded: {identity} bought software {software_id}")
        return purchase

    def list_purchases(self, identity: str | None) -> list[Purchase]:
        """
        Purchases made by `identity`.

        Raises:
            UnauthorizedError: If there is no identity
            UserNotFoundError: If the identity has no user record
        """
        user = self._require_user(identity)
        stmt = (
            select(Purchase)
            .where(Purchase.user_id == user.id)
            .options(selectinload(Purchase.user), selectinload(Purchase.software))
        )
        purchases = list(self.db.scalars(stmt))
        logger.info(f"Found {len(purchases)} purchases for user: {identity}")
        return purchases

    def list_uploads(self, identity: str | None) -> list[Software]:
        """
        Listings uploaded by `identity`. No user record is needed.

        Raises:
            UnauthorizedError: If there is no identity
        """
        if not identity:
            raise UnauthorizedError()
        uploads = list(self.db.scalars(select(Software).where(Software.uploaded_by == identity)))
        logger.info(f"Found {len(uploads)} uploads for user: {identity}")
        return uploads
