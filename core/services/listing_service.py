# =============================================================================
# core/services/listing_service.py - Listing Lifecycle
# =============================================================================
# Create, update and delete software listings, keeping each row and its
# two backing files (demo video and ZIP archive) in step.
#
# Lifecycle of a row: nonexistent -> active -> (updated)* -> deleted
#
# File changes run inside a FileTransaction so a failure anywhere before
# the database commit leaves both the row and the upload directory as
# they were.
# =============================================================================

import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.exceptions import (
    ForbiddenError,
    SoftwareNotFoundError,
    UnauthorizedError,
    ValidationError,
)
from core.models import OwnershipReport
from core.models.tables import Software
from core.services.authorization_service import AuthorizationService
from core.services.storage_service import FileStore, IncomingFile, has_content

logger = logging.getLogger(__name__)


# Prices are stored as Numeric(10, 2)
PRICE_STEP = Decimal("0.01")
MAX_PRICE = Decimal("99999999.99")


class InvalidPrice(ValueError):
    """A price value that is not a finite number or can't be stored."""


def parse_price(value: Decimal | float | int | str | None) -> Decimal | None:
    """
    Convert a submitted price to Decimal, rounded half-up to cents.

    Rounding happens here so callers compare the value that will
    actually be stored: "0.004" becomes 0.00.

    Returns None when no price was given.

    Raises:
        InvalidPrice: If the value isn't a finite number or exceeds MAX_PRICE
    """
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        price = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise InvalidPrice("Price must be a number")
    if not price.is_finite():
        raise InvalidPrice("Price must be a number")
    if abs(price) <= MAX_PRICE:
        price = price.quantize(PRICE_STEP, rounding=ROUND_HALF_UP)
    if abs(price) > MAX_PRICE:
        raise InvalidPrice(f"Price must not exceed {MAX_PRICE}")
    return price


class ListingService:
    """
    Listing operations for one request.

    Args:
        db: Database session
        files: File store rooted at the upload directory
        authz: Authorization checks (built from `db` if omitted)
    """

    def __init__(
        self,
        db: Session,
        files: FileStore,
        authz: AuthorizationService | None = None,
    ):
        self.db = db
        self.files = files
        self.authz = authz or AuthorizationService(db)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get(self, software_id: int) -> Software:
        """
        Get a listing by ID.

        Raises:
            SoftwareNotFoundError: If no such listing exists
        """
        software = self.db.get(Software, software_id)
        if software is None:
            raise SoftwareNotFoundError(software_id)
        return software

    def list_all(self) -> list[Software]:
        """All listings, in whatever order the database returns them."""
        software = list(self.db.scalars(select(Software)))
        logger.info(f"Fetched {len(software)} listings")
        return software

    # -------------------------------------------------------------------------
    # Create
    # -------------------------------------------------------------------------

    def create(
        self,
        identity: str | None,
        title: str | None,
        video: IncomingFile | None,
        zip_file: IncomingFile | None,
        price: Decimal | float | str | None,
    ) -> Software:
        """
        Upload a new listing.

        Validation runs in a fixed order (title, video, zip, price) and
        reports the first failure.

        Returns:
            The persisted listing, owned by `identity`

        Raises:
            UnauthorizedError: If there is no identity
            ValidationError: If a field is missing or invalid
            StorageError: If the files can't be written
        """
        if not identity:
            logger.error("Upload failed: could not resolve username from token")
            raise UnauthorizedError("Authentication failed - invalid token")

        if title is None or not title.strip():
            raise ValidationError("title", "Title is required")
        if not has_content(video):
            raise ValidationError("video", "Demo video is required")
        if not has_content(zip_file):
            raise ValidationError("zipFile", "ZIP file is required")
        try:
            amount = parse_price(price)
        except InvalidPrice:
            amount = None
        if amount is None or amount <= 0:
            raise ValidationError("price", "Valid price is required")

        try:
            with self.files.transaction() as files:
                video_url = files.add(video)
                zip_url = files.add(zip_file)

                software = Software(
                    title=title.strip(),
                    video_url=video_url,
                    zip_url=zip_url,
                    price=amount,
                    uploaded_by=identity,
                )
                self.db.add(software)
                self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Upload by {identity} failed: {e}")
            raise

        self.db.refresh(software)
        logger.info(f"Software saved with ID {software.id} by {identity}")
        return software

    # -------------------------------------------------------------------------
    # Update
    # -------------------------------------------------------------------------

    def update(
        self,
        software_id: int,
        identity: str | None,
        title: str | None = None,
        video: IncomingFile | None = None,
        zip_file: IncomingFile | None = None,
        price: Decimal | float | str | None = None,
    ) -> Software:
        """
        Update a listing. Only the owner or an admin may do this.

        Each field is optional. A blank title or a price that rounds to
        0.00 or less is ignored.
        A new video or ZIP replaces the old file; if any file step or the
        commit fails, the row and the files are left untouched.

        Raises:
            UnauthorizedError: If there is no identity
            SoftwareNotFoundError: If the listing doesn't exist
            ForbiddenError: If the caller is neither owner nor admin
            ValidationError: If the price isn't a number or is too large
            StorageError: If a file can't be replaced
        """
        if not identity:
            raise UnauthorizedError()

        software = self.get(software_id)

        if not self.authz.can_modify(software, identity):
            logger.warning(
                f"User {identity} may not update software {software_id} "
                f"(uploaded by {software.uploaded_by})"
            )
            raise ForbiddenError("Not authorized to update this software", action="update")

        try:
            amount = parse_price(price)
        except InvalidPrice as e:
            raise ValidationError("price", str(e))

        new_title = title.strip() if title is not None and title.strip() else None
        new_price = amount if amount is not None and amount > 0 else None

        try:
            with self.files.transaction() as files:
                if has_content(video):
                    software.video_url = files.replace(software.video_url, video)
                if has_content(zip_file):
                    software.zip_url = files.replace(software.zip_url, zip_file)
                if new_title is not None:
                    software.title = new_title
                if new_price is not None:
                    software.price = new_price
                self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Update of software {software_id} failed: {e}")
            raise

        self.db.refresh(software)
        logger.info(f"Software {software_id} updated by {identity}")
        return software

    # -------------------------------------------------------------------------
    # Delete
    # -------------------------------------------------------------------------

    def delete(self, software_id: int, identity: str | None) -> None:
        """
        Delete a listing and both of its files. Admin only.

        The row is only deleted once both files are out of the way.

        Raises:
            ForbiddenError: If the caller isn't an admin
            SoftwareNotFoundError: If the listing doesn't exist
            StorageError: If a file can't be removed
        """
        if not self.authz.is_admin(identity):
            logger.warning(f"Delete of software {software_id} refused for {identity}")
            raise ForbiddenError("Admin access required", action="delete")

        software = self.get(software_id)

        try:
            with self.files.transaction() as files:
                files.remove(software.video_url)
                files.remove(software.zip_url)
                self.db.delete(software)
                self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Delete of software {software_id} failed: {e}")
            raise

        logger.info(f"Software {software_id} deleted by {identity}")

    # -------------------------------------------------------------------------
    # Diagnostics
    # -------------------------------------------------------------------------

    def describe_ownership(self, software_id: int, identity: str) -> OwnershipReport:
        """Ownership report for the debug endpoint."""
        return self.authz.describe(self.get(software_id), identity)
