# =============================================================================
# core/services/authorization_service.py - Ownership and Admin Checks
# =============================================================================
# Decides what an identity (username from the bearer token) may do with
# a listing:
# - update: owner or admin
# - delete: admin only
# =============================================================================

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from core.models.software import OwnershipReport
from core.models.tables import Software, User

logger = logging.getLogger(__name__)


def find_user(db: Session, username: str | None) -> User | None:
    """Look up a user row by username."""
    if not username:
        return None
    return db.scalars(select(User).where(User.username == username)).first()


class AuthorizationService:
    """Owner/admin checks for one request's database session."""

    def __init__(self, db: Session):
        self.db = db

    @staticmethod
    def is_owner(software: Software, identity: str | None) -> bool:
        """True when the identity uploaded the listing."""
        if not identity or software.uploaded_by is None:
            return False
        return software.uploaded_by == identity

    def is_admin(self, identity: str | None) -> bool:
        """True when the identity maps to a user flagged as admin."""
        user = find_user(self.db, identity)
        return bool(user is not None and user.is_admin)

    def can_modify(self, software: Software, identity: str | None) -> bool:
        return self.is_owner(software, identity) or self.is_admin(identity)

    def describe(self, software: Software, identity: str) -> OwnershipReport:
        """Build the diagnostic ownership report for a listing."""
        is_owner = self.is_owner(software, identity)
        is_admin = self.is_admin(identity)
        return OwnershipReport(
            software_id=software.id,
            software_title=software.title,
            uploaded_by=software.uploaded_by,
            current_user=identity,
            is_owner=is_owner,
            is_admin=is_admin,
            can_edit=is_owner or is_admin,
        )
