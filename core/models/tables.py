# =============================================================================
# core/models/tables.py - ORM Tables
# =============================================================================
# SQLAlchemy mappings for the three persisted records:
# - User: marketplace account (created by the auth service, read-only here)
# - Software: one purchasable listing and its two backing files
# - Purchase: one-time purchase of a listing by a user
# =============================================================================

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lib.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """Marketplace account; only the username and admin flag matter here."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    username: Mapped[str] = mapped_column(String(100), unique=True, index=True, nullable=False)
    is_admin: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    purchases: Mapped[list["Purchase"]] = relationship(back_populates="user")

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username={self.username!r}, is_admin={self.is_admin})>"


class Software(Base):
    """
    A listing. `uploaded_by` is the uploader's username and never changes
    after creation.
    """

    __tablename__ = "software"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    video_url: Mapped[str] = mapped_column(String(512), nullable=False)
    zip_url: Mapped[str] = mapped_column(String(512), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    uploaded_by: Mapped[str] = mapped_column(String(100), index=True, nullable=False)

    purchases: Mapped[list["Purchase"]] = relationship(back_populates="software")

    def __repr__(self) -> str:
        return f"<Software(id={self.id}, title={self.title!r}, uploaded_by={self.uploaded_by!r})>"


class Purchase(Base):
    """
    One purchase per (user, software) pair. `price_paid` is copied from the
    listing at purchase time and is not updated afterwards.
    """

    __tablename__ = "purchases"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False
    )
    # Purchases outlive a deleted listing
    software_id: Mapped[int | None] = mapped_column(
        ForeignKey("software.id", ondelete="SET NULL"), index=True, nullable=True
    )
    purchase_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )
    price_paid: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    user: Mapped[User] = relationship(back_populates="purchases")
    software: Mapped[Software | None] = relationship(back_populates="purchases")

    __table_args__ = (
        UniqueConstraint("user_id", "software_id", name="uq_purchase_user_software"),
    )

    def __repr__(self) -> str:
        return f"<Purchase(id={self.id}, user_id={self.user_id}, software_id={self.software_id})>"
