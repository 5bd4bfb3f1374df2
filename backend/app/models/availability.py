"""Per-date availability overrides a host sets on a listing."""

import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import Date, ForeignKey, Numeric, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base, UUIDPrimaryKeyMixin


class BlockedDate(UUIDPrimaryKeyMixin, Base):
    """A date on which the listing takes no bookings."""

    __tablename__ = "blocked_dates"

    listing_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("listings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    day: Mapped[date] = mapped_column("date", Date, nullable=False)
    reason: Mapped[str | None] = mapped_column(String(255), default="Blocked by host")
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())

    listing: Mapped["Listing"] = relationship(back_populates="blocked_dates")  # type: ignore[name-defined]  # noqa: F821

    __table_args__ = (UniqueConstraint("listing_id", "date", name="uq_blocked_dates_listing_date"),)


class SpecialPricing(UUIDPrimaryKeyMixin, Base):
    """An hourly rate that replaces the listing's rate on one date."""

    __tablename__ = "special_pricing"

    listing_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("listings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    day: Mapped[date] = mapped_column("date", Date, nullable=False)
    hourly_rate: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    reason: Mapped[str | None] = mapped_column(String(255), default=None)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())

    listing: Mapped["Listing"] = relationship(back_populates="special_pricing")  # type: ignore[name-defined]  # noqa: F821

    __table_args__ = (UniqueConstraint("listing_id", "date", name="uq_special_pricing_listing_date"),)
