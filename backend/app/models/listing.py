"""Listing model — an hourly-rented venue and its pricing configuration."""

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base, TimestampMixin, UUIDPrimaryKeyMixin


class Listing(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A venue a host rents out by the hour.

    Pricing rules live on the row and are only changed through the host
    listing endpoints. JSON columns hold:

    - ``duration_discounts``: ``[{"min_hours": 4, "discount_percent": 8}, ...]``
      sorted by ``min_hours``.
    - ``bonus_hours_offer``: ``{"min_hours": 6, "bonus_hours": 1, "label": "..."}``.
    - ``operating_hours``: ``{"monday": {"start": "08:00", "end": "20:00",
      "closed": false}, ...}``.
    """

    __tablename__ = "listings"

    host_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, default=None)
    location: Mapped[str | None] = mapped_column(String(255), default=None)
    capacity: Mapped[int | None] = mapped_column(Integer, default=None)
    status: Mapped[str] = mapped_column(String(50), default="active", server_default="active")  # active, inactive

    hourly_rate: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    min_hours: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    max_hours: Mapped[int] = mapped_column(Integer, default=12, nullable=False)
    included_guests: Mapped[int] = mapped_column(Integer, default=10, nullable=False)
    extra_guest_charge: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), default=None)
    auto_confirm: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    duration_discounts: Mapped[list | None] = mapped_column(JSON, default=None)
    bonus_hours_offer: Mapped[dict | None] = mapped_column(JSON, default=None)
    operating_hours: Mapped[dict | None] = mapped_column(JSON, default=None)

    # Time-boxed sale
    discount_percent: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), default=None)
    discount_from: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), default=None)
    discount_until: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), default=None)
    discount_reason: Mapped[str | None] = mapped_column(String(255), default=None)

    # Relationships
    host: Mapped["User"] = relationship(lazy="selectin")  # type: ignore[name-defined]  # noqa: F821
    bookings: Mapped[list["Booking"]] = relationship(  # type: ignore[name-defined]  # noqa: F821
        back_populates="listing", cascade="all, delete-orphan", passive_deletes=True
    )
    blocked_dates: Mapped[list["BlockedDate"]] = relationship(  # type: ignore[name-defined]  # noqa: F821
        back_populates="listing", cascade="all, delete-orphan", passive_deletes=True
    )
    special_pricing: Mapped[list["SpecialPricing"]] = relationship(  # type: ignore[name-defined]  # noqa: F821
        back_populates="listing", cascade="all, delete-orphan", passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<Listing(id={self.id}, title={self.title!r}, hourly_rate={self.hourly_rate})>"
