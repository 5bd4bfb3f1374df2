"""Value types for the price-quote engine.

Everything here is immutable. The engine never mutates a config or a
breakdown; a re-quote always builds new instances from scratch.
"""

import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, datetime, time
from decimal import Decimal
from enum import StrEnum
from types import MappingProxyType
from typing import Any

MINUTES_PER_DAY = 24 * 60

WEEKDAY_NAMES: tuple[str, ...] = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)


def minutes_of_day(value: time, *, end_of_day: bool = False) -> int:
    """Convert a time of day to minutes since midnight.

    With ``end_of_day=True`` a value of 00:00 is read as midnight at the end
    of the day (1440) rather than at its start.
    """
    minutes = value.hour * 60 + value.minute
    if end_of_day and minutes == 0:
        return MINUTES_PER_DAY
    return minutes


class BookingStatus(StrEnum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    EXPIRED = "expired"


# Only these statuses hold a slot.
BLOCKING_STATUSES: frozenset[BookingStatus] = frozenset(
    {BookingStatus.PENDING, BookingStatus.CONFIRMED}
)


class FailureKind(StrEnum):
    INVALID_WINDOW = "invalid_window"
    OUTSIDE_OPERATING_HOURS = "outside_operating_hours"
    CONFLICTS_WITH_EXISTING_BOOKING = "conflicts_with_existing_booking"
    INVALID_CONFIGURATION = "invalid_configuration"
    DATE_BLOCKED = "date_blocked"


class DiscountStacking(StrEnum):
    """How the duration-tier and sale percentages combine."""

    SEQUENTIAL = "sequential"  # tier first, then sale on the remainder
    ADDITIVE = "additive"  # percentages summed, capped at 100


class TaxBase(StrEnum):
    """Which amount the tax rate is applied to."""

    SUBTOTAL_AND_FEE = "subtotal_and_fee"
    SUBTOTAL = "subtotal"


@dataclass(frozen=True)
class QuoteFailure:
    """An expected, caller-fixable reason a quote could not be produced."""

    kind: FailureKind
    message: str


@dataclass(frozen=True)
class DurationTier:
    min_hours: int
    discount_percent: Decimal


@dataclass(frozen=True)
class BonusHoursOffer:
    min_hours: int
    bonus_hours: int
    label: str = ""


@dataclass(frozen=True)
class SaleDiscount:
    """Time-boxed promotional markdown. A missing bound is open-ended."""

    percent: Decimal
    starts_at: datetime | None = None
    ends_at: datetime | None = None
    reason: str | None = None

    def is_active(self, now: datetime) -> bool:
        if self.percent <= 0:
            return False
        if self.starts_at is not None and now < self.starts_at:
            return False
        if self.ends_at is not None and now > self.ends_at:
            return False
        return True


@dataclass(frozen=True)
class DayHours:
    """Opening hours for one weekday.

    ``start == end == 00:00`` is an all-day opening. Otherwise an ``end`` of
    00:00 means the venue closes at midnight.
    """

    start: time
    end: time
    closed: bool = False

    @property
    def all_day(self) -> bool:
        return self.start == time(0) and self.end == time(0)

    @property
    def open_minutes(self) -> int:
        return minutes_of_day(self.start)

    @property
    def close_minutes(self) -> int:
        if self.all_day:
            return MINUTES_PER_DAY
        return minutes_of_day(self.end, end_of_day=True)


@dataclass(frozen=True)
class ListingPricingConfig:
    """Pricing and availability rules a host configured on a listing."""

    hourly_rate: Decimal
    min_hours: int
    max_hours: int
    included_guests: int
    extra_guest_rate: Decimal | None = None
    duration_discounts: tuple[DurationTier, ...] = ()
    bonus_hours_offer: BonusHoursOffer | None = None
    sale: SaleDiscount | None = None
    operating_hours: Mapping[str, DayHours] = field(
        default_factory=lambda: MappingProxyType({})
    )
    blocked_dates: frozenset[date] = frozenset()
    special_rates: Mapping[date, Decimal] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def rate_for(self, day: date) -> Decimal:
        """Hourly rate for ``day``, honouring per-date overrides."""
        return self.special_rates.get(day, self.hourly_rate)


@dataclass(frozen=True)
class BookingRequest:
    listing_id: uuid.UUID | None
    booking_date: date
    start_time: time
    end_time: time
    guests: int = 1

    @property
    def start_minutes(self) -> int:
        return minutes_of_day(self.start_time)

    @property
    def end_minutes(self) -> int:
        return minutes_of_day(self.end_time, end_of_day=True)

    @property
    def duration(self) -> Decimal:
        """Requested length in hours (may be zero or negative if malformed)."""
        return Decimal(self.end_minutes - self.start_minutes) / Decimal(60)


@dataclass(frozen=True)
class ExistingBookingWindow:
    booking_date: date
    start_time: time
    end_time: time
    status: BookingStatus

    @property
    def start_minutes(self) -> int:
        return minutes_of_day(self.start_time)

    @property
    def end_minutes(self) -> int:
        return minutes_of_day(self.end_time, end_of_day=True)


@dataclass(frozen=True)
class PricingPolicy:
    """Platform-wide rates and stacking rules applied to every quote."""

    service_fee_rate: Decimal = Decimal("0.10")
    tax_rate: Decimal = Decimal("0.05")
    stacking: DiscountStacking = DiscountStacking.SEQUENTIAL
    tax_base: TaxBase = TaxBase.SUBTOTAL_AND_FEE


@dataclass(frozen=True)
class AppliedDiscount:
    """Audit entry for a discount that shaped the price.

    ``bonus_hours`` entries carry the value of the free hours for display;
    that value is already reflected in ``base_price`` and is not part of
    ``discount_amount``.
    """

    type: str
    amount: Decimal
    label: str = ""


@dataclass(frozen=True)
class PriceBreakdown:
    hourly_rate: Decimal
    duration: Decimal
    bonus_hours: int
    billable_duration: Decimal
    base_price: Decimal
    extra_guest_price: Decimal
    subtotal: Decimal
    discount_amount: Decimal
    discounted_subtotal: Decimal
    service_fee: Decimal
    tax: Decimal
    total_price: Decimal
    applied_discounts: tuple[AppliedDiscount, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Serialize to plain types, money as fixed two-decimal strings."""
        return {
            "hourly_rate": f"{self.hourly_rate:.2f}",
            "duration": str(self.duration.quantize(Decimal("0.01"))),
            "bonus_hours": self.bonus_hours,
            "billable_duration": str(self.billable_duration.quantize(Decimal("0.01"))),
            "base_price": f"{self.base_price:.2f}",
            "extra_guest_price": f"{self.extra_guest_price:.2f}",
            "subtotal": f"{self.subtotal:.2f}",
            "discount_amount": f"{self.discount_amount:.2f}",
            "discounted_subtotal": f"{self.discounted_subtotal:.2f}",
            "service_fee": f"{self.service_fee:.2f}",
            "tax": f"{self.tax:.2f}",
            "total_price": f"{self.total_price:.2f}",
            "applied_discounts": [
                {"type": d.type, "amount": f"{d.amount:.2f}", "label": d.label}
                for d in self.applied_discounts
            ],
        }
