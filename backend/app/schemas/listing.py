"""Pydantic v2 request/response schemas for host listing endpoints."""

import uuid
from datetime import date, datetime, timezone
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.pricing.types import WEEKDAY_NAMES

_HH_MM = r"^([01]\d|2[0-3]):[0-5]\d$"

# ---------------------------------------------------------------------------
# Pricing building blocks
# ---------------------------------------------------------------------------


class DayHoursSchema(BaseModel):
    """Opening hours for one weekday; ``00:00``-``00:00`` means all day."""

    start: str = Field(..., pattern=_HH_MM)
    end: str = Field(..., pattern=_HH_MM)
    closed: bool = False


OperatingHours = dict[str, DayHoursSchema]


def _check_weekdays(value: OperatingHours | None) -> OperatingHours | None:
    if value is None:
        return value
    unknown = set(value) - set(WEEKDAY_NAMES)
    if unknown:
        raise ValueError(f"Unknown weekday(s) in operating_hours: {', '.join(sorted(unknown))}")
    return value


class DurationTierSchema(BaseModel):
    min_hours: int = Field(..., ge=1)
    discount_percent: Decimal = Field(..., ge=1, le=50)


class BonusHoursOfferSchema(BaseModel):
    min_hours: int = Field(..., ge=1)
    bonus_hours: int = Field(..., ge=1)
    label: str = Field("", max_length=255)


class DurationDiscountsUpdate(BaseModel):
    """Replace a listing's duration tiers and bonus-hours offer."""

    tiers: list[DurationTierSchema] = Field(default_factory=list)
    bonus_hours_offer: BonusHoursOfferSchema | None = None

    @model_validator(mode="after")
    def check_tiers(self) -> "DurationDiscountsUpdate":
        """Reject duplicate tiers and store them sorted by ``min_hours``."""
        hours = [tier.min_hours for tier in self.tiers]
        if len(set(hours)) != len(hours):
            raise ValueError("Duplicate min_hours values not allowed")
        self.tiers.sort(key=lambda tier: tier.min_hours)
        percents = [tier.discount_percent for tier in self.tiers]
        if any(later <= earlier for earlier, later in zip(percents, percents[1:])):
            raise ValueError("Longer tiers must give a larger discount")
        return self


class DurationDiscountsResponse(BaseModel):
    listing_id: uuid.UUID
    hourly_rate: Decimal
    tiers: list[DurationTierSchema]
    bonus_hours_offer: BonusHoursOfferSchema | None = None


class SaleUpdate(BaseModel):
    """Schedule a time-boxed percentage sale."""

    discount_percent: Decimal = Field(..., gt=0, le=100)
    discount_from: datetime
    discount_until: datetime
    discount_reason: str | None = Field(None, max_length=255)

    @field_validator("discount_from", "discount_until")
    @classmethod
    def naive_as_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @model_validator(mode="after")
    def check_window(self) -> "SaleUpdate":
        if self.discount_until < self.discount_from:
            raise ValueError("discount_until must not be before discount_from")
        return self


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class ListingCreate(BaseModel):
    """Schema for creating a new listing."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    location: str | None = Field(None, max_length=255)
    capacity: int | None = Field(None, ge=1)
    status: str = Field("active", pattern="^(active|inactive)$")
    hourly_rate: Decimal = Field(..., gt=0)
    min_hours: int = Field(1, ge=1)
    max_hours: int = Field(12, ge=1, le=24)
    included_guests: int = Field(10, ge=0)
    extra_guest_charge: Decimal | None = Field(None, ge=0)
    auto_confirm: bool = False
    operating_hours: OperatingHours | None = None

    _weekdays = field_validator("operating_hours")(_check_weekdays)

    @model_validator(mode="after")
    def check_hours(self) -> "ListingCreate":
        if self.min_hours > self.max_hours:
            raise ValueError("Minimum hours cannot be greater than maximum hours")
        return self


# Columns that are NOT NULL; leaving them out is fine, sending null is not.
_REQUIRED_ON_UPDATE = (
    "title",
    "status",
    "hourly_rate",
    "min_hours",
    "max_hours",
    "included_guests",
    "auto_confirm",
)


class ListingUpdate(BaseModel):
    """Schema for partially updating a listing. All fields optional."""

    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    location: str | None = Field(None, max_length=255)
    capacity: int | None = Field(None, ge=1)
    status: str | None = Field(None, pattern="^(active|inactive)$")
    hourly_rate: Decimal | None = Field(None, gt=0)
    min_hours: int | None = Field(None, ge=1)
    max_hours: int | None = Field(None, ge=1, le=24)
    included_guests: int | None = Field(None, ge=0)
    extra_guest_charge: Decimal | None = Field(None, ge=0)
    auto_confirm: bool | None = None
    operating_hours: OperatingHours | None = None

    _weekdays = field_validator("operating_hours")(_check_weekdays)

    @model_validator(mode="after")
    def reject_nulls(self) -> "ListingUpdate":
        nulled = sorted(
            name for name in _REQUIRED_ON_UPDATE
            if name in self.model_fields_set and getattr(self, name) is None
        )
        if nulled:
            raise ValueError(f"Cannot be cleared: {', '.join(nulled)}")
        return self


class BlockedDateCreate(BaseModel):
    day: date
    reason: str | None = Field(None, max_length=255)


class SpecialPricingCreate(BaseModel):
    day: date
    hourly_rate: Decimal = Field(..., gt=0)
    reason: str | None = Field(None, max_length=255)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class ListingResponse(BaseModel):
    """Listing with its full pricing configuration."""

    id: uuid.UUID
    host_id: uuid.UUID
    title: str
    description: str | None = None
    location: str | None = None
    capacity: int | None = None
    status: str
    hourly_rate: Decimal
    min_hours: int
    max_hours: int
    included_guests: int
    extra_guest_charge: Decimal | None = None
    auto_confirm: bool
    operating_hours: dict | None = None
    duration_discounts: list | None = None
    bonus_hours_offer: dict | None = None
    discount_percent: Decimal | None = None
    discount_from: datetime | None = None
    discount_until: datetime | None = None
    discount_reason: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ListingListResponse(BaseModel):
    """Paginated list of listings."""

    items: list[ListingResponse]
    total: int


class BlockedDateResponse(BaseModel):
    id: uuid.UUID
    listing_id: uuid.UUID
    day: date
    reason: str | None = None

    model_config = ConfigDict(from_attributes=True)


class SpecialPricingResponse(BaseModel):
    id: uuid.UUID
    listing_id: uuid.UUID
    day: date
    hourly_rate: Decimal
    reason: str | None = None

    model_config = ConfigDict(from_attributes=True)
