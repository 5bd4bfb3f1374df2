"""Pydantic v2 request/response schemas for quotes and bookings."""

import uuid
from datetime import date, datetime, time
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class QuoteRequest(BaseModel):
    """A window on one date; an ``end_time`` of 00:00 means midnight."""

    booking_date: date
    start_time: time
    end_time: time
    guests: int = Field(1, ge=1)

    @field_validator("start_time", "end_time")
    @classmethod
    def whole_minutes(cls, value: time) -> time:
        if value.second or value.microsecond:
            raise ValueError("Times must be whole minutes (HH:MM)")
        if value.tzinfo is not None:
            raise ValueError("Times are local to the listing and must not carry a timezone")
        return value


class BookingCreate(QuoteRequest):
    """Schema for creating a new booking."""

    listing_id: uuid.UUID


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class AppliedDiscountResponse(BaseModel):
    type: str
    amount: Decimal
    label: str = ""

    model_config = ConfigDict(from_attributes=True)


class PriceBreakdownResponse(BaseModel):
    """Itemized price for a requested window."""

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
    applied_discounts: list[AppliedDiscountResponse] = []

    model_config = ConfigDict(from_attributes=True)


class QuoteResponse(BaseModel):
    listing_id: uuid.UUID
    booking_date: date
    start_time: time
    end_time: time
    guests: int
    breakdown: PriceBreakdownResponse


class BookingResponse(BaseModel):
    """A stored booking with the price it was created at."""

    id: uuid.UUID
    listing_id: uuid.UUID
    guest_id: uuid.UUID
    booking_date: date
    start_time: time
    end_time: time
    guests: int
    status: str
    duration: Decimal
    bonus_hours: int
    hourly_rate: Decimal
    base_price: Decimal
    extra_guest_price: Decimal
    discount_amount: Decimal
    service_fee: Decimal
    tax: Decimal
    total_price: Decimal
    applied_discounts: list[AppliedDiscountResponse] | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BookingListResponse(BaseModel):
    """Paginated list of bookings."""

    items: list[BookingResponse]
    total: int


class BookedSlot(BaseModel):
    start_time: time
    end_time: time
    status: str


class DayScheduleResponse(BaseModel):
    """What a guest needs to pick a window on one date."""

    listing_id: uuid.UUID
    day: date
    weekday: str
    is_open: bool
    opens_at: str | None = None
    closes_at: str | None = None
    blocked: bool = False
    blocked_reason: str | None = None
    hourly_rate: Decimal
    min_hours: int
    max_hours: int
    booked_slots: list[BookedSlot] = []
