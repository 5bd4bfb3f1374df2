"""Builders for pure pricing tests; no database involved."""

import uuid
from datetime import date, time
from decimal import Decimal
from types import MappingProxyType

import pytest

from app.pricing import BookingRequest, DayHours, ListingPricingConfig

MONDAY = date(2026, 10, 19)
SATURDAY = date(2026, 10, 24)


def _hhmm(value: str) -> time:
    return time.fromisoformat(value)


@pytest.fixture
def make_config():
    """Factory for a permissive config; keyword overrides replace fields."""

    def _make(**overrides) -> ListingPricingConfig:
        hours = overrides.pop("operating_hours", None)
        if hours is not None:
            overrides["operating_hours"] = MappingProxyType(
                {day: DayHours(_hhmm(spec[0]), _hhmm(spec[1]), *spec[2:]) for day, spec in hours.items()}
            )
        values = {
            "hourly_rate": Decimal("50"),
            "min_hours": 1,
            "max_hours": 12,
            "included_guests": 10,
        }
        values.update(overrides)
        return ListingPricingConfig(**values)

    return _make


@pytest.fixture
def make_request():
    """Factory for a Monday booking request from ``"HH:MM"`` strings."""

    def _make(start: str = "10:00", end: str = "14:00", *, day: date = MONDAY, guests: int = 1) -> BookingRequest:
        return BookingRequest(
            listing_id=uuid.uuid4(),
            booking_date=day,
            start_time=_hhmm(start),
            end_time=_hhmm(end),
            guests=guests,
        )

    return _make
