"""Pydantic v2 schemas for analytics endpoints."""

import uuid
from datetime import date
from decimal import Decimal

from pydantic import BaseModel


class ListingEarningsResponse(BaseModel):
    """Earnings for a single listing over a given period."""

    listing_id: uuid.UUID
    title: str
    bookings: int
    hours_booked: Decimal
    revenue: Decimal
    discounts_granted: Decimal


class EarningsSummaryResponse(BaseModel):
    """Earnings across all of a host's listings."""

    period_start: date
    period_end: date
    listings: list[ListingEarningsResponse]
    total_bookings: int
    total_revenue: Decimal
    total_discounts: Decimal
