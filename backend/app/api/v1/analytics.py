"""Analytics API router — host earnings over a period."""

import uuid
from datetime import date
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_host, get_db
from app.models.booking import Booking
from app.models.listing import Listing
from app.models.user import User
from app.pricing import BookingStatus, to_money
from app.schemas.analytics import EarningsSummaryResponse, ListingEarningsResponse

router = APIRouter(prefix="/api/v1/analytics", tags=["analytics"])

# Bookings that count as earned revenue
_EARNING_STATUSES = (BookingStatus.CONFIRMED, BookingStatus.COMPLETED)


def _discounts_granted(booking: Booking) -> Decimal:
    """Tier and sale discounts plus the value of free bonus hours."""
    total = Decimal(booking.discount_amount or 0)
    for entry in booking.applied_discounts or []:
        if entry.get("type") == "bonus_hours":
            total += Decimal(str(entry.get("amount", "0")))
    return total


@router.get("/earnings", response_model=EarningsSummaryResponse)
async def get_earnings(
    period_start: date = Query(..., description="First booking date included"),
    period_end: date = Query(..., description="Last booking date included"),
    listing_id: uuid.UUID | None = Query(None, description="Filter by specific listing"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_host),
) -> EarningsSummaryResponse:
    """Per-listing booking counts, revenue and discounts for confirmed and
    completed bookings dated within the period (inclusive).
    """
    if period_end < period_start:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="period_end must not be before period_start",
        )

    listings_query = select(Listing).where(Listing.host_id == current_user.id).order_by(Listing.title)
    if listing_id is not None:
        listings_query = listings_query.where(Listing.id == listing_id)
    listings = list((await db.execute(listings_query)).scalars().all())

    if not listings and listing_id is not None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Listing not found",
        )

    bookings_result = await db.execute(
        select(Booking).where(
            Booking.listing_id.in_([listing.id for listing in listings]),
            Booking.status.in_(_EARNING_STATUSES),
            Booking.booking_date >= period_start,
            Booking.booking_date <= period_end,
        )
    )
    by_listing: dict[uuid.UUID, list[Booking]] = {listing.id: [] for listing in listings}
    for booking in bookings_result.scalars().all():
        by_listing[booking.listing_id].append(booking)

    items: list[ListingEarningsResponse] = []
    for listing in listings:
        bookings = by_listing[listing.id]
        items.append(
            ListingEarningsResponse(
                listing_id=listing.id,
                title=listing.title,
                bookings=len(bookings),
                hours_booked=sum((Decimal(b.duration) for b in bookings), Decimal("0")),
                revenue=to_money(sum((Decimal(b.total_price) for b in bookings), Decimal("0"))),
                discounts_granted=to_money(sum((_discounts_granted(b) for b in bookings), Decimal("0"))),
            )
        )

    return EarningsSummaryResponse(
        period_start=period_start,
        period_end=period_end,
        listings=items,
        total_bookings=sum(item.bookings for item in items),
        total_revenue=to_money(sum((item.revenue for item in items), Decimal("0"))),
        total_discounts=to_money(sum((item.discounts_granted for item in items), Decimal("0"))),
    )
