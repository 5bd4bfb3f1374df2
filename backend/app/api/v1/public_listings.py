"""Public listing routes — browsing, day availability and price quotes.

No login is needed; only active listings are visible.
"""

import uuid
from datetime import date, datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db
from app.api.errors import config_error, rejection_error
from app.models.listing import Listing
from app.pricing import BookingRequest
from app.schemas.booking import DayScheduleResponse, PriceBreakdownResponse, QuoteRequest, QuoteResponse
from app.schemas.listing import ListingListResponse, ListingResponse
from app.services import booking_service
from app.services.listing_service import ListingConfigError, get_active_listing

router = APIRouter(prefix="/api/v1/public/listings", tags=["public"])


async def _get_active(listing_id: uuid.UUID, db: AsyncSession) -> Listing:
    listing = await get_active_listing(db, listing_id)
    if listing is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Listing not found",
        )
    return listing


@router.get("", response_model=ListingListResponse, summary="Browse active listings")
async def browse_listings(
    location: str | None = Query(None, description="Case-insensitive substring match"),
    min_capacity: int | None = Query(None, ge=1),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
) -> ListingListResponse:
    filters = [Listing.status == "active"]
    if location:
        filters.append(Listing.location.ilike(f"%{location}%"))
    if min_capacity is not None:
        filters.append(Listing.capacity >= min_capacity)

    total_result = await db.execute(select(func.count()).select_from(Listing).where(*filters))
    result = await db.execute(
        select(Listing).where(*filters).order_by(Listing.created_at.desc()).offset(skip).limit(limit)
    )
    return ListingListResponse(
        items=[ListingResponse.model_validate(listing) for listing in result.scalars().all()],
        total=total_result.scalar_one(),
    )


@router.get("/{listing_id}", response_model=ListingResponse, summary="Get an active listing")
async def get_public_listing(
    listing_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
) -> ListingResponse:
    listing = await _get_active(listing_id, db)
    return ListingResponse.model_validate(listing)


@router.get("/{listing_id}/availability", response_model=DayScheduleResponse)
async def get_availability(
    listing_id: uuid.UUID,
    day: date = Query(..., alias="date", description="Date to inspect (YYYY-MM-DD)"),
    db: AsyncSession = Depends(get_db),
) -> DayScheduleResponse:
    """Opening hours, rate and already-held slots for one date."""
    listing = await _get_active(listing_id, db)
    try:
        return await booking_service.get_day_schedule(db, listing, day, datetime.now(timezone.utc))
    except ListingConfigError as exc:
        raise config_error(exc) from exc


@router.post("/{listing_id}/quote", response_model=QuoteResponse, summary="Price a window")
async def quote(
    listing_id: uuid.UUID,
    body: QuoteRequest,
    db: AsyncSession = Depends(get_db),
) -> QuoteResponse:
    """Return the itemized price for a window without reserving it."""
    listing = await _get_active(listing_id, db)
    request = BookingRequest(
        listing_id=listing.id,
        booking_date=body.booking_date,
        start_time=body.start_time,
        end_time=body.end_time,
        guests=body.guests,
    )
    try:
        breakdown = await booking_service.quote_booking(db, listing, request, datetime.now(timezone.utc))
    except booking_service.BookingRejected as exc:
        raise rejection_error(exc) from exc
    except ListingConfigError as exc:
        raise config_error(exc) from exc

    return QuoteResponse(
        listing_id=listing.id,
        booking_date=body.booking_date,
        start_time=body.start_time,
        end_time=body.end_time,
        guests=body.guests,
        breakdown=PriceBreakdownResponse.model_validate(breakdown),
    )
