"""Bookings API router.

Guests create and cancel their own bookings; hosts see, confirm and cancel
bookings on the listings they own.
"""

import logging
import uuid
from datetime import date, datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_host, get_current_user, get_db
from app.api.errors import config_error, not_allowed_error, rejection_error
from app.models.booking import Booking
from app.models.listing import Listing
from app.models.user import User
from app.pricing import BookingRequest
from app.schemas.booking import BookingCreate, BookingListResponse, BookingResponse
from app.services import booking_service
from app.services.listing_service import ListingConfigError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/bookings", tags=["bookings"])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _get_visible_booking(booking_id: uuid.UUID, current_user: User, db: AsyncSession) -> Booking:
    """Fetch a booking the user made or hosts.

    Raises ``HTTPException 404`` for anything else.
    """
    result = await db.execute(
        select(Booking)
        .join(Listing, Booking.listing_id == Listing.id)
        .where(
            Booking.id == booking_id,
            or_(Booking.guest_id == current_user.id, Listing.host_id == current_user.id),
        )
    )
    booking = result.scalar_one_or_none()
    if booking is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Booking not found",
        )
    return booking


async def _paginate(db: AsyncSession, query, skip: int, limit: int) -> BookingListResponse:
    total_result = await db.execute(select(func.count()).select_from(query.subquery()))
    result = await db.execute(
        query.order_by(Booking.booking_date.desc(), Booking.start_time).offset(skip).limit(limit)
    )
    return BookingListResponse(
        items=[BookingResponse.model_validate(b) for b in result.scalars().all()],
        total=total_result.scalar_one(),
    )


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    body: BookingCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> BookingResponse:
    """Reserve a window at the quoted price.

    The booking starts ``pending`` (or ``confirmed`` on auto-confirm listings)
    and holds its slot until the host acts or the hold expires.
    """
    request = BookingRequest(
        listing_id=body.listing_id,
        booking_date=body.booking_date,
        start_time=body.start_time,
        end_time=body.end_time,
        guests=body.guests,
    )
    try:
        booking = await booking_service.create_booking(
            db, body.listing_id, current_user, request, datetime.now(timezone.utc)
        )
    except booking_service.BookingRejected as exc:
        raise rejection_error(exc) from exc
    except booking_service.BookingNotAllowed as exc:
        raise not_allowed_error(exc) from exc
    except ListingConfigError as exc:
        raise config_error(exc) from exc

    return BookingResponse.model_validate(booking)


# ---------------------------------------------------------------------------
# List / get
# ---------------------------------------------------------------------------


@router.get("", response_model=BookingListResponse, summary="Bookings I made")
async def list_my_bookings(
    status_filter: str | None = Query(None, alias="status"),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> BookingListResponse:
    query = select(Booking).where(Booking.guest_id == current_user.id)
    if status_filter is not None:
        query = query.where(Booking.status == status_filter)
    return await _paginate(db, query, skip, limit)


@router.get("/host", response_model=BookingListResponse, summary="Bookings on my listings")
async def list_host_bookings(
    listing_id: uuid.UUID | None = Query(None),
    status_filter: str | None = Query(None, alias="status"),
    date_from: date | None = Query(None, description="Booking date on or after"),
    date_to: date | None = Query(None, description="Booking date on or before"),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_host),
) -> BookingListResponse:
    query = (
        select(Booking)
        .join(Listing, Booking.listing_id == Listing.id)
        .where(Listing.host_id == current_user.id)
    )
    if listing_id is not None:
        query = query.where(Booking.listing_id == listing_id)
    if status_filter is not None:
        query = query.where(Booking.status == status_filter)
    if date_from is not None:
        query = query.where(Booking.booking_date >= date_from)
    if date_to is not None:
        query = query.where(Booking.booking_date <= date_to)
    return await _paginate(db, query, skip, limit)


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> BookingResponse:
    booking = await _get_visible_booking(booking_id, current_user, db)
    return BookingResponse.model_validate(booking)


# ---------------------------------------------------------------------------
# Status transitions
# ---------------------------------------------------------------------------


@router.post("/{booking_id}/cancel", response_model=BookingResponse)
async def cancel_booking(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> BookingResponse:
    booking = await _get_visible_booking(booking_id, current_user, db)
    try:
        booking = await booking_service.cancel_booking(db, booking, current_user)
    except booking_service.BookingNotAllowed as exc:
        raise not_allowed_error(exc) from exc
    return BookingResponse.model_validate(booking)


@router.post("/{booking_id}/confirm", response_model=BookingResponse)
async def confirm_booking(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_host),
) -> BookingResponse:
    booking = await _get_visible_booking(booking_id, current_user, db)
    try:
        booking = await booking_service.confirm_booking(db, booking, current_user, datetime.now(timezone.utc))
    except booking_service.BookingNotAllowed as exc:
        raise not_allowed_error(exc) from exc
    return BookingResponse.model_validate(booking)
