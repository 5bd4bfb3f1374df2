"""Booking service — quoting, creating and moving bookings through their lifecycle.

Every booking path runs the same pure quote engine. ``create_booking`` locks
the listing row before reading the slots already held on the requested date,
so two concurrent requests for overlapping windows cannot both pass the
conflict check.
"""

import logging
import uuid
from datetime import date, datetime, time, timedelta

from sqlalchemy import and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.availability import BlockedDate
from app.models.booking import Booking
from app.models.listing import Listing
from app.models.user import User
from app.pricing import (
    WEEKDAY_NAMES,
    BookingRequest,
    BookingStatus,
    ExistingBookingWindow,
    FailureKind,
    PriceBreakdown,
    PriceQuoteEngine,
    QuoteFailure,
)
from app.schemas.booking import BookedSlot, DayScheduleResponse
from app.services.listing_service import get_active_listing, load_pricing_config

logger = logging.getLogger(__name__)

quote_engine = PriceQuoteEngine(settings.pricing_policy)


class BookingRejected(Exception):
    """The quote engine refused the requested window."""

    def __init__(self, failure: QuoteFailure) -> None:
        super().__init__(failure.message)
        self.failure = failure


class BookingNotAllowed(Exception):
    """A marketplace rule, not pricing, forbids the operation.

    ``code`` is one of ``listing_unavailable``, ``own_listing``,
    ``too_many_pending``, ``not_permitted`` or ``invalid_transition``.
    """

    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


# ---------------------------------------------------------------------------
# Slot queries
# ---------------------------------------------------------------------------


def pending_cutoff(now: datetime) -> datetime:
    """Pending bookings created before this instant no longer hold a slot."""
    return now - timedelta(minutes=settings.pending_booking_ttl_minutes)


def _holds_slot(now: datetime):
    return or_(
        Booking.status == BookingStatus.CONFIRMED,
        and_(Booking.status == BookingStatus.PENDING, Booking.created_at >= pending_cutoff(now)),
    )


async def load_existing_windows(
    db: AsyncSession, listing_id: uuid.UUID, day: date, now: datetime
) -> list[ExistingBookingWindow]:
    """Bookings that currently hold time on ``day``, ordered by start."""
    result = await db.execute(
        select(Booking)
        .where(Booking.listing_id == listing_id, Booking.booking_date == day, _holds_slot(now))
        .order_by(Booking.start_time)
    )
    return [
        ExistingBookingWindow(
            booking_date=booking.booking_date,
            start_time=booking.start_time,
            end_time=booking.end_time,
            status=BookingStatus(booking.status),
        )
        for booking in result.scalars().all()
    ]


# ---------------------------------------------------------------------------
# Quote / create
# ---------------------------------------------------------------------------


async def quote_booking(
    db: AsyncSession, listing: Listing, request: BookingRequest, now: datetime
) -> PriceBreakdown:
    """Price ``request`` without reserving anything.

    Raises:
        BookingRejected: If the engine returns a failure or the date has passed.
        ListingConfigError: If the listing's stored pricing cannot be decoded.
    """
    if request.booking_date < now.date():
        raise BookingRejected(QuoteFailure(FailureKind.INVALID_WINDOW, "Cannot book a date in the past"))
    config = await load_pricing_config(db, listing, request.booking_date)
    existing = await load_existing_windows(db, listing.id, request.booking_date, now)
    result = quote_engine.quote(config, request, existing, now)
    if isinstance(result, QuoteFailure):
        raise BookingRejected(result)
    return result


async def count_fresh_pending(db: AsyncSession, guest: User, now: datetime) -> int:
    result = await db.execute(
        select(func.count())
        .select_from(Booking)
        .where(
            Booking.guest_id == guest.id,
            Booking.status == BookingStatus.PENDING,
            Booking.created_at >= pending_cutoff(now),
        )
    )
    return result.scalar_one()


async def create_booking(
    db: AsyncSession,
    listing_id: uuid.UUID,
    guest: User,
    request: BookingRequest,
    now: datetime,
) -> Booking:
    """Quote and store a booking inside the caller's transaction.

    Raises:
        BookingNotAllowed: Listing missing or inactive, the guest owns it, or
            the guest already holds too many pending bookings.
        BookingRejected: If the engine returns a failure.
    """
    listing = await get_active_listing(db, listing_id, for_update=True)
    if listing is None:
        raise BookingNotAllowed("listing_unavailable", "Listing not found or not accepting bookings")
    if listing.host_id == guest.id:
        raise BookingNotAllowed("own_listing", "You cannot book your own listing")

    pending = await count_fresh_pending(db, guest, now)
    if pending >= settings.max_pending_bookings_per_user:
        raise BookingNotAllowed(
            "too_many_pending",
            f"You already have {pending} pending bookings; confirm or cancel one first",
        )

    try:
        breakdown = await quote_booking(db, listing, request, now)
    except BookingRejected as exc:
        logger.warning(
            "Booking rejected for listing %s on %s: %s",
            listing.id,
            request.booking_date,
            exc.failure.kind,
        )
        raise

    status = BookingStatus.CONFIRMED if listing.auto_confirm else BookingStatus.PENDING
    booking = Booking(
        listing_id=listing.id,
        guest_id=guest.id,
        booking_date=request.booking_date,
        start_time=request.start_time,
        end_time=request.end_time,
        guests=request.guests,
        status=status,
        duration=breakdown.duration,
        bonus_hours=breakdown.bonus_hours,
        hourly_rate=breakdown.hourly_rate,
        base_price=breakdown.base_price,
        extra_guest_price=breakdown.extra_guest_price,
        discount_amount=breakdown.discount_amount,
        service_fee=breakdown.service_fee,
        tax=breakdown.tax,
        total_price=breakdown.total_price,
        applied_discounts=breakdown.to_dict()["applied_discounts"],
        created_at=now,
    )
    db.add(booking)
    await db.flush()
    await db.refresh(booking)

    logger.info(
        "Created %s booking %s on listing %s (%s %s-%s, total %s)",
        status,
        booking.id,
        listing.id,
        request.booking_date,
        request.start_time,
        request.end_time,
        booking.total_price,
    )
    return booking


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


def is_stale(booking: Booking, now: datetime) -> bool:
    created = booking.created_at
    if created.tzinfo is None:
        created = created.replace(tzinfo=now.tzinfo)
    return booking.status == BookingStatus.PENDING and created < pending_cutoff(now)


async def cancel_booking(db: AsyncSession, booking: Booking, actor: User) -> Booking:
    """Cancel a pending or confirmed booking as its guest or the listing host."""
    if actor.id not in (booking.guest_id, booking.listing.host_id):
        raise BookingNotAllowed("not_permitted", "Only the guest or the host can cancel this booking")
    if booking.status not in (BookingStatus.PENDING, BookingStatus.CONFIRMED):
        raise BookingNotAllowed("invalid_transition", f"Cannot cancel a {booking.status} booking")

    booking.status = BookingStatus.CANCELLED
    await db.flush()
    await db.refresh(booking)
    logger.info("Booking %s cancelled by user %s", booking.id, actor.id)
    return booking


async def confirm_booking(db: AsyncSession, booking: Booking, host: User, now: datetime) -> Booking:
    """Confirm a pending booking on one of ``host``'s listings.

    A pending booking past its hold window can no longer be confirmed; the
    sweep marks it expired.
    """
    if booking.listing.host_id != host.id:
        raise BookingNotAllowed("not_permitted", "Only the listing host can confirm this booking")
    if booking.status != BookingStatus.PENDING:
        raise BookingNotAllowed("invalid_transition", f"Cannot confirm a {booking.status} booking")
    if is_stale(booking, now):
        raise BookingNotAllowed("invalid_transition", "This booking request has expired")

    booking.status = BookingStatus.CONFIRMED
    await db.flush()
    await db.refresh(booking)
    logger.info("Booking %s confirmed by host %s", booking.id, host.id)
    return booking


async def expire_stale_bookings(db: AsyncSession, now: datetime) -> int:
    """Mark pending bookings older than the hold window as expired."""
    result = await db.execute(
        select(Booking).where(
            Booking.status == BookingStatus.PENDING,
            Booking.created_at < pending_cutoff(now),
        )
    )
    stale = list(result.scalars().all())
    for booking in stale:
        booking.status = BookingStatus.EXPIRED
    await db.flush()

    if stale:
        logger.info("Expired %d stale pending booking(s)", len(stale))
    return len(stale)


async def complete_finished_bookings(db: AsyncSession, now: datetime) -> int:
    """Mark confirmed bookings whose window has ended as completed.

    ``now`` is compared in the timezone it carries; an end time of 00:00
    means the booking runs to midnight.
    """
    today = now.date()
    current = now.time().replace(tzinfo=None)
    result = await db.execute(
        select(Booking).where(
            Booking.status == BookingStatus.CONFIRMED,
            or_(
                Booking.booking_date < today,
                and_(
                    Booking.booking_date == today,
                    Booking.end_time != time(0, 0),
                    Booking.end_time <= current,
                ),
            ),
        )
    )
    finished = list(result.scalars().all())
    for booking in finished:
        booking.status = BookingStatus.COMPLETED
    await db.flush()

    if finished:
        logger.info("Completed %d finished booking(s)", len(finished))
    return len(finished)


# ---------------------------------------------------------------------------
# Schedule
# ---------------------------------------------------------------------------


async def get_day_schedule(
    db: AsyncSession, listing: Listing, day: date, now: datetime
) -> DayScheduleResponse:
    """Opening hours, per-date overrides and held slots for ``day``."""
    config = await load_pricing_config(db, listing, day)
    weekday = WEEKDAY_NAMES[day.weekday()]

    opens_at = closes_at = None
    if not config.operating_hours:
        is_open = True
    else:
        hours = config.operating_hours.get(weekday)
        is_open = hours is not None and not hours.closed
        if is_open:
            opens_at = hours.start.strftime("%H:%M")
            closes_at = hours.end.strftime("%H:%M")

    blocked_reason = None
    blocked = day in config.blocked_dates
    if blocked:
        result = await db.execute(
            select(BlockedDate.reason).where(BlockedDate.listing_id == listing.id, BlockedDate.day == day)
        )
        blocked_reason = result.scalar_one_or_none()

    windows = await load_existing_windows(db, listing.id, day, now)
    return DayScheduleResponse(
        listing_id=listing.id,
        day=day,
        weekday=weekday,
        is_open=is_open,
        opens_at=opens_at,
        closes_at=closes_at,
        blocked=blocked,
        blocked_reason=blocked_reason,
        hourly_rate=config.rate_for(day),
        min_hours=config.min_hours,
        max_hours=config.max_hours,
        booked_slots=[
            BookedSlot(start_time=w.start_time, end_time=w.end_time, status=w.status) for w in windows
        ],
    )
