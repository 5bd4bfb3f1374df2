"""Booking-window validation against opening hours, bounds and other bookings."""

from collections.abc import Iterable
from datetime import time
from decimal import Decimal

from app.pricing.types import (
    BLOCKING_STATUSES,
    WEEKDAY_NAMES,
    BookingRequest,
    ExistingBookingWindow,
    FailureKind,
    ListingPricingConfig,
    QuoteFailure,
)


def _on_minute(value: time) -> bool:
    return value.second == 0 and value.microsecond == 0


def weekday_name(request: BookingRequest) -> str:
    """Lowercase weekday name used as the operating-hours key."""
    return WEEKDAY_NAMES[request.booking_date.weekday()]


def check_duration_bounds(
    duration: Decimal, min_hours: int, max_hours: int
) -> QuoteFailure | None:
    """Fail when ``duration`` falls outside ``[min_hours, max_hours]``."""
    if duration < min_hours:
        return QuoteFailure(
            FailureKind.INVALID_WINDOW,
            f"Bookings must be at least {min_hours} hour(s)",
        )
    if duration > max_hours:
        return QuoteFailure(
            FailureKind.INVALID_WINDOW,
            f"Bookings cannot exceed {max_hours} hour(s)",
        )
    return None


def check_operating_hours(
    config: ListingPricingConfig, request: BookingRequest
) -> QuoteFailure | None:
    """Fail when the window is not inside the venue's hours for that weekday.

    A listing without any configured hours accepts every window.
    """
    if not config.operating_hours:
        return None

    day = weekday_name(request)
    hours = config.operating_hours.get(day)
    if hours is None or hours.closed:
        return QuoteFailure(
            FailureKind.OUTSIDE_OPERATING_HOURS,
            f"Venue is closed on {day.capitalize()}",
        )
    if hours.all_day:
        return None
    if request.start_minutes < hours.open_minutes or request.end_minutes > hours.close_minutes:
        return QuoteFailure(
            FailureKind.OUTSIDE_OPERATING_HOURS,
            f"Venue is open {hours.start:%H:%M}-{hours.end:%H:%M} on {day.capitalize()}",
        )
    return None


def find_conflict(
    request: BookingRequest, existing_bookings: Iterable[ExistingBookingWindow]
) -> ExistingBookingWindow | None:
    """Return the first slot-holding booking overlapping the request.

    Windows are half-open, so back-to-back bookings do not overlap.
    """
    for window in existing_bookings:
        if window.booking_date != request.booking_date:
            continue
        if window.status not in BLOCKING_STATUSES:
            continue
        if window.start_minutes < request.end_minutes and request.start_minutes < window.end_minutes:
            return window
    return None


def check_availability(
    config: ListingPricingConfig,
    request: BookingRequest,
    existing_bookings: Iterable[ExistingBookingWindow],
) -> QuoteFailure | None:
    """Validate a requested window. Read-only; returns the first failure."""
    if not (_on_minute(request.start_time) and _on_minute(request.end_time)):
        return QuoteFailure(
            FailureKind.INVALID_WINDOW, "Start and end times must be whole minutes"
        )

    if request.end_minutes <= request.start_minutes:
        return QuoteFailure(
            FailureKind.INVALID_WINDOW, "End time must be after start time"
        )

    if request.booking_date in config.blocked_dates:
        return QuoteFailure(
            FailureKind.DATE_BLOCKED,
            f"Listing is not available on {request.booking_date.isoformat()}",
        )

    failure = check_operating_hours(config, request)
    if failure is not None:
        return failure

    failure = check_duration_bounds(request.duration, config.min_hours, config.max_hours)
    if failure is not None:
        return failure

    conflict = find_conflict(request, existing_bookings)
    if conflict is not None:
        return QuoteFailure(
            FailureKind.CONFLICTS_WITH_EXISTING_BOOKING,
            "This time slot is no longer available. Please choose another time.",
        )
    return None
