"""Translate service-level failures into HTTP errors."""

from fastapi import HTTPException, status

from app.pricing import FailureKind
from app.services.booking_service import BookingNotAllowed, BookingRejected
from app.services.listing_service import ListingConfigError

_FAILURE_STATUS = {
    FailureKind.INVALID_WINDOW: status.HTTP_400_BAD_REQUEST,
    FailureKind.OUTSIDE_OPERATING_HOURS: status.HTTP_400_BAD_REQUEST,
    FailureKind.DATE_BLOCKED: status.HTTP_400_BAD_REQUEST,
    FailureKind.CONFLICTS_WITH_EXISTING_BOOKING: status.HTTP_409_CONFLICT,
    FailureKind.INVALID_CONFIGURATION: status.HTTP_422_UNPROCESSABLE_ENTITY,
}

_NOT_ALLOWED_STATUS = {
    "listing_unavailable": status.HTTP_404_NOT_FOUND,
    "own_listing": status.HTTP_403_FORBIDDEN,
    "not_permitted": status.HTTP_403_FORBIDDEN,
    "too_many_pending": status.HTTP_429_TOO_MANY_REQUESTS,
    "invalid_transition": status.HTTP_409_CONFLICT,
}


def rejection_error(exc: BookingRejected) -> HTTPException:
    failure = exc.failure
    return HTTPException(
        status_code=_FAILURE_STATUS.get(failure.kind, status.HTTP_400_BAD_REQUEST),
        detail={"code": str(failure.kind), "message": failure.message},
    )


def not_allowed_error(exc: BookingNotAllowed) -> HTTPException:
    return HTTPException(
        status_code=_NOT_ALLOWED_STATUS.get(exc.code, status.HTTP_400_BAD_REQUEST),
        detail={"code": exc.code, "message": exc.message},
    )


def config_error(exc: ListingConfigError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail={"code": str(FailureKind.INVALID_CONFIGURATION), "message": exc.message},
    )
