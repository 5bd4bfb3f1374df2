"""Pure price-quote engine for hourly venue bookings.

Nothing in this package touches the database or the system clock; callers
pass in the listing's pricing config, the requested window, the bookings that
already hold slots on that date, and ``now``.
"""

from app.pricing.assembler import MONEY_PLACES, assemble_breakdown, to_money
from app.pricing.availability import (
    check_availability,
    check_duration_bounds,
    check_operating_hours,
    find_conflict,
)
from app.pricing.discounts import (
    PromotionGrant,
    resolve_duration_discount,
    resolve_promotions,
)
from app.pricing.engine import PriceQuoteEngine
from app.pricing.types import (
    BLOCKING_STATUSES,
    WEEKDAY_NAMES,
    AppliedDiscount,
    BonusHoursOffer,
    BookingRequest,
    BookingStatus,
    DayHours,
    DiscountStacking,
    DurationTier,
    ExistingBookingWindow,
    FailureKind,
    ListingPricingConfig,
    PriceBreakdown,
    PricingPolicy,
    QuoteFailure,
    SaleDiscount,
    TaxBase,
)
from app.pricing.validation import validate_config

__all__ = [
    "AppliedDiscount",
    "BLOCKING_STATUSES",
    "BonusHoursOffer",
    "BookingRequest",
    "BookingStatus",
    "DayHours",
    "DiscountStacking",
    "DurationTier",
    "ExistingBookingWindow",
    "FailureKind",
    "ListingPricingConfig",
    "MONEY_PLACES",
    "PriceBreakdown",
    "PriceQuoteEngine",
    "PricingPolicy",
    "PromotionGrant",
    "QuoteFailure",
    "SaleDiscount",
    "TaxBase",
    "WEEKDAY_NAMES",
    "assemble_breakdown",
    "check_availability",
    "check_duration_bounds",
    "check_operating_hours",
    "find_conflict",
    "resolve_duration_discount",
    "resolve_promotions",
    "to_money",
    "validate_config",
]
