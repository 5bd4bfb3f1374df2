"""PriceQuoteEngine — stages validation, discount resolution and assembly."""

import logging
from collections.abc import Iterable
from datetime import datetime

from app.pricing.assembler import assemble_breakdown
from app.pricing.availability import check_availability
from app.pricing.discounts import resolve_duration_discount, resolve_promotions
from app.pricing.types import (
    BookingRequest,
    ExistingBookingWindow,
    ListingPricingConfig,
    PriceBreakdown,
    PricingPolicy,
    QuoteFailure,
)
from app.pricing.validation import validate_config

logger = logging.getLogger(__name__)


class PriceQuoteEngine:
    """Deterministic quote calculator for hourly venue bookings.

    The engine holds only its immutable policy, so one instance can serve
    concurrent requests. It performs no locking and no I/O: callers that go
    on to insert a booking must read ``existing_bookings`` inside the same
    transaction (or row lock) as the insert.
    """

    def __init__(self, policy: PricingPolicy | None = None) -> None:
        self.policy = policy or PricingPolicy()

    def quote(
        self,
        config: ListingPricingConfig,
        request: BookingRequest,
        existing_bookings: Iterable[ExistingBookingWindow],
        now: datetime,
    ) -> PriceBreakdown | QuoteFailure:
        """Quote ``request`` against ``config`` as of ``now``.

        Returns a :class:`QuoteFailure` for every expected business rejection.
        """
        failure = validate_config(config)
        if failure is not None:
            logger.warning(
                "Refusing to quote listing %s: %s", request.listing_id, failure.message
            )
            return failure

        failure = check_availability(config, request, existing_bookings)
        if failure is not None:
            return failure

        duration = request.duration
        tier_percent, tier = resolve_duration_discount(config.duration_discounts, duration)
        grant = resolve_promotions(config.bonus_hours_offer, config.sale, duration, now)

        tier_label = ""
        if tier is not None:
            tier_label = f"{tier.min_hours}+ hours: {tier.discount_percent}% off"

        return assemble_breakdown(
            hourly_rate=config.rate_for(request.booking_date),
            duration=duration,
            guests=request.guests,
            included_guests=config.included_guests,
            extra_guest_rate=config.extra_guest_rate,
            tier_percent=tier_percent,
            sale_percent=grant.sale_percent,
            bonus_hours=grant.bonus_hours,
            policy=self.policy,
            tier_label=tier_label,
            sale_label=grant.sale_reason,
            bonus_label=grant.bonus_label,
        )
