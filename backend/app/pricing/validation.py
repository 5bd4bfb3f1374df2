"""Integrity checks on a listing's pricing configuration.

A config that fails here is a data fault on the listing, not something the
guest can fix by choosing another slot. The engine refuses to quote it.
"""

from decimal import Decimal

from app.pricing.types import FailureKind, ListingPricingConfig, QuoteFailure

_HUNDRED = Decimal(100)


def _invalid(message: str) -> QuoteFailure:
    return QuoteFailure(FailureKind.INVALID_CONFIGURATION, message)


def _check_tiers(config: ListingPricingConfig) -> QuoteFailure | None:
    best_by_hours: dict[int, Decimal] = {}
    for tier in config.duration_discounts:
        if tier.min_hours < 1:
            return _invalid("Duration discount tiers need min_hours >= 1")
        if not Decimal(0) < tier.discount_percent <= _HUNDRED:
            return _invalid("Duration discount percent must be between 0 and 100")
        current = best_by_hours.get(tier.min_hours)
        if current is None or tier.discount_percent > current:
            best_by_hours[tier.min_hours] = tier.discount_percent

    previous: Decimal | None = None
    for hours in sorted(best_by_hours):
        percent = best_by_hours[hours]
        if previous is not None and percent <= previous:
            return _invalid(
                "Duration discount percentages must increase with longer tiers"
            )
        previous = percent
    return None


def validate_config(config: ListingPricingConfig) -> QuoteFailure | None:
    """Return a failure describing the first broken invariant, else ``None``."""
    if config.hourly_rate <= 0:
        return _invalid("Hourly rate must be greater than zero")
    if config.min_hours < 1:
        return _invalid("Minimum hours must be at least 1")
    if config.max_hours > 24:
        return _invalid("Maximum hours cannot exceed 24")
    if config.min_hours > config.max_hours:
        return _invalid("Minimum hours cannot be greater than maximum hours")
    if config.included_guests < 0:
        return _invalid("Included guests cannot be negative")
    if config.extra_guest_rate is not None and config.extra_guest_rate < 0:
        return _invalid("Extra guest charge cannot be negative")

    tier_failure = _check_tiers(config)
    if tier_failure is not None:
        return tier_failure

    offer = config.bonus_hours_offer
    if offer is not None and (offer.min_hours < 1 or offer.bonus_hours < 1):
        return _invalid("Bonus hours offer needs min_hours and bonus_hours >= 1")

    sale = config.sale
    if sale is not None:
        if not Decimal(0) <= sale.percent <= _HUNDRED:
            return _invalid("Sale discount percent must be between 0 and 100")
        if (
            sale.starts_at is not None
            and sale.ends_at is not None
            and sale.starts_at > sale.ends_at
        ):
            return _invalid("Sale discount ends before it starts")

    for day, rate in config.special_rates.items():
        if rate <= 0:
            return _invalid(f"Special hourly rate for {day.isoformat()} must be positive")
    return None
