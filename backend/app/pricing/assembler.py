"""Fee, tax and total assembly for a price quote.

Money is rounded half-up to cents once per field, from unrounded
intermediates. ``discount_amount`` and ``total_price`` are then derived from
the rounded fields so that::

    subtotal - discount_amount == discounted_subtotal
    total_price - tax - service_fee == discounted_subtotal

hold exactly.
"""

from decimal import ROUND_HALF_UP, Decimal

from app.pricing.types import (
    AppliedDiscount,
    DiscountStacking,
    PriceBreakdown,
    PricingPolicy,
    TaxBase,
)

MONEY_PLACES = Decimal("0.01")

_ZERO = Decimal(0)
_ONE = Decimal(1)
_HUNDRED = Decimal(100)


def to_money(value: Decimal | int | str) -> Decimal:
    return Decimal(value).quantize(MONEY_PLACES, rounding=ROUND_HALF_UP)


def assemble_breakdown(
    *,
    hourly_rate: Decimal,
    duration: Decimal,
    guests: int,
    included_guests: int,
    extra_guest_rate: Decimal | None,
    tier_percent: Decimal,
    sale_percent: Decimal,
    bonus_hours: int,
    policy: PricingPolicy,
    tier_label: str = "",
    sale_label: str = "",
    bonus_label: str = "",
) -> PriceBreakdown:
    """Build a :class:`PriceBreakdown`. Pure: equal inputs give equal output."""
    billable_duration = max(_ZERO, duration - bonus_hours)
    base_price = to_money(hourly_rate * billable_duration)
    extra_guests = max(0, guests - included_guests)
    extra_guest_price = to_money(extra_guests * (extra_guest_rate or _ZERO))
    subtotal = base_price + extra_guest_price

    tier_rate = tier_percent / _HUNDRED
    sale_rate = sale_percent / _HUNDRED
    if policy.stacking is DiscountStacking.ADDITIVE:
        after_sale = subtotal * (_ONE - min(_ONE, tier_rate + sale_rate))
    else:
        after_sale = subtotal * (_ONE - tier_rate) * (_ONE - sale_rate)

    discounted_subtotal = to_money(after_sale)
    discount_amount = subtotal - discounted_subtotal

    fee = after_sale * policy.service_fee_rate
    if policy.tax_base is TaxBase.SUBTOTAL:
        tax = after_sale * policy.tax_rate
    else:
        tax = (after_sale + fee) * policy.tax_rate
    service_fee = to_money(fee)
    tax = to_money(tax)
    total_price = discounted_subtotal + service_fee + tax

    applied: list[AppliedDiscount] = []
    tier_amount = _ZERO
    if tier_rate > 0:
        tier_amount = min(discount_amount, to_money(subtotal * tier_rate))
        applied.append(AppliedDiscount("duration_tier", tier_amount, tier_label))
    if sale_rate > 0:
        applied.append(AppliedDiscount("sale", discount_amount - tier_amount, sale_label))
    if bonus_hours > 0:
        free_hours = min(Decimal(bonus_hours), max(_ZERO, duration))
        applied.append(
            AppliedDiscount("bonus_hours", to_money(hourly_rate * free_hours), bonus_label)
        )

    return PriceBreakdown(
        hourly_rate=hourly_rate,
        duration=duration,
        bonus_hours=bonus_hours,
        billable_duration=billable_duration,
        base_price=base_price,
        extra_guest_price=extra_guest_price,
        subtotal=subtotal,
        discount_amount=discount_amount,
        discounted_subtotal=discounted_subtotal,
        service_fee=service_fee,
        tax=tax,
        total_price=total_price,
        applied_discounts=tuple(applied),
    )
