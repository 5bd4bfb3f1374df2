"""Discount resolution: duration tiers, bonus hours and time-boxed sales."""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from app.pricing.types import BonusHoursOffer, DurationTier, SaleDiscount


@dataclass(frozen=True)
class PromotionGrant:
    """Bonus hours and sale percent that apply to one request."""

    bonus_hours: int = 0
    sale_percent: Decimal = Decimal(0)
    bonus_label: str = ""
    sale_reason: str = ""


def resolve_duration_discount(
    tiers: Iterable[DurationTier] | None, duration: Decimal
) -> tuple[Decimal, DurationTier | None]:
    """Pick the highest tier the duration qualifies for.

    Tiers are not cumulative. Among qualifying tiers the one with the largest
    ``min_hours`` wins; equal ``min_hours`` resolves to the larger percent.
    """
    best: DurationTier | None = None
    for tier in tiers or ():
        if tier.min_hours > duration:
            continue
        if (
            best is None
            or tier.min_hours > best.min_hours
            or (tier.min_hours == best.min_hours and tier.discount_percent > best.discount_percent)
        ):
            best = tier
    if best is None:
        return Decimal(0), None
    return best.discount_percent, best


def resolve_promotions(
    offer: BonusHoursOffer | None,
    sale: SaleDiscount | None,
    duration: Decimal,
    now: datetime,
) -> PromotionGrant:
    """Resolve bonus hours and the sale percent active at ``now``.

    Both are independent of the duration tier and of each other.
    """
    bonus_hours = 0
    bonus_label = ""
    if offer is not None and duration >= offer.min_hours:
        bonus_hours = offer.bonus_hours
        bonus_label = offer.label

    sale_percent = Decimal(0)
    sale_reason = ""
    if sale is not None and sale.is_active(now):
        sale_percent = sale.percent
        sale_reason = sale.reason or ""

    return PromotionGrant(
        bonus_hours=bonus_hours,
        sale_percent=sale_percent,
        bonus_label=bonus_label,
        sale_reason=sale_reason,
    )
