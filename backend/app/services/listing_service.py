"""Listing service — lookups and mapping listing rows to a pricing config."""

import logging
import uuid
from collections.abc import Iterable
from datetime import date, datetime, time, timezone
from decimal import Decimal, InvalidOperation
from types import MappingProxyType

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.availability import BlockedDate, SpecialPricing
from app.models.listing import Listing
from app.models.user import User
from app.pricing import (
    BonusHoursOffer,
    DayHours,
    DurationTier,
    ListingPricingConfig,
    SaleDiscount,
)

logger = logging.getLogger(__name__)


class ListingConfigError(Exception):
    """Stored pricing JSON on a listing could not be decoded."""

    def __init__(self, listing_id: uuid.UUID, message: str) -> None:
        super().__init__(f"Listing {listing_id}: {message}")
        self.listing_id = listing_id
        self.message = message


def _as_utc(value: datetime | None) -> datetime | None:
    """SQLite hands back naive datetimes; treat them as UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def _parse_time(value: str) -> time:
    return time.fromisoformat(value)


def _decode_tiers(raw: list | None) -> tuple[DurationTier, ...]:
    return tuple(
        DurationTier(
            min_hours=int(item["min_hours"]),
            discount_percent=Decimal(str(item["discount_percent"])),
        )
        for item in raw or []
    )


def _decode_bonus(raw: dict | None) -> BonusHoursOffer | None:
    if not raw:
        return None
    return BonusHoursOffer(
        min_hours=int(raw["min_hours"]),
        bonus_hours=int(raw["bonus_hours"]),
        label=raw.get("label") or "",
    )


def _decode_hours(raw: dict | None) -> MappingProxyType:
    hours = {
        day.lower(): DayHours(
            start=_parse_time(spec["start"]),
            end=_parse_time(spec["end"]),
            closed=bool(spec.get("closed", False)),
        )
        for day, spec in (raw or {}).items()
    }
    return MappingProxyType(hours)


def build_pricing_config(
    listing: Listing,
    blocked_dates: Iterable[BlockedDate] = (),
    special_rates: Iterable[SpecialPricing] = (),
) -> ListingPricingConfig:
    """Map a listing row and its per-date overrides to the engine's config.

    Raises:
        ListingConfigError: If a stored column cannot be read as pricing config.
    """
    try:
        tiers = _decode_tiers(listing.duration_discounts)
        bonus = _decode_bonus(listing.bonus_hours_offer)
        hours = _decode_hours(listing.operating_hours)
        hourly_rate = Decimal(listing.hourly_rate)
        min_hours, max_hours = int(listing.min_hours), int(listing.max_hours)
        included_guests = int(listing.included_guests)
        extra_guest_rate = (
            Decimal(listing.extra_guest_charge) if listing.extra_guest_charge is not None else None
        )
        overrides = {row.day: Decimal(row.hourly_rate) for row in special_rates}

        sale = None
        if listing.discount_percent:
            sale = SaleDiscount(
                percent=Decimal(listing.discount_percent),
                starts_at=_as_utc(listing.discount_from),
                ends_at=_as_utc(listing.discount_until),
                reason=listing.discount_reason,
            )
    except (KeyError, TypeError, ValueError, AttributeError, InvalidOperation) as exc:
        logger.error("Undecodable pricing config on listing %s: %r", listing.id, exc)
        raise ListingConfigError(listing.id, f"pricing configuration is unreadable ({exc!r})") from exc

    return ListingPricingConfig(
        hourly_rate=hourly_rate,
        min_hours=min_hours,
        max_hours=max_hours,
        included_guests=included_guests,
        extra_guest_rate=extra_guest_rate,
        duration_discounts=tiers,
        bonus_hours_offer=bonus,
        sale=sale,
        operating_hours=hours,
        blocked_dates=frozenset(block.day for block in blocked_dates),
        special_rates=MappingProxyType(overrides),
    )


async def load_pricing_config(db: AsyncSession, listing: Listing, day: date | None = None) -> ListingPricingConfig:
    """Build the pricing config, loading overrides for ``day`` (or all dates)."""
    blocked_query = select(BlockedDate).where(BlockedDate.listing_id == listing.id)
    special_query = select(SpecialPricing).where(SpecialPricing.listing_id == listing.id)
    if day is not None:
        blocked_query = blocked_query.where(BlockedDate.day == day)
        special_query = special_query.where(SpecialPricing.day == day)

    blocked = (await db.execute(blocked_query)).scalars().all()
    special = (await db.execute(special_query)).scalars().all()
    return build_pricing_config(listing, blocked, special)


async def get_host_listing(
    db: AsyncSession, listing_id: uuid.UUID, host: User, *, for_update: bool = False
) -> Listing | None:
    """Return the listing if ``host`` owns it, else ``None``."""
    query = select(Listing).where(Listing.id == listing_id, Listing.host_id == host.id)
    if for_update:
        query = query.with_for_update()
    result = await db.execute(query)
    return result.scalar_one_or_none()


async def get_active_listing(
    db: AsyncSession, listing_id: uuid.UUID, *, for_update: bool = False
) -> Listing | None:
    """Return the listing if it is open for booking, else ``None``."""
    query = select(Listing).where(Listing.id == listing_id, Listing.status == "active")
    if for_update:
        query = query.with_for_update()
    result = await db.execute(query)
    return result.scalar_one_or_none()
