"""Tests for duration tiers, bonus hours and sale resolution."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from app.pricing import (
    BonusHoursOffer,
    DurationTier,
    SaleDiscount,
    resolve_duration_discount,
    resolve_promotions,
)

NOW = datetime(2026, 10, 17, 12, 0, tzinfo=timezone.utc)

TIERS = (
    DurationTier(4, Decimal("8")),
    DurationTier(8, Decimal("15")),
    DurationTier(12, Decimal("20")),
)


class TestDurationTiers:
    """The highest qualifying tier applies; tiers never stack."""

    def test_below_every_tier(self) -> None:
        assert resolve_duration_discount(TIERS, Decimal("3.5")) == (Decimal(0), None)

    def test_exact_threshold_qualifies(self) -> None:
        percent, tier = resolve_duration_discount(TIERS, Decimal(4))
        assert percent == Decimal("8")
        assert tier.min_hours == 4

    def test_between_tiers_uses_lower(self) -> None:
        percent, _ = resolve_duration_discount(TIERS, Decimal("7.75"))
        assert percent == Decimal("8")

    def test_longest_tier(self) -> None:
        percent, tier = resolve_duration_discount(TIERS, Decimal(12))
        assert percent == Decimal("20")
        assert tier.min_hours == 12

    def test_unsorted_input(self) -> None:
        percent, _ = resolve_duration_discount(tuple(reversed(TIERS)), Decimal(9))
        assert percent == Decimal("15")

    def test_duplicate_thresholds_take_the_larger_percent(self) -> None:
        tiers = (DurationTier(4, Decimal("5")), DurationTier(4, Decimal("10")))
        percent, _ = resolve_duration_discount(tiers, Decimal(6))
        assert percent == Decimal("10")

    def test_no_tiers(self) -> None:
        assert resolve_duration_discount((), Decimal(10)) == (Decimal(0), None)
        assert resolve_duration_discount(None, Decimal(10)) == (Decimal(0), None)

    # 0h to 14h in quarter hours, spanning every threshold
    @pytest.mark.parametrize("quarter", range(14 * 4))
    def test_percent_never_drops_as_duration_grows(self, quarter: int) -> None:
        shorter, longer = Decimal(quarter) / 4, Decimal(quarter + 1) / 4
        percent, _ = resolve_duration_discount(TIERS, shorter)
        next_percent, _ = resolve_duration_discount(TIERS, longer)
        assert next_percent >= percent
        expected = max((tier.discount_percent for tier in TIERS if tier.min_hours <= longer), default=Decimal(0))
        assert next_percent == expected


class TestBonusHours:
    """Bonus hours are granted once the duration reaches the offer's minimum."""

    OFFER = BonusHoursOffer(min_hours=6, bonus_hours=1, label="Book 6, get 1 free")

    def test_granted_at_threshold(self) -> None:
        grant = resolve_promotions(self.OFFER, None, Decimal(6), NOW)
        assert grant.bonus_hours == 1
        assert grant.bonus_label == "Book 6, get 1 free"

    def test_not_granted_below_threshold(self) -> None:
        grant = resolve_promotions(self.OFFER, None, Decimal("5.5"), NOW)
        assert grant.bonus_hours == 0


class TestSale:
    """A sale applies only while ``now`` is inside its window."""

    def test_active_inside_window(self) -> None:
        sale = SaleDiscount(Decimal("10"), NOW - timedelta(days=1), NOW + timedelta(days=1), "Autumn")
        grant = resolve_promotions(None, sale, Decimal(2), NOW)
        assert grant.sale_percent == Decimal("10")
        assert grant.sale_reason == "Autumn"

    def test_bounds_are_inclusive(self) -> None:
        assert SaleDiscount(Decimal("10"), NOW, NOW).is_active(NOW)

    def test_expired(self) -> None:
        sale = SaleDiscount(Decimal("1"), NOW - timedelta(days=10), NOW - timedelta(seconds=1))
        assert resolve_promotions(None, sale, Decimal(4), NOW).sale_percent == Decimal(0)

    def test_not_started(self) -> None:
        sale = SaleDiscount(Decimal("10"), NOW + timedelta(minutes=1), None)
        assert not sale.is_active(NOW)

    def test_open_ended(self) -> None:
        assert SaleDiscount(Decimal("10")).is_active(NOW)
        assert SaleDiscount(Decimal("10"), starts_at=NOW - timedelta(days=1)).is_active(NOW)

    def test_zero_percent_is_inactive(self) -> None:
        assert not SaleDiscount(Decimal(0)).is_active(NOW)

    def test_independent_of_bonus(self) -> None:
        offer = BonusHoursOffer(min_hours=6, bonus_hours=2)
        grant = resolve_promotions(offer, SaleDiscount(Decimal("5")), Decimal(8), NOW)
        assert grant.bonus_hours == 2
        assert grant.sale_percent == Decimal("5")
