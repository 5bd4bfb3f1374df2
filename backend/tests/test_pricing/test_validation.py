"""Tests for pricing configuration integrity checks."""

from datetime import date, datetime, timezone
from decimal import Decimal
from types import MappingProxyType

import pytest

from app.pricing import BonusHoursOffer, DurationTier, FailureKind, SaleDiscount, validate_config


def test_default_config_is_valid(make_config) -> None:
    assert validate_config(make_config()) is None


def test_full_day_bounds_are_valid(make_config) -> None:
    assert validate_config(make_config(min_hours=1, max_hours=24)) is None
    assert validate_config(make_config(min_hours=24, max_hours=24)) is None


@pytest.mark.parametrize(
    "overrides",
    [
        {"hourly_rate": Decimal("0")},
        {"hourly_rate": Decimal("-5")},
        {"min_hours": 5, "max_hours": 4},
        {"min_hours": -1},
        {"min_hours": 0},
        {"max_hours": 25},
        {"included_guests": -1},
        {"extra_guest_rate": Decimal("-1")},
        {"duration_discounts": (DurationTier(0, Decimal("5")),)},
        {"duration_discounts": (DurationTier(4, Decimal("0")),)},
        {"duration_discounts": (DurationTier(4, Decimal("101")),)},
        {"bonus_hours_offer": BonusHoursOffer(min_hours=0, bonus_hours=1)},
        {"bonus_hours_offer": BonusHoursOffer(min_hours=4, bonus_hours=0)},
        {"sale": SaleDiscount(Decimal("120"))},
        {
            "sale": SaleDiscount(
                Decimal("10"),
                datetime(2026, 11, 1, tzinfo=timezone.utc),
                datetime(2026, 10, 1, tzinfo=timezone.utc),
            )
        },
        {"special_rates": MappingProxyType({date(2026, 12, 24): Decimal("0")})},
    ],
)
def test_broken_config_is_refused(make_config, overrides) -> None:
    failure = validate_config(make_config(**overrides))
    assert failure is not None
    assert failure.kind == FailureKind.INVALID_CONFIGURATION


class TestTierOrdering:
    """Longer tiers must never give a smaller discount."""

    def test_increasing_percentages(self, make_config) -> None:
        tiers = (DurationTier(4, Decimal("8")), DurationTier(8, Decimal("15")))
        assert validate_config(make_config(duration_discounts=tiers)) is None

    def test_decreasing_percentages(self, make_config) -> None:
        tiers = (DurationTier(4, Decimal("15")), DurationTier(8, Decimal("8")))
        failure = validate_config(make_config(duration_discounts=tiers))
        assert failure.kind == FailureKind.INVALID_CONFIGURATION

    def test_equal_percentages_on_different_tiers(self, make_config) -> None:
        tiers = (DurationTier(4, Decimal("10")), DurationTier(8, Decimal("10")))
        assert validate_config(make_config(duration_discounts=tiers)) is not None

    def test_duplicate_threshold_judged_by_its_best_percent(self, make_config) -> None:
        tiers = (
            DurationTier(4, Decimal("5")),
            DurationTier(4, Decimal("10")),
            DurationTier(8, Decimal("12")),
        )
        assert validate_config(make_config(duration_discounts=tiers)) is None
