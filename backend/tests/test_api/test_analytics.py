"""Tests for the host earnings endpoint."""

from datetime import timedelta
from decimal import Decimal

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


async def _book(client: AsyncClient, headers: dict, listing: dict, day, start: str, end: str) -> dict:
    response = await client.post(
        "/api/v1/bookings",
        json={
            "listing_id": listing["id"],
            "booking_date": day.isoformat(),
            "start_time": start,
            "end_time": end,
        },
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


class TestEarnings:
    """GET /api/v1/analytics/earnings"""

    async def test_counts_confirmed_bookings_only(
        self,
        client: AsyncClient,
        host_headers: dict,
        guest_headers: dict,
        other_guest_headers: dict,
        test_listing: dict,
        next_monday,
    ) -> None:
        await client.put(
            f"/api/v1/listings/{test_listing['id']}/duration-discounts",
            json={"tiers": [{"min_hours": 4, "discount_percent": 10}]},
            headers=host_headers,
        )
        confirmed = await _book(client, guest_headers, test_listing, next_monday, "08:00", "12:00")
        await client.post(f"/api/v1/bookings/{confirmed['id']}/confirm", headers=host_headers)
        await _book(client, other_guest_headers, test_listing, next_monday, "14:00", "16:00")

        response = await client.get(
            "/api/v1/analytics/earnings",
            params={
                "period_start": next_monday.isoformat(),
                "period_end": (next_monday + timedelta(days=6)).isoformat(),
            },
            headers=host_headers,
        )
        assert response.status_code == 200
        data = response.json()
        assert data["total_bookings"] == 1
        item = data["listings"][0]
        assert item["listing_id"] == test_listing["id"]
        assert Decimal(item["hours_booked"]) == Decimal(4)
        assert Decimal(item["revenue"]) == Decimal(confirmed["total_price"])
        assert Decimal(item["discounts_granted"]) == Decimal("20.00")
        assert Decimal(data["total_revenue"]) == Decimal(confirmed["total_price"])

    async def test_period_outside_bookings(
        self, client: AsyncClient, host_headers: dict, test_listing: dict, next_monday
    ) -> None:
        response = await client.get(
            "/api/v1/analytics/earnings",
            params={
                "period_start": (next_monday - timedelta(days=30)).isoformat(),
                "period_end": (next_monday - timedelta(days=20)).isoformat(),
            },
            headers=host_headers,
        )
        data = response.json()
        assert data["total_bookings"] == 0
        assert Decimal(data["total_revenue"]) == Decimal("0")

    async def test_reversed_period(self, client: AsyncClient, host_headers: dict, next_monday) -> None:
        response = await client.get(
            "/api/v1/analytics/earnings",
            params={
                "period_start": next_monday.isoformat(),
                "period_end": (next_monday - timedelta(days=1)).isoformat(),
            },
            headers=host_headers,
        )
        assert response.status_code == 400

    async def test_unknown_listing_filter(self, client: AsyncClient, host_headers: dict, next_monday) -> None:
        response = await client.get(
            "/api/v1/analytics/earnings",
            params={
                "period_start": next_monday.isoformat(),
                "period_end": next_monday.isoformat(),
                "listing_id": "00000000-0000-0000-0000-000000000000",
            },
            headers=host_headers,
        )
        assert response.status_code == 404

    async def test_guest_forbidden(self, client: AsyncClient, guest_headers: dict, next_monday) -> None:
        response = await client.get(
            "/api/v1/analytics/earnings",
            params={"period_start": next_monday.isoformat(), "period_end": next_monday.isoformat()},
            headers=guest_headers,
        )
        assert response.status_code == 403
