"""Tests for booking endpoints."""

from decimal import Decimal

import pytest
from httpx import AsyncClient

from app.config import settings

pytestmark = pytest.mark.asyncio


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _booking_body(listing: dict, day, start: str = "14:00", end: str = "18:00", guests: int = 1) -> dict:
    return {
        "listing_id": listing["id"],
        "booking_date": day.isoformat(),
        "start_time": start,
        "end_time": end,
        "guests": guests,
    }


async def _book(client: AsyncClient, headers: dict, body: dict) -> dict:
    response = await client.post("/api/v1/bookings", json=body, headers=headers)
    assert response.status_code == 201, f"Failed to create booking: {response.text}"
    return response.json()


# ---------------------------------------------------------------------------
# POST /api/v1/bookings
# ---------------------------------------------------------------------------


class TestCreateBooking:
    """Tests for creating bookings."""

    async def test_create_success(
        self, client: AsyncClient, guest_headers: dict, guest_user, test_listing: dict, next_monday
    ) -> None:
        data = await _book(client, guest_headers, _booking_body(test_listing, next_monday))

        assert data["status"] == "pending"
        assert data["guest_id"] == str(guest_user.id)
        assert data["start_time"] == "14:00:00"
        assert Decimal(data["duration"]) == Decimal(4)
        assert Decimal(data["base_price"]) == Decimal("200.00")
        assert Decimal(data["total_price"]) == Decimal("231.00")

    async def test_price_matches_quote(
        self, client: AsyncClient, guest_headers: dict, test_listing: dict, next_monday
    ) -> None:
        body = _booking_body(test_listing, next_monday, "09:00", "17:30", guests=12)
        quote = await client.post(f"/api/v1/public/listings/{test_listing['id']}/quote", json=body)
        booking = await _book(client, guest_headers, body)

        breakdown = quote.json()["breakdown"]
        for field in ("base_price", "extra_guest_price", "discount_amount", "service_fee", "tax", "total_price"):
            assert Decimal(booking[field]) == Decimal(breakdown[field]), field

    async def test_auto_confirm_listing(
        self, client: AsyncClient, host_headers: dict, guest_headers: dict, test_listing: dict, next_monday
    ) -> None:
        await client.put(
            f"/api/v1/listings/{test_listing['id']}", json={"auto_confirm": True}, headers=host_headers
        )
        data = await _book(client, guest_headers, _booking_body(test_listing, next_monday))
        assert data["status"] == "confirmed"

    async def test_host_cannot_book_own_listing(
        self, client: AsyncClient, host_headers: dict, test_listing: dict, next_monday
    ) -> None:
        response = await client.post(
            "/api/v1/bookings", json=_booking_body(test_listing, next_monday), headers=host_headers
        )
        assert response.status_code == 403
        assert response.json()["detail"]["code"] == "own_listing"

    async def test_unknown_listing(self, client: AsyncClient, guest_headers: dict, next_monday) -> None:
        body = _booking_body({"id": "00000000-0000-0000-0000-000000000000"}, next_monday)
        response = await client.post("/api/v1/bookings", json=body, headers=guest_headers)
        assert response.status_code == 404

    async def test_end_before_start(
        self, client: AsyncClient, guest_headers: dict, test_listing: dict, next_monday
    ) -> None:
        response = await client.post(
            "/api/v1/bookings",
            json=_booking_body(test_listing, next_monday, "18:00", "14:00"),
            headers=guest_headers,
        )
        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "invalid_window"

    async def test_overlapping_confirmed_booking(
        self,
        client: AsyncClient,
        host_headers: dict,
        guest_headers: dict,
        other_guest_headers: dict,
        test_listing: dict,
        next_monday,
    ) -> None:
        first = await _book(client, guest_headers, _booking_body(test_listing, next_monday, "14:00", "18:00"))
        await client.post(f"/api/v1/bookings/{first['id']}/confirm", headers=host_headers)

        response = await client.post(
            "/api/v1/bookings",
            json=_booking_body(test_listing, next_monday, "16:00", "19:00"),
            headers=other_guest_headers,
        )
        assert response.status_code == 409
        assert response.json()["detail"]["code"] == "conflicts_with_existing_booking"

    async def test_pending_booking_holds_slot(
        self, client: AsyncClient, guest_headers: dict, other_guest_headers: dict, test_listing: dict, next_monday
    ) -> None:
        await _book(client, guest_headers, _booking_body(test_listing, next_monday, "14:00", "18:00"))
        response = await client.post(
            "/api/v1/bookings",
            json=_booking_body(test_listing, next_monday, "17:00", "19:00"),
            headers=other_guest_headers,
        )
        assert response.status_code == 409

    async def test_back_to_back_allowed(
        self, client: AsyncClient, guest_headers: dict, other_guest_headers: dict, test_listing: dict, next_monday
    ) -> None:
        await _book(client, guest_headers, _booking_body(test_listing, next_monday, "10:00", "14:00"))
        await _book(client, other_guest_headers, _booking_body(test_listing, next_monday, "14:00", "18:00"))

    async def test_cancelled_booking_frees_slot(
        self, client: AsyncClient, guest_headers: dict, other_guest_headers: dict, test_listing: dict, next_monday
    ) -> None:
        first = await _book(client, guest_headers, _booking_body(test_listing, next_monday))
        await client.post(f"/api/v1/bookings/{first['id']}/cancel", headers=guest_headers)
        await _book(client, other_guest_headers, _booking_body(test_listing, next_monday))

    async def test_pending_limit(
        self, client: AsyncClient, guest_headers: dict, test_listing: dict, next_monday
    ) -> None:
        windows = [("08:00", "10:00"), ("10:00", "12:00"), ("12:00", "14:00"), ("14:00", "16:00")]
        limit = settings.max_pending_bookings_per_user
        for start, end in windows[:limit]:
            await _book(client, guest_headers, _booking_body(test_listing, next_monday, start, end))

        start, end = windows[limit]
        response = await client.post(
            "/api/v1/bookings",
            json=_booking_body(test_listing, next_monday, start, end),
            headers=guest_headers,
        )
        assert response.status_code == 429


# ---------------------------------------------------------------------------
# GET /api/v1/bookings
# ---------------------------------------------------------------------------


class TestListBookings:
    async def test_guest_sees_own(
        self, client: AsyncClient, guest_headers: dict, other_guest_headers: dict, test_listing: dict, next_monday
    ) -> None:
        mine = await _book(client, guest_headers, _booking_body(test_listing, next_monday, "10:00", "12:00"))
        await _book(client, other_guest_headers, _booking_body(test_listing, next_monday, "14:00", "16:00"))

        response = await client.get("/api/v1/bookings", headers=guest_headers)
        data = response.json()
        assert data["total"] == 1
        assert data["items"][0]["id"] == mine["id"]

    async def test_host_sees_bookings_on_listings(
        self, client: AsyncClient, host_headers: dict, guest_headers: dict, test_listing: dict, next_monday
    ) -> None:
        await _book(client, guest_headers, _booking_body(test_listing, next_monday))

        response = await client.get("/api/v1/bookings/host", headers=host_headers)
        assert response.json()["total"] == 1

        response = await client.get("/api/v1/bookings/host", params={"status": "confirmed"}, headers=host_headers)
        assert response.json()["total"] == 0

    async def test_guest_cannot_use_host_list(self, client: AsyncClient, guest_headers: dict) -> None:
        response = await client.get("/api/v1/bookings/host", headers=guest_headers)
        assert response.status_code == 403

    async def test_stranger_cannot_read_booking(
        self, client: AsyncClient, guest_headers: dict, other_guest_headers: dict, test_listing: dict, next_monday
    ) -> None:
        booking = await _book(client, guest_headers, _booking_body(test_listing, next_monday))
        response = await client.get(f"/api/v1/bookings/{booking['id']}", headers=other_guest_headers)
        assert response.status_code == 404

        response = await client.get(f"/api/v1/bookings/{booking['id']}", headers=guest_headers)
        assert response.status_code == 200


# ---------------------------------------------------------------------------
# Status transitions
# ---------------------------------------------------------------------------


class TestTransitions:
    async def test_host_confirms(
        self, client: AsyncClient, host_headers: dict, guest_headers: dict, test_listing: dict, next_monday
    ) -> None:
        booking = await _book(client, guest_headers, _booking_body(test_listing, next_monday))
        response = await client.post(f"/api/v1/bookings/{booking['id']}/confirm", headers=host_headers)
        assert response.status_code == 200
        assert response.json()["status"] == "confirmed"

        response = await client.post(f"/api/v1/bookings/{booking['id']}/confirm", headers=host_headers)
        assert response.status_code == 409

    async def test_guest_cannot_confirm(
        self, client: AsyncClient, guest_headers: dict, test_listing: dict, next_monday
    ) -> None:
        booking = await _book(client, guest_headers, _booking_body(test_listing, next_monday))
        response = await client.post(f"/api/v1/bookings/{booking['id']}/confirm", headers=guest_headers)
        assert response.status_code == 403

    async def test_host_can_cancel(
        self, client: AsyncClient, host_headers: dict, guest_headers: dict, test_listing: dict, next_monday
    ) -> None:
        booking = await _book(client, guest_headers, _booking_body(test_listing, next_monday))
        response = await client.post(f"/api/v1/bookings/{booking['id']}/cancel", headers=host_headers)
        assert response.status_code == 200
        assert response.json()["status"] == "cancelled"

    async def test_cannot_cancel_twice(
        self, client: AsyncClient, guest_headers: dict, test_listing: dict, next_monday
    ) -> None:
        booking = await _book(client, guest_headers, _booking_body(test_listing, next_monday))
        await client.post(f"/api/v1/bookings/{booking['id']}/cancel", headers=guest_headers)
        response = await client.post(f"/api/v1/bookings/{booking['id']}/cancel", headers=guest_headers)
        assert response.status_code == 409
