"""Seed the database with sample venues, guests and priced bookings.

Every booking is priced by the same quote engine the API uses, so the stored
breakdowns match what a guest would have been shown.

Run inside Docker:
    docker compose exec backend python -m scripts.seed_data
"""

import asyncio
import sys
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from pathlib import Path

# Add backend to path so imports work when run as a script
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import delete, select

from app.auth.security import hash_password
from app.database import async_session_factory
from app.models.booking import Booking
from app.models.listing import Listing
from app.models.user import User
from app.pricing import BookingRequest, BookingStatus, ExistingBookingWindow, QuoteFailure
from app.services.booking_service import quote_engine
from app.services.listing_service import build_pricing_config

# ---------------------------------------------------------------------------
# Seed data definitions
# ---------------------------------------------------------------------------

DEMO_HOST = {
    "email": "host@venuehub.dev",
    "password": "demo1234",
    "name": "Demo Host",
}

GUESTS = [
    {"email": "emma.thompson@example.com", "name": "Emma Thompson", "phone": "+61412345678"},
    {"email": "james.wilson@example.com", "name": "James Wilson", "phone": "+447911123456"},
    {"email": "sarah.chen@example.com", "name": "Sarah Chen", "phone": None},
    {"email": "klaus.mueller@example.com", "name": "Klaus Mueller", "phone": "+491711234567"},
]

GUEST_PASSWORD = "guest1234"


def _hours(start: str, end: str, closed_days: tuple[str, ...] = ()) -> dict:
    days = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")
    return {
        day: {"start": start, "end": end, "closed": day in closed_days}
        for day in days
    }


LISTINGS = [
    {
        "title": "Sunlit Photo Studio",
        "description": "Cyclorama wall, north light and a full grip kit. Ideal for shoots.",
        "location": "Brooklyn, NY",
        "capacity": 15,
        "hourly_rate": Decimal("54.00"),
        "min_hours": 2,
        "max_hours": 10,
        "included_guests": 6,
        "extra_guest_charge": Decimal("4.00"),
        "auto_confirm": True,
        "duration_discounts": [
            {"min_hours": 4, "discount_percent": "8"},
            {"min_hours": 8, "discount_percent": "15"},
        ],
        "bonus_hours_offer": None,
        "operating_hours": _hours("08:00", "22:00"),
    },
    {
        "title": "Garden Pavilion",
        "description": "Covered pavilion in a walled garden; seats forty for dinners.",
        "location": "Austin, TX",
        "capacity": 40,
        "hourly_rate": Decimal("40.00"),
        "min_hours": 3,
        "max_hours": 12,
        "included_guests": 20,
        "extra_guest_charge": Decimal("2.50"),
        "auto_confirm": False,
        "duration_discounts": [{"min_hours": 6, "discount_percent": "10"}],
        "bonus_hours_offer": {"min_hours": 6, "bonus_hours": 1, "label": "Book 6 hours, get 1 free"},
        "operating_hours": _hours("10:00", "00:00", closed_days=("monday",)),
    },
    {
        "title": "Rooftop Event Deck",
        "description": "Skyline views, a bar counter and lounge seating for evening events.",
        "location": "Chicago, IL",
        "capacity": 60,
        "hourly_rate": Decimal("68.00"),
        "min_hours": 2,
        "max_hours": 8,
        "included_guests": 25,
        "extra_guest_charge": Decimal("3.00"),
        "auto_confirm": False,
        "duration_discounts": [
            {"min_hours": 3, "discount_percent": "5"},
            {"min_hours": 5, "discount_percent": "12"},
        ],
        "bonus_hours_offer": None,
        "operating_hours": _hours("12:00", "00:00"),
        "discount_percent": Decimal("10"),
        "discount_reason": "Autumn launch",
    },
    {
        "title": "Loft Meeting Room",
        "description": "Whiteboards, a 75-inch screen and fast wifi for workshops.",
        "location": "Brooklyn, NY",
        "capacity": 12,
        "hourly_rate": Decimal("50.00"),
        "min_hours": 1,
        "max_hours": 12,
        "included_guests": 10,
        "extra_guest_charge": None,
        "auto_confirm": True,
        "duration_discounts": None,
        "bonus_hours_offer": None,
        "operating_hours": _hours("08:00", "20:00", closed_days=("saturday", "sunday")),
    },
]


def _next(weekday: int, today: date, weeks: int = 1) -> date:
    start = today + timedelta(days=7 * weeks)
    return start + timedelta(days=(weekday - start.weekday()) % 7)


def _build_bookings(listings: dict[str, Listing], guests: list[User], today: date) -> list[dict]:
    """Upcoming bookings spread across listings; no overlaps on one date."""
    return [
        {"listing": listings["Sunlit Photo Studio"], "guest": guests[0],
         "day": _next(1, today), "start": time(9), "end": time(17), "guests": 8, "status": "confirmed"},
        {"listing": listings["Sunlit Photo Studio"], "guest": guests[1],
         "day": _next(1, today), "start": time(17), "end": time(20), "guests": 4, "status": "confirmed"},
        {"listing": listings["Garden Pavilion"], "guest": guests[2],
         "day": _next(5, today), "start": time(16), "end": time(22), "guests": 30, "status": "confirmed"},
        {"listing": listings["Garden Pavilion"], "guest": guests[3],
         "day": _next(6, today, weeks=2), "start": time(12), "end": time(15), "guests": 12, "status": "cancelled"},
        {"listing": listings["Rooftop Event Deck"], "guest": guests[1],
         "day": _next(4, today), "start": time(19), "end": time(0), "guests": 45, "status": "confirmed"},
        {"listing": listings["Loft Meeting Room"], "guest": guests[3],
         "day": _next(2, today), "start": time(9), "end": time(13), "guests": 10, "status": "confirmed"},
    ]


# ---------------------------------------------------------------------------
# Main seed function
# ---------------------------------------------------------------------------


async def seed() -> None:
    """Populate the database with sample venues and bookings.

    Idempotent: deletes the demo host and seeded guests (and, through the
    foreign keys, their listings and bookings) before re-seeding.
    """
    async with async_session_factory() as session:
        emails = [DEMO_HOST["email"], *(guest["email"] for guest in GUESTS)]
        result = await session.execute(select(User.id).where(User.email.in_(emails)))
        existing_ids = list(result.scalars().all())
        if existing_ids:
            print("⚠️  Seed users already exist. Deleting and re-seeding...")
            await session.execute(delete(Booking).where(Booking.guest_id.in_(existing_ids)))
            await session.execute(delete(Listing).where(Listing.host_id.in_(existing_ids)))
            await session.execute(delete(User).where(User.id.in_(existing_ids)))
            await session.flush()

        # ------------------------------------------------------------------
        # 1. Users
        # ------------------------------------------------------------------
        host = User(
            email=DEMO_HOST["email"],
            hashed_password=hash_password(DEMO_HOST["password"]),
            name=DEMO_HOST["name"],
            is_active=True,
            role="host",
        )
        session.add(host)

        guests: list[User] = []
        for guest_data in GUESTS:
            guest = User(hashed_password=hash_password(GUEST_PASSWORD), role="guest", **guest_data)
            session.add(guest)
            guests.append(guest)
        await session.flush()

        print(f"✅ Created host {host.email} and {len(guests)} guests")

        # ------------------------------------------------------------------
        # 2. Listings
        # ------------------------------------------------------------------
        listings: dict[str, Listing] = {}
        for listing_data in LISTINGS:
            listing = Listing(host_id=host.id, **listing_data)
            session.add(listing)
            await session.flush()
            listings[listing.title] = listing
            print(f"   🏢 {listing.title} — {listing.location} (${listing.hourly_rate}/hour)")

        # ------------------------------------------------------------------
        # 3. Bookings, priced by the quote engine
        # ------------------------------------------------------------------
        now = datetime.now(timezone.utc)
        held: dict[tuple, list[ExistingBookingWindow]] = {}
        booking_count = 0

        for bdata in _build_bookings(listings, guests, date.today()):
            listing: Listing = bdata["listing"]
            request = BookingRequest(listing.id, bdata["day"], bdata["start"], bdata["end"], bdata["guests"])
            existing = held.setdefault((listing.id, bdata["day"]), [])

            breakdown = quote_engine.quote(build_pricing_config(listing), request, existing, now)
            if isinstance(breakdown, QuoteFailure):
                print(f"   ⏭️  Skipped {listing.title} on {bdata['day']}: {breakdown.message}")
                continue

            booking = Booking(
                listing_id=listing.id,
                guest_id=bdata["guest"].id,
                booking_date=request.booking_date,
                start_time=request.start_time,
                end_time=request.end_time,
                guests=request.guests,
                status=bdata["status"],
                duration=breakdown.duration,
                bonus_hours=breakdown.bonus_hours,
                hourly_rate=breakdown.hourly_rate,
                base_price=breakdown.base_price,
                extra_guest_price=breakdown.extra_guest_price,
                discount_amount=breakdown.discount_amount,
                service_fee=breakdown.service_fee,
                tax=breakdown.tax,
                total_price=breakdown.total_price,
                applied_discounts=breakdown.to_dict()["applied_discounts"],
                created_at=now,
            )
            session.add(booking)
            if bdata["status"] == "confirmed":
                existing.append(
                    ExistingBookingWindow(
                        request.booking_date, request.start_time, request.end_time, BookingStatus.CONFIRMED
                    )
                )
            booking_count += 1

        await session.commit()

        print(f"✅ Created {booking_count} bookings")
        print()
        print("=" * 60)
        print("📊 Seed Summary")
        print("=" * 60)
        print(f"   Host:      {DEMO_HOST['email']} / {DEMO_HOST['password']}")
        print(f"   Guests:    {len(guests)} (password {GUEST_PASSWORD})")
        print(f"   Listings:  {len(listings)}")
        print(f"   Bookings:  {booking_count}")
        print("=" * 60)
        print("🎉 Done! You can now log in at /api/v1/auth/login")


if __name__ == "__main__":
    asyncio.run(seed())
