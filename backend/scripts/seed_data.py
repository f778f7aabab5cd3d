"""Create the schema and seed the database with sample StayBook data.

Creates an administrator, two guests, a handful of properties whose
availability windows start today, and a few bookings made through the
booking service so that prices and the no-overlap rule apply as they would
for API traffic.

Run from ``backend/``:
    python -m scripts.seed_data
"""

import asyncio
import sys
from datetime import date, timedelta
from decimal import Decimal
from pathlib import Path

# Add backend to path so imports work when run as a script
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import delete, select

from staybook.auth.passwords import hash_password
from staybook.database import Base, async_session_factory, engine
from staybook.models.booking import Booking
from staybook.models.property import Property
from staybook.models.user import ROLE_ADMIN, ROLE_USER, User
from staybook.services import booking_service

# ---------------------------------------------------------------------------
# Seed data definitions
# ---------------------------------------------------------------------------

ADMIN_USER = {
    "email": "admin@staybook.dev",
    "password": "admin1234",
    "first_name": "Ada",
    "last_name": "Admin",
}

GUESTS = [
    {"email": "jane@staybook.dev", "password": "guest1234", "first_name": "Jane", "last_name": "Guest"},
    {"email": "omar@staybook.dev", "password": "guest1234", "first_name": "Omar", "last_name": "Traveller"},
]

# (title, description, price per night, window length in days)
PROPERTIES = [
    (
        "Canggu Pool Villa",
        "Two-bedroom villa with a private pool, ten minutes from the beach.",
        Decimal("129.00"),
        180,
    ),
    (
        "Ubud Rice Field Cottage",
        "Quiet one-bedroom cottage overlooking terraced rice fields.",
        Decimal("86.00"),
        120,
    ),
    (
        "Harbour Loft",
        "Open-plan loft above the old harbour, sleeps four.",
        Decimal("210.00"),
        365,
    ),
    (
        "Weekend Cabin",
        "Small timber cabin, only open for a short season.",
        Decimal("64.50"),
        14,
    ),
]

# (guest index, property title, start offset, nights)
BOOKINGS = [
    (0, "Canggu Pool Villa", 7, 5),
    (1, "Canggu Pool Villa", 20, 3),
    (0, "Ubud Rice Field Cottage", 3, 7),
    (1, "Harbour Loft", 30, 10),
    (0, "Weekend Cabin", 0, 6),
    (1, "Weekend Cabin", 7, 6),
]


def _user(data: dict, role: str) -> User:
    return User(
        email=data["email"],
        hashed_password=hash_password(data["password"]),
        first_name=data["first_name"],
        last_name=data["last_name"],
        is_active=True,
        role=role,
    )


# ---------------------------------------------------------------------------
# Main seed function
# ---------------------------------------------------------------------------


async def seed() -> None:
    """Populate the database with sample data.

    Idempotent: seeded users and properties are deleted and re-created.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    seeded_emails = [ADMIN_USER["email"], *(g["email"] for g in GUESTS)]
    seeded_titles = [title for title, *_ in PROPERTIES]

    async with async_session_factory() as session:
        result = await session.execute(select(User.id).where(User.email.in_(seeded_emails)))
        user_ids = list(result.scalars().all())
        result = await session.execute(select(Property.id).where(Property.title.in_(seeded_titles)))
        property_ids = list(result.scalars().all())
        if user_ids or property_ids:
            print("⚠️  Seed data already exists. Deleting and re-seeding...")
            await session.execute(
                delete(Booking).where(Booking.user_id.in_(user_ids) | Booking.property_id.in_(property_ids))
            )
            await session.execute(delete(Property).where(Property.id.in_(property_ids)))
            await session.execute(delete(User).where(User.id.in_(user_ids)))
            await session.commit()

        # ------------------------------------------------------------------
        # 1. Users
        # ------------------------------------------------------------------
        admin = _user(ADMIN_USER, ROLE_ADMIN)
        guests = [_user(g, ROLE_USER) for g in GUESTS]
        session.add_all([admin, *guests])
        await session.flush()
        print(f"✅ Created admin {admin.email} and {len(guests)} guests")

        # ------------------------------------------------------------------
        # 2. Properties
        # ------------------------------------------------------------------
        today = date.today()
        properties: dict[str, Property] = {}
        for title, description, price, window_days in PROPERTIES:
            prop = Property(
                title=title,
                description=description,
                price_per_night=price,
                available_from=today,
                available_to=today + timedelta(days=window_days),
            )
            session.add(prop)
            properties[title] = prop
            print(f"   🏠 {title} (${price}/night, {prop.available_from} to {prop.available_to})")
        await session.commit()

        # ------------------------------------------------------------------
        # 3. Bookings, through the service so pricing and overlap rules apply
        # ------------------------------------------------------------------
        for guest_index, title, offset, nights in BOOKINGS:
            start = today + timedelta(days=offset)
            created = await booking_service.create_booking(
                session, guests[guest_index], properties[title].id, start, start + timedelta(days=nights)
            )
            print(f"   📅 {title}: {created.booking.start_date} to {created.booking.end_date} (${created.total_price})")

    await engine.dispose()

    print()
    print("=" * 60)
    print("📊 Seed Summary")
    print("=" * 60)
    print(f"   Admin:      {ADMIN_USER['email']} / {ADMIN_USER['password']}")
    print(f"   Guests:     {len(GUESTS)} (password guest1234)")
    print(f"   Properties: {len(PROPERTIES)}")
    print(f"   Bookings:   {len(BOOKINGS)}")
    print("=" * 60)
    print("🎉 Done! You can now log in at /api/v1/auth/login")


if __name__ == "__main__":
    asyncio.run(seed())
