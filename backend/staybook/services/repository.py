"""Async query functions over properties, bookings and users.

This is the storage contract the booking and query services rely on. All
functions take the request's ``AsyncSession``; none of them commit.
"""

import uuid
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from sqlalchemy import Select, delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from staybook.models.booking import STATUS_CONFIRMED, Booking
from staybook.models.property import Property
from staybook.models.user import User


@dataclass
class PropertyFilter:
    """Catalog filters. Date bounds select properties whose window overlaps them."""

    available_from: date | None = None
    available_to: date | None = None
    min_price: Decimal | None = None
    max_price: Decimal | None = None

    def clauses(self) -> list:
        clauses = []
        # Window overlaps [available_from, available_to]; an omitted bound is open.
        if self.available_from is not None:
            clauses.append(Property.available_to >= self.available_from)
        if self.available_to is not None:
            clauses.append(Property.available_from <= self.available_to)
        if self.min_price is not None:
            clauses.append(Property.price_per_night >= self.min_price)
        if self.max_price is not None:
            clauses.append(Property.price_per_night <= self.max_price)
        return clauses


@dataclass
class BookingFilter:
    status: str | None = None
    property_id: uuid.UUID | None = None
    user_id: uuid.UUID | None = None

    def clauses(self) -> list:
        clauses = []
        if self.status is not None:
            clauses.append(Booking.status == self.status)
        if self.property_id is not None:
            clauses.append(Booking.property_id == self.property_id)
        if self.user_id is not None:
            clauses.append(Booking.user_id == self.user_id)
        return clauses


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


async def get_user(db: AsyncSession, user_id: uuid.UUID) -> User | None:
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


# ---------------------------------------------------------------------------
# Properties
# ---------------------------------------------------------------------------


async def get_property(db: AsyncSession, property_id: uuid.UUID, *, for_update: bool = False) -> Property | None:
    """Fetch a property by id.

    With ``for_update`` the row is locked until the transaction ends, which
    serializes booking writes for the property across database connections.
    The locked read also refreshes any copy already in the session, so the
    caller sees the committed window and price.
    """
    query = select(Property).where(Property.id == property_id)
    if for_update:
        query = query.with_for_update().execution_options(populate_existing=True)
    result = await db.execute(query)
    return result.scalar_one_or_none()


async def count_properties(db: AsyncSession, filters: PropertyFilter) -> int:
    result = await db.execute(select(func.count()).select_from(Property).where(*filters.clauses()))
    return result.scalar_one()


async def list_properties(
    db: AsyncSession,
    filters: PropertyFilter,
    offset: int | None = None,
    limit: int | None = None,
) -> list[Property]:
    """Return properties matching ``filters``, newest first."""
    query = select(Property).where(*filters.clauses()).order_by(Property.created_at.desc(), Property.id)
    if offset is not None:
        query = query.offset(offset)
    if limit is not None:
        query = query.limit(limit)
    result = await db.execute(query)
    return list(result.scalars().all())


async def delete_property(db: AsyncSession, prop: Property) -> None:
    await db.execute(delete(Booking).where(Booking.property_id == prop.id))
    await db.delete(prop)
    await db.flush()


# ---------------------------------------------------------------------------
# Bookings
# ---------------------------------------------------------------------------


def _confirmed_bookings_query(
    property_ids: list[uuid.UUID],
    start: date | None = None,
    end: date | None = None,
    exclude_booking_id: uuid.UUID | None = None,
) -> Select:
    query = select(Booking).where(
        Booking.property_id.in_(property_ids),
        Booking.status == STATUS_CONFIRMED,
    )
    # Closed-interval overlap with [start, end]; an omitted bound is open.
    if start is not None:
        query = query.where(Booking.end_date >= start)
    if end is not None:
        query = query.where(Booking.start_date <= end)
    if exclude_booking_id is not None:
        query = query.where(Booking.id != exclude_booking_id)
    return query.order_by(Booking.start_date.asc(), Booking.end_date.asc())


async def find_confirmed_bookings(
    db: AsyncSession,
    property_id: uuid.UUID,
    start: date | None = None,
    end: date | None = None,
    exclude_booking_id: uuid.UUID | None = None,
) -> list[Booking]:
    """Confirmed bookings of a property, ordered by start date.

    When ``start``/``end`` are given only bookings overlapping that closed
    range are returned.
    """
    result = await db.execute(_confirmed_bookings_query([property_id], start, end, exclude_booking_id))
    return list(result.scalars().all())


async def find_confirmed_bookings_for(
    db: AsyncSession,
    property_ids: list[uuid.UUID],
) -> dict[uuid.UUID, list[Booking]]:
    """Confirmed bookings for many properties in one query, grouped by property."""
    grouped: dict[uuid.UUID, list[Booking]] = {pid: [] for pid in property_ids}
    if not property_ids:
        return grouped
    result = await db.execute(_confirmed_bookings_query(property_ids))
    for booking in result.scalars().all():
        grouped[booking.property_id].append(booking)
    return grouped


async def get_booking(db: AsyncSession, booking_id: uuid.UUID) -> Booking | None:
    result = await db.execute(select(Booking).where(Booking.id == booking_id))
    return result.scalar_one_or_none()


async def create_booking(db: AsyncSession, **fields) -> Booking:
    booking = Booking(**fields)
    db.add(booking)
    await db.flush()
    await db.refresh(booking)
    return booking


async def update_booking(db: AsyncSession, booking: Booking, **fields) -> Booking:
    for name, value in fields.items():
        setattr(booking, name, value)
    db.add(booking)
    await db.flush()
    await db.refresh(booking)
    return booking


async def delete_booking(db: AsyncSession, booking: Booking) -> None:
    await db.delete(booking)
    await db.flush()


async def count_bookings(db: AsyncSession, filters: BookingFilter) -> int:
    result = await db.execute(select(func.count()).select_from(Booking).where(*filters.clauses()))
    return result.scalar_one()


async def list_bookings(
    db: AsyncSession,
    filters: BookingFilter,
    offset: int | None = None,
    limit: int | None = None,
) -> list[Booking]:
    """Return bookings matching ``filters``, newest created first."""
    query = select(Booking).where(*filters.clauses()).order_by(Booking.created_at.desc(), Booking.id)
    if offset is not None:
        query = query.offset(offset)
    if limit is not None:
        query = query.limit(limit)
    result = await db.execute(query)
    return list(result.scalars().all())
