"""Read paths over the catalog and bookings.

Availability is derived from the booking table on every call; nothing here
writes or caches.
"""

import math
import uuid
from dataclasses import dataclass, field
from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from staybook.errors import NotFound
from staybook.models.booking import Booking
from staybook.models.property import Property
from staybook.models.user import User
from staybook.services import repository
from staybook.services.availability import PropertyAvailability, available_ranges, summarize
from staybook.services.booking_service import ensure_owner_or_admin
from staybook.services.repository import BookingFilter, PropertyFilter


@dataclass
class Page:
    """One page of results plus the numbers needed to render pagination."""

    items: list
    total: int
    page: int
    limit: int
    summary: dict = field(default_factory=dict)

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0

    def pagination(self) -> dict:
        return {
            "current_page": self.page,
            "total_pages": self.total_pages,
            "total_items": self.total,
            "items_per_page": self.limit,
            "has_next_page": self.page < self.total_pages,
            "has_prev_page": self.page > 1,
        }


@dataclass
class AvailablePropertyView:
    property: Property
    availability: PropertyAvailability


@dataclass
class PropertyAvailabilityView:
    property: Property
    available_ranges: list
    occupied: list[Booking]


async def list_properties(db: AsyncSession, filters: PropertyFilter, page: int, limit: int) -> Page:
    """Page of properties matching ``filters``, regardless of booking state."""
    total = await repository.count_properties(db, filters)
    items = await repository.list_properties(db, filters, offset=(page - 1) * limit, limit=limit)
    return Page(items=items, total=total, page=page, limit=limit)


async def list_available_properties(db: AsyncSession, filters: PropertyFilter, page: int, limit: int) -> Page:
    """Page of matching properties that still have at least one free range.

    Availability is computed for every matching property first and the page
    is cut from the filtered list, so page sizes match what the client sees.
    """
    properties = await repository.list_properties(db, filters)
    bookings_by_property = await repository.find_confirmed_bookings_for(db, [p.id for p in properties])

    available: list[AvailablePropertyView] = []
    for prop in properties:
        availability = summarize(prop.available_from, prop.available_to, bookings_by_property[prop.id])
        if availability.has_availability:
            available.append(AvailablePropertyView(property=prop, availability=availability))

    offset = (page - 1) * limit
    return Page(items=available[offset : offset + limit], total=len(available), page=page, limit=limit)


async def get_property_availability(
    db: AsyncSession,
    property_id: uuid.UUID,
    start_date: date | None = None,
    end_date: date | None = None,
) -> PropertyAvailabilityView:
    """Free ranges of a property and the confirmed bookings occupying it.

    Free ranges always account for every confirmed booking. ``start_date`` and
    ``end_date`` only narrow the list of occupying bookings to those
    overlapping the queried window.
    """
    prop = await repository.get_property(db, property_id)
    if prop is None:
        raise NotFound("Property not found")

    bookings = await repository.find_confirmed_bookings(db, property_id)
    ranges = available_ranges(prop.available_from, prop.available_to, bookings)
    if start_date is not None or end_date is not None:
        occupied = await repository.find_confirmed_bookings(db, property_id, start_date, end_date)
    else:
        occupied = bookings
    return PropertyAvailabilityView(property=prop, available_ranges=ranges, occupied=occupied)


async def list_my_bookings(db: AsyncSession, caller: User) -> list[Booking]:
    """All of the caller's bookings, newest created first."""
    return await repository.list_bookings(db, BookingFilter(user_id=caller.id))


async def list_all_bookings(db: AsyncSession, filters: BookingFilter, page: int, limit: int) -> Page:
    """Admin view: page of bookings with confirmed/cancelled counts for the page."""
    total = await repository.count_bookings(db, filters)
    items = await repository.list_bookings(db, filters, offset=(page - 1) * limit, limit=limit)
    summary = {
        "confirmed": sum(1 for b in items if b.is_confirmed),
        "cancelled": sum(1 for b in items if b.is_cancelled),
    }
    return Page(items=items, total=total, page=page, limit=limit, summary=summary)


async def get_booking(db: AsyncSession, booking_id: uuid.UUID, caller: User) -> Booking:
    booking = await repository.get_booking(db, booking_id)
    if booking is None:
        raise NotFound("Booking not found")
    ensure_owner_or_admin(booking, caller)
    return booking
