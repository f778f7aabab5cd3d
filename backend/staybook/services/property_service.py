"""Property administration — catalog writes performed by administrators."""

import logging
import uuid
from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from staybook.errors import Conflict, InvalidRange, InvalidState, NotFound
from staybook.models.property import Property
from staybook.services import repository
from staybook.services.intervals import DateRange
from staybook.services.locks import property_write_lock

logger = logging.getLogger(__name__)


async def get_property(db: AsyncSession, property_id: uuid.UUID) -> Property:
    prop = await repository.get_property(db, property_id)
    if prop is None:
        raise NotFound("Property not found")
    return prop


async def create_property(db: AsyncSession, fields: dict) -> Property:
    if fields["available_to"] <= fields["available_from"]:
        raise InvalidRange("Available to date must be after available from date")
    prop = Property(**fields)
    db.add(prop)
    await db.flush()
    await db.refresh(prop)
    logger.info("Property %s created (%s)", prop.id, prop.title)
    return prop


async def update_property(db: AsyncSession, property_id: uuid.UUID, changes: dict) -> Property:
    """Partially update a property.

    A changed window must stay ordered and must still contain every
    confirmed booking, otherwise those bookings would fall outside the
    calendar the availability sweep covers.
    """
    async with property_write_lock(property_id):
        prop = await repository.get_property(db, property_id, for_update=True)
        if prop is None:
            raise NotFound("Property not found")

        window_from = changes.get("available_from") or prop.available_from
        window_to = changes.get("available_to") or prop.available_to
        if window_to <= window_from:
            raise InvalidRange("Available to date must be after available from date")

        if window_from != prop.available_from or window_to != prop.available_to:
            window = DateRange(window_from, window_to)
            bookings = await repository.find_confirmed_bookings(db, property_id)
            outside = [b for b in bookings if not window.contains(DateRange(b.start_date, b.end_date))]
            if outside:
                raise Conflict("New availability window would exclude confirmed bookings")

        for name, value in changes.items():
            setattr(prop, name, value)
        db.add(prop)
        await db.flush()
        await db.refresh(prop)
        await db.commit()

    logger.info("Property %s updated: %s", prop.id, sorted(changes))
    return prop


async def delete_property(db: AsyncSession, property_id: uuid.UUID, today: date | None = None) -> None:
    """Delete a property and its bookings.

    Refused while any confirmed booking ends today or later. The check and
    the delete share the property lock with booking writes, so a booking
    committed meanwhile is seen by the check.
    """
    today = today or date.today()
    async with property_write_lock(property_id):
        prop = await repository.get_property(db, property_id, for_update=True)
        if prop is None:
            raise NotFound("Property not found")

        active = await repository.find_confirmed_bookings(db, property_id, start=today)
        if active:
            raise InvalidState("Cannot delete property with active confirmed bookings")

        await repository.delete_property(db, prop)
        await db.commit()

    logger.info("Property %s deleted", property_id)
