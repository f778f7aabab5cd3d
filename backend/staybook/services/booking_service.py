"""Booking lifecycle — create, cancel, update and delete bookings.

The one invariant this module defends: for every property, confirmed
bookings never overlap on their closed ``[start_date, end_date]`` ranges.
Every write that can make a booking occupy new dates runs its overlap check
and its commit while holding the property's write lock, and additionally
locks the property row for the duration of the transaction.

Authorization is a capability check on the caller: the booking's owner or
an administrator (``User.is_admin``) may act; administrators also bypass
the past-date rules.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from staybook.config import settings
from staybook.errors import AlreadyCancelled, Conflict, Forbidden, InvalidRange, InvalidState, NotFound, ValidationFailed
from staybook.models.booking import BOOKING_STATUSES, STATUS_CANCELLED, STATUS_CONFIRMED, Booking
from staybook.models.property import Property
from staybook.models.user import User
from staybook.services import repository
from staybook.services.intervals import nights
from staybook.services.locks import property_write_lock

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("start_date", "end_date", "status")


@dataclass
class CreatedBooking:
    """A freshly created booking together with its price breakdown."""

    booking: Booking
    nights: int
    price_per_night: Decimal

    @property
    def total_price(self) -> Decimal:
        return self.booking.total_price


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def quote(prop: Property, start_date: date, end_date: date) -> tuple[int, Decimal]:
    """Return ``(nights, total_price)`` for a stay at ``prop``."""
    stay_nights = nights(start_date, end_date)
    return stay_nights, Decimal(stay_nights) * Decimal(prop.price_per_night)


def validate_range(prop: Property, start_date: date, end_date: date) -> None:
    """Raise ``InvalidRange`` unless the stay is ordered and inside the property window."""
    if end_date <= start_date:
        raise InvalidRange("End date must be after start date")
    if start_date < prop.available_from or end_date > prop.available_to:
        raise InvalidRange(
            "Booking dates must be within property availability range "
            f"({prop.available_from.isoformat()} to {prop.available_to.isoformat()})"
        )


def ensure_owner_or_admin(booking: Booking, caller: User) -> None:
    if not caller.is_admin and booking.user_id != caller.id:
        raise Forbidden("Access denied")


async def _get_booking_or_404(db: AsyncSession, booking_id: uuid.UUID) -> Booking:
    booking = await repository.get_booking(db, booking_id)
    if booking is None:
        raise NotFound("Booking not found")
    return booking


async def _get_property_or_404(db: AsyncSession, property_id: uuid.UUID, *, for_update: bool = False) -> Property:
    prop = await repository.get_property(db, property_id, for_update=for_update)
    if prop is None:
        raise NotFound("Property not found")
    return prop


def _dated_fields(prop: Property, start_date: date, end_date: date) -> dict:
    _, total_price = quote(prop, start_date, end_date)
    return {"start_date": start_date, "end_date": end_date, "total_price": total_price}


async def _ensure_no_overlap(
    db: AsyncSession,
    property_id: uuid.UUID,
    start_date: date,
    end_date: date,
    exclude_booking_id: uuid.UUID | None = None,
) -> None:
    clashing = await repository.find_confirmed_bookings(
        db, property_id, start_date, end_date, exclude_booking_id=exclude_booking_id
    )
    if clashing:
        logger.info(
            "Rejected %s..%s on property %s: overlaps booking %s",
            start_date,
            end_date,
            property_id,
            clashing[0].id,
        )
        raise Conflict("Selected dates overlap with existing bookings")


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------


async def create_booking(
    db: AsyncSession,
    caller: User,
    property_id: uuid.UUID,
    start_date: date,
    end_date: date,
) -> CreatedBooking:
    """Book ``[start_date, end_date]`` on a property for ``caller``.

    The booking is created directly as ``confirmed`` and committed before the
    property lock is released, so a concurrent request for overlapping dates
    sees it and fails with ``Conflict``.

    Raises:
        NotFound: The property does not exist.
        InvalidRange: The dates are unordered or outside the property window.
        Conflict: A confirmed booking already occupies any of the dates.
    """
    prop = await _get_property_or_404(db, property_id)
    validate_range(prop, start_date, end_date)

    async with property_write_lock(property_id):
        prop = await _get_property_or_404(db, property_id, for_update=True)
        # The window may have changed while this request waited for the lock.
        validate_range(prop, start_date, end_date)
        await _ensure_no_overlap(db, property_id, start_date, end_date)

        stay_nights, total_price = quote(prop, start_date, end_date)
        booking = await repository.create_booking(
            db,
            property_id=property_id,
            user_id=caller.id,
            user_name=caller.full_name,
            start_date=start_date,
            end_date=end_date,
            total_price=total_price,
            status=STATUS_CONFIRMED,
        )
        await db.commit()

    logger.info(
        "Booking %s created on property %s for user %s (%s..%s, %d nights, %s)",
        booking.id,
        property_id,
        caller.id,
        start_date,
        end_date,
        stay_nights,
        total_price,
    )
    return CreatedBooking(booking=booking, nights=stay_nights, price_per_night=prop.price_per_night)


async def cancel_booking(
    db: AsyncSession,
    booking_id: uuid.UUID,
    caller: User,
    today: date | None = None,
) -> Booking:
    """Mark a booking cancelled, releasing its dates.

    Raises:
        NotFound, Forbidden, AlreadyCancelled, InvalidState (past booking, non-admin).
    """
    today = today or date.today()
    booking = await _get_booking_or_404(db, booking_id)
    ensure_owner_or_admin(booking, caller)
    if booking.is_cancelled:
        raise AlreadyCancelled("Booking is already cancelled")
    if booking.start_date < today and not caller.is_admin:
        raise InvalidState("Cannot cancel past bookings")

    booking = await repository.update_booking(db, booking, status=STATUS_CANCELLED)
    await db.commit()
    logger.info("Booking %s cancelled by user %s", booking.id, caller.id)
    return booking


async def update_booking(
    db: AsyncSession,
    booking_id: uuid.UUID,
    caller: User,
    changes: dict,
    today: date | None = None,
) -> Booking:
    """Apply a partial update of dates and/or status.

    Only keys present in ``changes`` are written. The merged stay may not
    exceed ``settings.max_booking_nights``. New dates are checked against the
    property window read under the lock, and re-priced from it. When the booking is confirmed
    after the update and either its dates changed or it is being revived from
    ``cancelled``, the overlap check runs against the property's other
    confirmed bookings under the property lock.

    Raises:
        NotFound, Forbidden, InvalidState, InvalidRange, Conflict, ValidationFailed.
    """
    today = today or date.today()
    booking = await _get_booking_or_404(db, booking_id)
    ensure_owner_or_admin(booking, caller)
    if booking.is_cancelled and not caller.is_admin:
        raise InvalidState("Cannot modify cancelled bookings")

    unknown = set(changes) - set(UPDATABLE_FIELDS)
    if unknown:
        raise ValidationFailed(f"Unsupported fields: {', '.join(sorted(unknown))}")

    new_status = changes.get("status") or booking.status
    if new_status not in BOOKING_STATUSES:
        raise ValidationFailed(f"Status must be one of: {', '.join(BOOKING_STATUSES)}")
    if (
        new_status == STATUS_CANCELLED
        and booking.is_confirmed
        and booking.start_date < today
        and not caller.is_admin
    ):
        raise InvalidState("Cannot cancel past bookings")

    start_date = changes.get("start_date") or booking.start_date
    end_date = changes.get("end_date") or booking.end_date
    dates_changed = start_date != booking.start_date or end_date != booking.end_date
    if dates_changed and (end_date - start_date).days > settings.max_booking_nights:
        raise ValidationFailed(f"Booking duration cannot exceed {settings.max_booking_nights} days")

    fields: dict = {}
    if new_status != booking.status:
        fields["status"] = new_status
    if not fields and not dates_changed:
        return booking

    occupies_new_dates = new_status == STATUS_CONFIRMED and (dates_changed or booking.is_cancelled)
    if occupies_new_dates:
        async with property_write_lock(booking.property_id):
            prop = await _get_property_or_404(db, booking.property_id, for_update=True)
            validate_range(prop, start_date, end_date)
            if dates_changed:
                fields.update(_dated_fields(prop, start_date, end_date))
            await _ensure_no_overlap(db, booking.property_id, start_date, end_date, exclude_booking_id=booking.id)
            booking = await repository.update_booking(db, booking, **fields)
            await db.commit()
    else:
        if dates_changed:
            prop = await _get_property_or_404(db, booking.property_id)
            validate_range(prop, start_date, end_date)
            fields.update(_dated_fields(prop, start_date, end_date))
        booking = await repository.update_booking(db, booking, **fields)
        await db.commit()

    logger.info("Booking %s updated by user %s: %s", booking.id, caller.id, sorted(fields))
    return booking


async def delete_booking(
    db: AsyncSession,
    booking_id: uuid.UUID,
    caller: User,
    today: date | None = None,
) -> None:
    """Permanently remove a booking.

    Raises:
        NotFound, Forbidden, InvalidState (past booking, non-admin).
    """
    today = today or date.today()
    booking = await _get_booking_or_404(db, booking_id)
    ensure_owner_or_admin(booking, caller)
    if booking.start_date < today and not caller.is_admin:
        raise InvalidState("Cannot delete past bookings")

    await repository.delete_booking(db, booking)
    await db.commit()
    logger.info("Booking %s deleted by user %s", booking_id, caller.id)
