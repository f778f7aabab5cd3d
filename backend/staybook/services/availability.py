"""Free date ranges of a property, derived from its confirmed bookings.

Availability is never stored. Every read sweeps the property's confirmed
bookings and recomputes the gaps inside the availability window, so the
result always reflects the current booking table.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date
from typing import Protocol

from staybook.services.intervals import ONE_DAY, DateRange, gap_between


class Occupancy(Protocol):
    start_date: date
    end_date: date


def available_ranges(
    window_start: date,
    window_end: date,
    confirmed_bookings: Iterable[Occupancy],
) -> list[DateRange]:
    """Return the free sub-ranges of ``[window_start, window_end]``.

    The result is ascending, disjoint and free of empty ranges; together with
    the booking ranges it covers the whole window. Bookings are sorted by
    start date here, and duplicated or nested input only ever moves the
    cursor forward.
    """
    ranges: list[DateRange] = []
    cursor = window_start

    for booking in sorted(confirmed_bookings, key=lambda b: (b.start_date, b.end_date)):
        if cursor > window_end:
            break
        gap = gap_between(cursor - ONE_DAY, min(booking.start_date, window_end + ONE_DAY))
        if gap is not None:
            ranges.append(gap)
        cursor = max(cursor, booking.end_date + ONE_DAY)

    if cursor <= window_end:
        ranges.append(DateRange(cursor, window_end))
    return ranges


@dataclass
class PropertyAvailability:
    """Availability summary of one property."""

    window: DateRange
    ranges: list[DateRange] = field(default_factory=list)
    booking_count: int = 0

    @property
    def has_availability(self) -> bool:
        return bool(self.ranges)

    @property
    def is_fully_available(self) -> bool:
        return self.booking_count == 0

    @property
    def total_available_days(self) -> int:
        return sum(r.days for r in self.ranges)

    def periods(self) -> list[dict]:
        return [
            {"start_date": r.start, "end_date": r.end, "days_available": r.days}
            for r in self.ranges
        ]


def summarize(available_from: date, available_to: date, confirmed_bookings: Iterable[Occupancy]) -> PropertyAvailability:
    """Build a ``PropertyAvailability`` for a window and its confirmed bookings."""
    bookings = list(confirmed_bookings)
    return PropertyAvailability(
        window=DateRange(available_from, available_to),
        ranges=available_ranges(available_from, available_to, bookings),
        booking_count=len(bookings),
    )
