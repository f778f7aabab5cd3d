"""Date-interval arithmetic over closed ``[start, end]`` ranges.

Both endpoints are inclusive: a stay ending on day D and another starting on
day D overlap.
"""

from dataclasses import dataclass
from datetime import date, timedelta

ONE_DAY = timedelta(days=1)


@dataclass(frozen=True, order=True)
class DateRange:
    """A closed date range. ``start`` must not be after ``end``."""

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValueError(f"range end {self.end} is before start {self.start}")

    @property
    def days(self) -> int:
        """Number of calendar days covered, both ends included."""
        return (self.end - self.start).days + 1

    def overlaps(self, other: "DateRange") -> bool:
        return overlaps(self.start, self.end, other.start, other.end)

    def contains(self, other: "DateRange") -> bool:
        return self.start <= other.start and other.end <= self.end


def overlaps(a_start: date, a_end: date, b_start: date, b_end: date) -> bool:
    """Return True when ``[a_start, a_end]`` and ``[b_start, b_end]`` share a day."""
    return a_start <= b_end and b_start <= a_end


def nights(start: date, end: date) -> int:
    """Number of nights between ``start`` and ``end``.

    Raises:
        ValueError: If ``end`` is not after ``start``.
    """
    if end <= start:
        raise ValueError("end must be after start")
    return (end - start).days


def gap_between(prev_end: date, next_start: date) -> DateRange | None:
    """Return the free days strictly between two occupied ranges, if any."""
    gap_start = prev_end + ONE_DAY
    gap_end = next_start - ONE_DAY
    if gap_start <= gap_end:
        return DateRange(gap_start, gap_end)
    return None
