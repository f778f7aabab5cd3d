"""Unit tests for closed-interval date arithmetic."""

from datetime import date

import pytest

from staybook.services.intervals import DateRange, gap_between, nights, overlaps

D = date.fromisoformat


class TestOverlaps:
    def test_disjoint_ranges(self):
        assert not overlaps(D("2025-06-01"), D("2025-06-05"), D("2025-06-07"), D("2025-06-09"))

    def test_touching_endpoints_overlap(self):
        """A stay ending on day D and one starting on day D share day D."""
        assert overlaps(D("2025-06-10"), D("2025-06-15"), D("2025-06-15"), D("2025-06-20"))
        assert overlaps(D("2025-06-15"), D("2025-06-20"), D("2025-06-10"), D("2025-06-15"))

    def test_adjacent_days_do_not_overlap(self):
        assert not overlaps(D("2025-06-10"), D("2025-06-15"), D("2025-06-16"), D("2025-06-20"))

    def test_containment(self):
        assert overlaps(D("2025-06-01"), D("2025-06-30"), D("2025-06-10"), D("2025-06-12"))
        assert overlaps(D("2025-06-10"), D("2025-06-12"), D("2025-06-01"), D("2025-06-30"))

    def test_partial_overlap(self):
        assert overlaps(D("2025-06-10"), D("2025-06-15"), D("2025-06-14"), D("2025-06-20"))

    def test_is_symmetric(self):
        a = (D("2025-01-01"), D("2025-01-05"))
        b = (D("2025-01-05"), D("2025-01-09"))
        assert overlaps(*a, *b) == overlaps(*b, *a)


class TestNights:
    def test_counts_whole_days(self):
        assert nights(D("2025-06-10"), D("2025-06-15")) == 5

    def test_single_night(self):
        assert nights(D("2025-06-10"), D("2025-06-11")) == 1

    def test_across_month_and_leap_day(self):
        assert nights(D("2024-02-27"), D("2024-03-02")) == 4

    @pytest.mark.parametrize("start,end", [("2025-06-10", "2025-06-10"), ("2025-06-10", "2025-06-09")])
    def test_requires_end_after_start(self, start, end):
        with pytest.raises(ValueError):
            nights(D(start), D(end))


class TestGapBetween:
    def test_gap_excludes_both_occupied_days(self):
        assert gap_between(D("2025-06-15"), D("2025-06-20")) == DateRange(D("2025-06-16"), D("2025-06-19"))

    def test_single_free_day(self):
        assert gap_between(D("2025-06-15"), D("2025-06-17")) == DateRange(D("2025-06-16"), D("2025-06-16"))

    def test_consecutive_days_leave_no_gap(self):
        assert gap_between(D("2025-06-15"), D("2025-06-16")) is None

    def test_overlapping_input_leaves_no_gap(self):
        assert gap_between(D("2025-06-15"), D("2025-06-10")) is None


class TestDateRange:
    def test_days_is_inclusive(self):
        assert DateRange(D("2025-06-01"), D("2025-06-09")).days == 9
        assert DateRange(D("2025-06-01"), D("2025-06-01")).days == 1

    def test_rejects_reversed_bounds(self):
        with pytest.raises(ValueError):
            DateRange(D("2025-06-02"), D("2025-06-01"))

    def test_contains(self):
        window = DateRange(D("2025-06-01"), D("2025-12-31"))
        assert window.contains(DateRange(D("2025-06-01"), D("2025-06-05")))
        assert not window.contains(DateRange(D("2025-05-31"), D("2025-06-05")))

    def test_overlaps_method(self):
        assert DateRange(D("2025-06-10"), D("2025-06-15")).overlaps(DateRange(D("2025-06-15"), D("2025-06-16")))
