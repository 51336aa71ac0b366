"""
Slot overlap rules for calendar entries
"""
import pytest

from dintask.api.v1.endpoints.schedules import slots_overlap


class TestSlotsOverlap:

    @pytest.mark.parametrize("start,end,other_start,other_end", [
        ("10:00", "11:00", "10:30", "11:30"),
        ("10:30", "11:30", "10:00", "11:00"),
        ("10:00", "12:00", "10:30", "11:00"),
        ("10:00", None, "10:00", "10:30"),
        ("09:00", "10:00", "09:00", None),
    ])
    def test_overlapping(self, start, end, other_start, other_end):
        assert slots_overlap(start, end, other_start, other_end) is True

    @pytest.mark.parametrize("start,end,other_start,other_end", [
        ("10:00", "11:00", "11:00", "12:00"),
        ("11:00", "12:00", "10:00", "11:00"),
        ("10:00", None, "10:30", "11:00"),
        ("10:15", None, "10:00", None),
    ])
    def test_disjoint(self, start, end, other_start, other_end):
        assert slots_overlap(start, end, other_start, other_end) is False
