"""
Tests for slot availability.
"""

from datetime import datetime, timedelta, timezone

import pytest

from slotplanner.domain.availability import AvailabilityCalculator, is_bookable
from slotplanner.domain.models import Slot

START = datetime(2025, 4, 25, 14, 0, tzinfo=timezone.utc)


def _slot(slot_id: str, start: datetime, minutes: int = 30) -> Slot:
    return Slot(id=slot_id, start=start, end=start + timedelta(minutes=minutes))


class TestIsBookable:
    """The availability predicate at its boundaries."""

    @pytest.mark.parametrize(
        "minutes_before_start, expected",
        [
            (46, False),
            (45, True),
            (10, True),
            (1, True),
            (0, False),
            (-5, False),
        ],
    )
    def test_buffer_window(self, minutes_before_start, expected):
        reference = START - timedelta(minutes=minutes_before_start)

        assert is_bookable(START, reference, 45) is expected

    def test_zero_buffer_never_bookable(self):
        assert not is_bookable(START, START - timedelta(seconds=1), 0)
        assert not is_bookable(START, START, 0)

    def test_compares_instants_not_wall_clocks(self):
        """The same reference written in another zone gives the same answer."""
        tokyo = timezone(timedelta(hours=9))
        reference = (START - timedelta(minutes=30)).astimezone(tokyo)

        assert is_bookable(START, reference, 45)

    def test_naive_reference_rejected(self):
        with pytest.raises(ValueError):
            is_bookable(START, datetime(2025, 4, 25, 13, 30), 45)


class TestAvailabilityCalculator:
    """Tests for AvailabilityCalculator.annotate."""

    def test_annotate_marks_each_slot(self):
        slots = [
            _slot("slot_0001", START),
            _slot("slot_0002", START + timedelta(minutes=45)),
            _slot("slot_0003", START - timedelta(minutes=45)),
        ]
        reference = START - timedelta(minutes=20)

        annotated = AvailabilityCalculator().annotate(slots, reference, 45)

        assert [slot.is_available for slot in annotated] == [True, False, False]

    def test_annotate_does_not_mutate_input(self):
        slots = [_slot("slot_0001", START)]

        annotated = AvailabilityCalculator().annotate(slots, START + timedelta(hours=1), 45)

        assert annotated[0].is_available is False
        assert slots[0].is_available is True

    def test_negative_buffer_rejected(self):
        with pytest.raises(ValueError, match="Buffer duration"):
            AvailabilityCalculator().annotate([_slot("slot_0001", START)], START, -1)

    def test_naive_reference_rejected(self):
        with pytest.raises(ValueError):
            AvailabilityCalculator().annotate([], datetime(2025, 4, 25, 12), 45)

    def test_debug_log_uses_display_zone(self, authority, caplog):
        calculator = AvailabilityCalculator(authority)

        with caplog.at_level("DEBUG", logger="slotplanner.domain.availability"):
            calculator.annotate([_slot("slot_0001", START)], START - timedelta(minutes=5), 45, "Asia/Tokyo")

        assert "1 of 1 slots available" in caplog.text
        assert "+09:00" in caplog.text
