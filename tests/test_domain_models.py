"""
Tests for domain models.
"""

from datetime import datetime, timedelta, timezone

import pytest

from slotplanner.domain.models import Slot, SlotConfig


def _utc(hour: int, minute: int = 0) -> datetime:
    return datetime(2025, 4, 25, hour, minute, tzinfo=timezone.utc)


class TestSlot:
    """Tests for the Slot model."""

    def test_create_valid_slot(self):
        """Test creating a valid slot."""
        slot = Slot(id="slot_0001", start=_utc(10), end=_utc(10, 30))

        assert slot.duration_minutes() == 30
        assert slot.is_available is True

    def test_invalid_order_raises_error(self):
        """Test that a slot ending before it starts raises ValueError."""
        with pytest.raises(ValueError, match="Start time .* must be before end time"):
            Slot(id="slot_0001", start=_utc(11), end=_utc(10))

    def test_naive_instants_rejected(self):
        """Slots hold absolute instants, so naive datetimes are refused."""
        with pytest.raises(ValueError, match="timezone-aware"):
            Slot(id="slot_0001", start=datetime(2025, 4, 25, 10), end=_utc(11))

    def test_overlaps(self):
        """Test overlap detection."""
        first = Slot(id="a", start=_utc(10), end=_utc(10, 30))
        second = Slot(id="b", start=_utc(10, 15), end=_utc(10, 45))
        third = Slot(id="c", start=_utc(10, 30), end=_utc(11))

        assert first.overlaps(second)
        assert second.overlaps(first)
        assert not first.overlaps(third)

    def test_with_availability_returns_copy(self):
        """Annotating availability never mutates the source slot."""
        slot = Slot(id="slot_0001", start=_utc(10), end=_utc(10, 30))

        updated = slot.with_availability(False)

        assert updated.is_available is False
        assert slot.is_available is True
        assert updated.start == slot.start and updated.id == slot.id

    def test_equality_uses_instants(self):
        """The same instant expressed in another zone is the same slot."""
        tokyo = timezone(timedelta(hours=9))
        slot = Slot(id="slot_0001", start=_utc(10), end=_utc(10, 30))
        projected = Slot(
            id="slot_0001",
            start=slot.start.astimezone(tokyo),
            end=slot.end.astimezone(tokyo),
        )

        assert projected == slot
        assert projected.start.hour == 19

    def test_format_display(self):
        """Test display formatting."""
        slot = Slot(id="slot_0001", start=_utc(10), end=_utc(10, 30))

        assert slot.format_display() == "Fri, 25.04.2025 | 10:00 – 10:30 (30 min)"


class TestSlotConfig:
    """Tests for SlotConfig."""

    def test_defaults(self):
        """Durations default to the documented values."""
        config = SlotConfig()

        assert config.slot_duration == 30
        assert config.break_duration == 15
        assert config.buffer_duration == 45
        assert config.start_date is None

    def test_accepts_persisted_aliases(self):
        """Records stored with camelCase names load into the model."""
        config = SlotConfig.model_validate({
            "startDate": "2025-04-25",
            "endDate": "2025-04-30",
            "startTime": "10:00",
            "endTime": "18:00",
            "timeZone": "America/New_York",
            "slotDuration": 30,
            "breakDuration": 15,
            "bufferDuration": 45,
        })

        assert config.start_date == "2025-04-25"
        assert config.time_zone == "America/New_York"

    def test_to_record_uses_aliases(self):
        """The persisted record uses camelCase field names."""
        record = SlotConfig(start_date="2025-04-25", time_zone="UTC").to_record()

        assert record["startDate"] == "2025-04-25"
        assert record["timeZone"] == "UTC"
        assert "start_date" not in record

    def test_malformed_strings_survive_construction(self):
        """Bad input is left for the validator to report."""
        config = SlotConfig(start_date="25/04/2025", start_time="9am")

        assert config.start_date == "25/04/2025"
        assert config.start_time == "9am"
