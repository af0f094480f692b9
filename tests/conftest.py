"""
Shared fixtures: a deterministic timezone authority, the pendulum one, and
an in-memory blob store.
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Dict, Optional

import pytest

from slotplanner.adapters.blob_store import InMemoryBlobStore
from slotplanner.adapters.pendulum_timezone import PendulumTimezoneAuthority
from slotplanner.domain.models import SlotConfig


class FixedOffsetAuthority:
    """
    Minimal zone table without DST and a frozen clock.

    Matches the ``TimezoneAuthority`` protocol.
    """

    ZONES: Dict[str, int] = {
        "UTC": 0,
        "Asia/Kolkata": 330,
        "Asia/Tokyo": 540,
        "Etc/GMT+5": -300,
    }

    def __init__(self, now: Optional[datetime] = None, local_zone: str = "UTC"):
        self._now = now or datetime(2025, 4, 25, 12, 0, tzinfo=timezone.utc)
        self._local_zone = local_zone

    def _tz(self, zone: str) -> timezone:
        if zone not in self.ZONES:
            raise ValueError(f"Unknown timezone: {zone}")
        return timezone(timedelta(minutes=self.ZONES[zone]), zone)

    def now(self) -> datetime:
        return self._now

    def to_local(self, instant: datetime, zone: str) -> datetime:
        return instant.astimezone(self._tz(zone))

    def utc_offset(self, zone: str, instant: datetime) -> int:
        self._tz(zone)
        return self.ZONES[zone]

    def zone_exists(self, zone: str) -> bool:
        return zone in self.ZONES

    def localize(self, day: date, clock: time, zone: str) -> datetime:
        return datetime.combine(day, clock, tzinfo=self._tz(zone))

    def local_timezone(self) -> str:
        return self._local_zone


@pytest.fixture
def authority() -> FixedOffsetAuthority:
    return FixedOffsetAuthority()


@pytest.fixture
def pendulum_authority() -> PendulumTimezoneAuthority:
    return PendulumTimezoneAuthority()


@pytest.fixture
def store() -> InMemoryBlobStore:
    return InMemoryBlobStore()


@pytest.fixture
def make_config():
    """Factory for a valid config in UTC; keyword arguments override fields."""

    def _make(**overrides) -> SlotConfig:
        values = {
            "start_date": "2025-04-25",
            "end_date": "2025-04-25",
            "start_time": "10:00",
            "end_time": "12:00",
            "time_zone": "UTC",
            "slot_duration": 30,
            "break_duration": 15,
            "buffer_duration": 45,
        }
        values.update(overrides)
        return SlotConfig(**values)

    return _make
