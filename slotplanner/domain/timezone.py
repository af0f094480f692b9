"""
Timezone capability the domain layer is written against.

The domain never imports a date library for zone rules; every zone-aware
operation goes through a ``TimezoneAuthority``. The production implementation
lives in ``slotplanner.adapters.pendulum_timezone``.
"""

from __future__ import annotations

from datetime import date, datetime, time, timezone
from typing import Protocol


class TimezoneAuthority(Protocol):
    """Protocol describing the zone operations needed by the domain."""

    def now(self) -> datetime:
        """Return the current instant as an aware datetime."""

    def to_local(self, instant: datetime, zone: str) -> datetime:
        """Return the same instant expressed in ``zone``."""

    def utc_offset(self, zone: str, instant: datetime) -> int:
        """Return the UTC offset of ``zone`` at ``instant`` in minutes."""

    def zone_exists(self, zone: str) -> bool:
        """Check whether ``zone`` is a known IANA identifier."""

    def localize(self, day: date, clock: time, zone: str) -> datetime:
        """
        Combine a calendar day and a wall-clock time in ``zone``.

        Wall-clock times that fall into a DST gap resolve forward.
        """

    def local_timezone(self) -> str:
        """Return the identifier of the caller's own zone."""


def to_utc(instant: datetime) -> datetime:
    """Normalise an aware datetime to UTC."""
    if instant.tzinfo is None or instant.utcoffset() is None:
        raise ValueError(f"Instant {instant!r} must be timezone-aware")
    return instant.astimezone(timezone.utc)


def format_offset(minutes: int) -> str:
    """Render an offset in minutes as ``GMT+05:30``."""
    sign = "+" if minutes >= 0 else "-"
    hours, mins = divmod(abs(minutes), 60)
    return f"GMT{sign}{hours:02d}:{mins:02d}"
