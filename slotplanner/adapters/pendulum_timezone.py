"""
Timezone authority backed by pendulum and the IANA database it ships with.
"""

from datetime import date, datetime, time
from typing import List, Optional, Tuple

import pendulum
from pendulum import DateTime
from pendulum.tz.exceptions import InvalidTimezone

from ..domain.timezone import format_offset


class PendulumTimezoneAuthority:
    """
    ``TimezoneAuthority`` implementation using pendulum.

    Args:
        fixed_now: Optional instant returned by ``now()`` instead of the
            real clock (manual reference time, deterministic tests)
    """

    def __init__(self, fixed_now: Optional[datetime] = None):
        self._fixed_now = pendulum.instance(fixed_now) if fixed_now is not None else None

    def now(self) -> DateTime:
        if self._fixed_now is not None:
            return self._fixed_now
        return pendulum.now("UTC")

    def to_local(self, instant: datetime, zone: str) -> DateTime:
        return pendulum.instance(instant).in_timezone(zone)

    def utc_offset(self, zone: str, instant: datetime) -> int:
        return self.to_local(instant, zone).offset // 60

    def zone_exists(self, zone: str) -> bool:
        if not zone:
            return False
        try:
            pendulum.timezone(zone)
        except (InvalidTimezone, ValueError, KeyError, OSError):
            # zoneinfo raises KeyError subclasses for unknown keys, ValueError
            # for malformed ones and OSError for tzdata directories such as
            # "America" or over-long names
            return False
        return True

    def localize(self, day: date, clock: time, zone: str) -> DateTime:
        # Wall-clock times inside a DST gap are shifted forward by pendulum.
        return pendulum.datetime(
            day.year,
            day.month,
            day.day,
            clock.hour,
            clock.minute,
            tz=zone,
        )

    def local_timezone(self) -> str:
        name = getattr(pendulum.local_timezone(), "name", None)
        if name and self.zone_exists(name):
            return name
        return "UTC"

    def zone_options(self, search: str = "") -> List[Tuple[str, str]]:
        """
        List ``(zone, label)`` pairs sorted by current offset, then name.

        Label format: ``(GMT-04:00) America/New York``
        """
        reference = self.now()
        needle = search.lower()
        options = []

        for zone in pendulum.timezones():
            offset = self.utc_offset(zone, reference)
            label = f"({format_offset(offset)}) {zone.replace('_', ' ')}"
            if needle and needle not in zone.lower() and needle not in label.lower():
                continue
            options.append((offset, zone, label))

        options.sort(key=lambda option: (option[0], option[1]))
        return [(zone, label) for _, zone, label in options]
