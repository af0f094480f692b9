"""
Aggregate figures over a filtered slot collection.
"""

from __future__ import annotations

import math
from collections import Counter
from typing import Sequence

from .models import DateRange, Slot, SlotStatistics
from .timezone import TimezoneAuthority


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


class StatisticsReporter:
    """Derives counts from slots; no side effects."""

    def __init__(self, authority: TimezoneAuthority):
        self._authority = authority

    def summarize(self, slots: Sequence[Slot], timezone: str) -> SlotStatistics:
        """
        Summarize a collection, grouping days by local date in ``timezone``.

        Percent and average are rounded half up and are 0 for an empty
        collection.
        """
        total = len(slots)
        available = sum(1 for slot in slots if slot.is_available)

        per_day = Counter(
            self._authority.to_local(slot.start, timezone).date().isoformat()
            for slot in slots
        )
        days = sorted(per_day)

        return SlotStatistics(
            timezone=timezone,
            total=total,
            available=available,
            unavailable=total - available,
            availability_rate_percent=round_half_up(100 * available / total) if total else 0,
            days_with_slots=len(days),
            average_slots_per_day=round_half_up(total / len(days)) if days else 0,
            date_range=DateRange(start=days[0], end=days[-1]) if days else DateRange(),
        )
