"""
Filtering pipeline over a generated slot collection.

Stages run in a fixed order, each returning a new list:

1. Re-project instants into the requested zone
2. Recompute availability
3. Local date range filter
4. Local time-of-day filter
5. Available-only filter
6. Stable sort by start instant
7. Limit

Any failure degrades to an empty result and is logged, so callers rendering
the result never see an exception from bad runtime input.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Iterable, List, Optional, Sequence

from .availability import AvailabilityCalculator
from .models import DEFAULT_BUFFER_DURATION, Slot, SlotFilterOptions
from .timezone import TimezoneAuthority, to_utc
from .validation import minutes_since_midnight, parse_clock, parse_date


class SlotFilterPipeline:
    """Applies ``SlotFilterOptions`` to a slot collection."""

    def __init__(
        self,
        authority: TimezoneAuthority,
        calculator: Optional[AvailabilityCalculator] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._authority = authority
        self._calculator = calculator or AvailabilityCalculator(authority)
        self._logger = logger or logging.getLogger(__name__)

    def filter(
        self,
        slots: Iterable[Slot],
        options: Optional[SlotFilterOptions] = None,
    ) -> List[Slot]:
        """
        Run every stage of the pipeline.

        Returns:
            Filtered slots re-projected into the requested zone, sorted by
            start; an empty list if any stage fails
        """
        options = options or SlotFilterOptions()
        try:
            return self._run(list(slots), options)
        except Exception:
            self._logger.exception("Slot filtering failed, returning no slots")
            return []

    def currently_available(
        self,
        slots: Iterable[Slot],
        timezone: Optional[str] = None,
        buffer_duration: int = DEFAULT_BUFFER_DURATION,
        reference_instant: Optional[datetime] = None,
    ) -> List[Slot]:
        """Slots bookable at the reference instant."""
        return self.filter(
            slots,
            SlotFilterOptions(
                reference_instant=reference_instant,
                timezone=timezone,
                buffer_duration=buffer_duration,
                available_only=True,
            ),
        )

    def slots_for_date(
        self,
        slots: Iterable[Slot],
        day: str,
        timezone: Optional[str] = None,
        buffer_duration: int = DEFAULT_BUFFER_DURATION,
        reference_instant: Optional[datetime] = None,
    ) -> List[Slot]:
        """All slots whose local start falls on ``day`` (``YYYY-MM-DD``)."""
        return self.filter(
            slots,
            SlotFilterOptions(
                reference_instant=reference_instant,
                timezone=timezone,
                buffer_duration=buffer_duration,
                start_date=day,
                end_date=day,
            ),
        )

    def next_available(
        self,
        slots: Iterable[Slot],
        count: int = 10,
        timezone: Optional[str] = None,
        buffer_duration: int = DEFAULT_BUFFER_DURATION,
        reference_instant: Optional[datetime] = None,
    ) -> List[Slot]:
        """The first ``count`` bookable slots."""
        return self.filter(
            slots,
            SlotFilterOptions(
                reference_instant=reference_instant,
                timezone=timezone,
                buffer_duration=buffer_duration,
                available_only=True,
                limit=count,
            ),
        )

    def _run(self, slots: List[Slot], options: SlotFilterOptions) -> List[Slot]:
        timezone = options.timezone or self._authority.local_timezone()
        reference = options.reference_instant or self._authority.now()

        if not self._authority.zone_exists(timezone):
            raise ValueError(f"Unknown timezone: {timezone}")

        result = self._reproject(slots, timezone)
        result = self._calculator.annotate(result, reference, options.buffer_duration, timezone)

        if options.start_date or options.end_date:
            result = self._filter_by_date_range(result, options.start_date, options.end_date)

        if options.start_time or options.end_time:
            result = self._filter_by_time_range(result, options.start_time, options.end_time)

        if options.available_only:
            result = [slot for slot in result if slot.is_available]

        result = sorted(result, key=lambda slot: to_utc(slot.start))

        if options.limit is not None and options.limit > 0:
            result = result[: options.limit]

        self._logger.debug(
            "Filtered %d slots to %d (%d available) in %s",
            len(slots),
            len(result),
            sum(1 for slot in result if slot.is_available),
            timezone,
        )
        return result

    def _reproject(self, slots: Sequence[Slot], timezone: str) -> List[Slot]:
        """Express every slot's instants in ``timezone``; the instants do not move."""
        return [
            replace(
                slot,
                start=self._authority.to_local(slot.start, timezone),
                end=self._authority.to_local(slot.end, timezone),
            )
            for slot in slots
        ]

    @staticmethod
    def _filter_by_date_range(
        slots: Sequence[Slot],
        start_date: Optional[str],
        end_date: Optional[str],
    ) -> List[Slot]:
        """Keep slots whose local start date is within the inclusive range."""
        lower = _require(parse_date, start_date, "start date") if start_date else date.min
        upper = _require(parse_date, end_date, "end date") if end_date else date.max

        return [slot for slot in slots if lower <= slot.start.date() <= upper]

    @staticmethod
    def _filter_by_time_range(
        slots: Sequence[Slot],
        start_time: Optional[str],
        end_time: Optional[str],
    ) -> List[Slot]:
        """Keep slots whose local start time is within ``[start_time, end_time)``."""
        lower = (
            minutes_since_midnight(_require(parse_clock, start_time, "start time"))
            if start_time
            else 0
        )
        upper = (
            minutes_since_midnight(_require(parse_clock, end_time, "end time"))
            if end_time
            else 24 * 60
        )

        return [
            slot for slot in slots
            if lower <= slot.start.hour * 60 + slot.start.minute < upper
        ]


def _require(parser, value: str, label: str):
    parsed = parser(value)
    if parsed is None:
        raise ValueError(f"Invalid {label} filter: {value!r}")
    return parsed
