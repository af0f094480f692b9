"""
Core business logic for building the slot grid.

Pure domain logic: zone rules come from the injected ``TimezoneAuthority``,
and nothing here touches storage or I/O.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterator, List, Optional, Tuple

from .exceptions import GenerationError
from .models import GenerationEstimate, Slot, SlotConfig
from .timezone import TimezoneAuthority, to_utc
from .validation import ConfigValidator, minutes_since_midnight, parse_clock, parse_date

SLOT_ID_PREFIX = "slot_"


@dataclass(frozen=True)
class WorkingWindow:
    """One day's working window as UTC instants."""
    day: date
    start: datetime
    end: datetime


def format_slot_id(sequence: int) -> str:
    """Zero-padded identifier; ordering by id matches generation order."""
    return f"{SLOT_ID_PREFIX}{sequence:04d}"


def slots_per_window(window_minutes: int, slot_duration: int, break_duration: int) -> int:
    """
    Number of slots the generation loop emits for a window.

    Every slot but the last is followed by its break, so a trailing slot
    fits even when its break would not.
    """
    if slot_duration <= 0 or window_minutes < slot_duration:
        return 0
    return (window_minutes - slot_duration) // (slot_duration + break_duration) + 1


def iter_days(start_day: date, end_day: date) -> Iterator[date]:
    """Yield calendar days from start to end inclusive."""
    current = start_day
    while current <= end_day:
        yield current
        current += timedelta(days=1)


class SlotGenerator:
    """
    Generates an ordered slot collection from a ``SlotConfig``.

    Algorithm:
    1. Validate the configuration (fail fast)
    2. Walk calendar days from start date to end date inclusive
    3. Resolve each day's working window in the configured zone
    4. Cut each window into slot + break steps on UTC instants
    5. Number the slots with one counter across the whole range
    """

    def __init__(
        self,
        authority: TimezoneAuthority,
        validator: Optional[ConfigValidator] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._authority = authority
        self._validator = validator or ConfigValidator(authority)
        self._logger = logger or logging.getLogger(__name__)

    def generate(self, config: SlotConfig) -> List[Slot]:
        """
        Build every slot described by the configuration.

        Args:
            config: Slot configuration; checked with the fail-fast validator

        Returns:
            Slots ordered by start instant, ids ``slot_0001`` onwards

        Raises:
            GenerationError: If the config is invalid, the range is inverted,
                or no day contributes a single slot
        """
        self._validator.validate_slot_config(config)

        start_day = parse_date(config.start_date)
        end_day = parse_date(config.end_date)
        if end_day < start_day:
            raise GenerationError("End date must be same as or after start date", field="end_date")

        intervals = [
            interval
            for window in self._get_working_windows(config, start_day, end_day)
            for interval in self._split_window(window, config.slot_duration, config.break_duration)
        ]

        if not intervals:
            raise GenerationError(
                "No slots were generated. Please check your configuration."
            )

        slots = [
            Slot(id=format_slot_id(sequence), start=start, end=end)
            for sequence, (start, end) in enumerate(intervals, start=1)
        ]

        self._logger.debug(
            "Generated %d slots from %s to %s in %s",
            len(slots),
            config.start_date,
            config.end_date,
            config.time_zone,
        )
        return slots

    def estimate(self, config: SlotConfig) -> GenerationEstimate:
        """
        Compute up-front figures from the configured clock times alone.

        DST days can deviate from ``slots_per_day``; ``generate`` is exact.
        """
        self._validator.validate_slot_config(config)

        total_days = (parse_date(config.end_date) - parse_date(config.start_date)).days + 1
        window_minutes = (
            minutes_since_midnight(parse_clock(config.end_time))
            - minutes_since_midnight(parse_clock(config.start_time))
        )
        per_day = slots_per_window(window_minutes, config.slot_duration, config.break_duration)

        return GenerationEstimate(
            total_days=total_days,
            working_hours_per_day=round(window_minutes / 60, 2),
            slots_per_day=per_day,
            estimated_total_slots=total_days * per_day,
        )

    def _get_working_windows(
        self,
        config: SlotConfig,
        start_day: date,
        end_day: date,
    ) -> Iterator[WorkingWindow]:
        """
        Resolve the working window of every day in the range.

        Days whose window is empty in the configured zone are skipped.
        """
        start_clock = parse_clock(config.start_time)
        end_clock = parse_clock(config.end_time)

        for day in iter_days(start_day, end_day):
            working_start = to_utc(self._authority.localize(day, start_clock, config.time_zone))
            working_end = to_utc(self._authority.localize(day, end_clock, config.time_zone))

            if working_end <= working_start:
                self._logger.warning(
                    "Invalid working hours for %s: end time is not after start time",
                    day.isoformat(),
                )
                continue

            yield WorkingWindow(day=day, start=working_start, end=working_end)

    def _split_window(
        self,
        window: WorkingWindow,
        slot_duration: int,
        break_duration: int,
    ) -> Iterator[Tuple[datetime, datetime]]:
        """
        Cut a working window into consecutive slots.

        Example (30 min slots, 15 min break):
        Window: 10:00 - 11:30
        Result: [10:00-10:30, 10:45-11:15]
        """
        slot_length = timedelta(minutes=slot_duration)
        step = timedelta(minutes=slot_duration + break_duration)

        cursor = window.start
        count = 0
        while cursor + slot_length <= window.end:
            yield cursor, cursor + slot_length
            count += 1
            cursor += step

        if count == 0:
            self._logger.info(
                "Working window on %s is too short for a %d minute slot",
                window.day.isoformat(),
                slot_duration,
            )
