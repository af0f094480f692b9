"""
Validation of slot configurations.

Two entry points walk the same rule sequence:

- ``ConfigValidator.validate`` collects every violation so a caller can show
  all problems at once.
- ``ConfigValidator.validate_slot_config`` stops at the first violation and
  raises ``GenerationError``; the generator calls it right before building.
"""

from __future__ import annotations

import logging
import re
from datetime import date, time
from typing import Dict, Iterator, List, Optional

from .exceptions import GenerationError
from .models import (
    MAX_BREAK_DURATION,
    MAX_BUFFER_DURATION,
    MAX_SLOT_DURATION,
    SlotConfig,
    ValidationError,
)
from .timezone import TimezoneAuthority

logger = logging.getLogger(__name__)

DATE_PATTERN = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")
TIME_PATTERN = re.compile(r"[0-9]{2}:[0-9]{2}")

# Dates at the edges of the calendar overflow once shifted into another zone.
MIN_YEAR = 1900
MAX_YEAR = 2999


def parse_date(value: object) -> Optional[date]:
    """
    Parse a strict ``YYYY-MM-DD`` string; return None when it is not one or
    its year lies outside ``MIN_YEAR``..``MAX_YEAR``.
    """
    if not isinstance(value, str) or not DATE_PATTERN.fullmatch(value):
        return None
    try:
        parsed = date.fromisoformat(value)
    except ValueError:
        return None
    if not MIN_YEAR <= parsed.year <= MAX_YEAR:
        return None
    return parsed


def parse_clock(value: object) -> Optional[time]:
    """Parse a strict 24h ``HH:mm`` string; return None when it is not one."""
    if not isinstance(value, str) or not TIME_PATTERN.fullmatch(value):
        return None
    hour, minute = int(value[:2]), int(value[3:])
    if hour > 23 or minute > 59:
        return None
    return time(hour=hour, minute=minute)


def minutes_since_midnight(clock: time) -> int:
    return clock.hour * 60 + clock.minute


class ConfigValidator:
    """
    Checks a ``SlotConfig`` for structural and logical validity.

    Checks that depend on another field (range order, sufficiency) only run
    when that field parsed; they never hide an independent violation.
    """

    def __init__(self, authority: TimezoneAuthority):
        self._authority = authority

    def validate(self, config: SlotConfig) -> List[ValidationError]:
        """Return every violated rule; an empty list means the config is valid."""
        errors = list(self._iter_violations(config))
        if errors:
            logger.debug("Configuration has %d validation error(s)", len(errors))
        return errors

    def validate_slot_config(self, config: SlotConfig) -> None:
        """
        Fail-fast validation used before generation.

        Raises:
            GenerationError: On the first violated rule
        """
        first = next(self._iter_violations(config), None)
        if first is not None:
            raise GenerationError(first.message, field=first.field)

    def is_valid(self, config: SlotConfig) -> bool:
        return next(self._iter_violations(config), None) is None

    def _iter_violations(self, config: SlotConfig) -> Iterator[ValidationError]:
        dates: Dict[str, Optional[date]] = {}
        for name, label in (("start_date", "Start date"), ("end_date", "End date")):
            raw = getattr(config, name)
            if not raw:
                yield ValidationError(name, f"{label} is required")
                dates[name] = None
                continue
            dates[name] = parse_date(raw)
            if dates[name] is None:
                yield ValidationError(name, "Please enter a valid date (YYYY-MM-DD)")

        clocks: Dict[str, Optional[time]] = {}
        for name, label in (("start_time", "Start time"), ("end_time", "End time")):
            raw = getattr(config, name)
            if not raw:
                yield ValidationError(name, f"{label} is required")
                clocks[name] = None
                continue
            clocks[name] = parse_clock(raw)
            if clocks[name] is None:
                yield ValidationError(name, "Please enter a valid time (HH:mm)")

        if not config.time_zone:
            yield ValidationError("time_zone", "Timezone is required")
        elif not self._authority.zone_exists(config.time_zone):
            yield ValidationError("time_zone", f"Invalid timezone: {config.time_zone}")

        start_date, end_date = dates["start_date"], dates["end_date"]
        if start_date and end_date and end_date < start_date:
            yield ValidationError("end_date", "End date must be same as or after start date")

        yield from self._duration_violations(config)

        start_clock, end_clock = clocks["start_time"], clocks["end_time"]
        if start_clock and end_clock:
            window = minutes_since_midnight(end_clock) - minutes_since_midnight(start_clock)
            if window <= 0:
                yield ValidationError("end_time", "End time must be after start time")
            elif 0 < config.slot_duration and window < config.slot_duration:
                yield ValidationError("end_time", "Time range must allow for at least one slot")

    @staticmethod
    def _duration_violations(config: SlotConfig) -> Iterator[ValidationError]:
        if config.slot_duration <= 0:
            yield ValidationError("slot_duration", "Slot duration must be greater than 0")
        elif config.slot_duration > MAX_SLOT_DURATION:
            yield ValidationError(
                "slot_duration",
                f"Slot duration cannot exceed 8 hours ({MAX_SLOT_DURATION} minutes)",
            )

        if config.break_duration < 0:
            yield ValidationError("break_duration", "Break duration cannot be negative")
        elif config.break_duration > MAX_BREAK_DURATION:
            yield ValidationError(
                "break_duration",
                f"Break duration cannot exceed 2 hours ({MAX_BREAK_DURATION} minutes)",
            )

        if config.buffer_duration < 0:
            yield ValidationError("buffer_duration", "Buffer duration cannot be negative")
        elif config.buffer_duration > MAX_BUFFER_DURATION:
            yield ValidationError(
                "buffer_duration",
                f"Buffer duration cannot exceed 24 hours ({MAX_BUFFER_DURATION} minutes)",
            )
