"""
Bookability of slots relative to a reference instant.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from .models import Slot
from .timezone import TimezoneAuthority, to_utc


def is_bookable(slot_start: datetime, reference_instant: datetime, buffer_duration: int) -> bool:
    """
    The single availability predicate.

    A slot is bookable once the reference instant has entered the buffer
    window before its start, and only until the slot starts:
    ``start - buffer <= reference < start``.
    """
    start = to_utc(slot_start)
    reference = to_utc(reference_instant)
    return start - timedelta(minutes=buffer_duration) <= reference < start


class AvailabilityCalculator:
    """Annotates slots with their bookability at a reference instant."""

    def __init__(
        self,
        authority: Optional[TimezoneAuthority] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._authority = authority
        self._logger = logger or logging.getLogger(__name__)

    def annotate(
        self,
        slots: Iterable[Slot],
        reference_instant: datetime,
        buffer_duration: int,
        timezone: Optional[str] = None,
    ) -> List[Slot]:
        """
        Return copies of ``slots`` with ``is_available`` recomputed.

        ``timezone`` only changes how the reference instant is logged; the
        comparison itself is on absolute instants.

        Raises:
            ValueError: If the reference instant is naive or the buffer negative
        """
        if buffer_duration < 0:
            raise ValueError(f"Buffer duration must not be negative, got {buffer_duration}")
        to_utc(reference_instant)

        annotated = [
            slot.with_availability(is_bookable(slot.start, reference_instant, buffer_duration))
            for slot in slots
        ]

        if self._logger.isEnabledFor(logging.DEBUG):
            shown = reference_instant
            if timezone and self._authority is not None:
                shown = self._authority.to_local(reference_instant, timezone)
            self._logger.debug(
                "%d of %d slots available at %s with %d min buffer",
                sum(1 for slot in annotated if slot.is_available),
                len(annotated),
                shown.isoformat(),
                buffer_duration,
            )

        return annotated
