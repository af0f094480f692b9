"""
Domain models for slot configuration, generated slots and derived reports.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_SLOT_DURATION = 30
DEFAULT_BREAK_DURATION = 15
DEFAULT_BUFFER_DURATION = 45

MAX_SLOT_DURATION = 480
MAX_BREAK_DURATION = 120
MAX_BUFFER_DURATION = 1440


class SlotConfig(BaseModel):
    """
    Parameters for generating a slot collection.

    String fields stay raw so that malformed input survives construction and
    can be reported by ``ConfigValidator`` field by field. Aliases are the
    persisted (camelCase) names.
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    start_date: Optional[str] = Field(default=None, alias="startDate")
    end_date: Optional[str] = Field(default=None, alias="endDate")
    start_time: Optional[str] = Field(default=None, alias="startTime")
    end_time: Optional[str] = Field(default=None, alias="endTime")
    time_zone: Optional[str] = Field(default=None, alias="timeZone")
    slot_duration: int = Field(default=DEFAULT_SLOT_DURATION, alias="slotDuration")
    break_duration: int = Field(default=DEFAULT_BREAK_DURATION, alias="breakDuration")
    buffer_duration: int = Field(default=DEFAULT_BUFFER_DURATION, alias="bufferDuration")

    def to_record(self) -> dict:
        """Return the persisted representation."""
        return self.model_dump(by_alias=True)


@dataclass(frozen=True)
class ValidationError:
    """A single violated configuration rule."""
    field: str
    message: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


@dataclass(frozen=True)
class Slot:
    """
    A fixed-duration bookable interval.

    ``start`` and ``end`` are absolute instants (aware datetimes). The zone they
    carry only affects how they render; equality and ordering use the instant.
    ``is_available`` is derived and recomputed on every filter pass.

    Invariant: start must be before end.
    """
    id: str
    start: datetime
    end: datetime
    is_available: bool = True

    def __post_init__(self):
        for name, value in (("start", self.start), ("end", self.end)):
            if value.tzinfo is None or value.utcoffset() is None:
                raise ValueError(f"Slot {self.id} {name} {value} must be timezone-aware")
        if self.start >= self.end:
            raise ValueError(f"Start time {self.start} must be before end time {self.end}")

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return int((self.end - self.start).total_seconds() / 60)

    def overlaps(self, other: "Slot") -> bool:
        """Check if this slot overlaps with another."""
        return self.start < other.end and self.end > other.start

    def with_availability(self, is_available: bool) -> "Slot":
        """Return a copy carrying the given availability flag."""
        return replace(self, is_available=is_available)

    def format_display(self) -> str:
        """
        Format the slot for display in the zone its instants carry.
        Format: Weekday, DD.MM.YYYY | HH:MM – HH:MM (N min)
        """
        date_str = self.start.strftime("%a, %d.%m.%Y")
        time_str = f"{self.start.strftime('%H:%M')} – {self.end.strftime('%H:%M')}"
        return f"{date_str} | {time_str} ({self.duration_minutes()} min)"

    def __str__(self) -> str:
        return f"{self.id} {self.format_display()}"


@dataclass(frozen=True)
class SlotFilterOptions:
    """
    Options recognised by ``SlotFilterPipeline``.

    ``reference_instant`` and ``timezone`` default to the authority's current
    instant and local zone. Dates are ``YYYY-MM-DD``, times ``HH:mm``; either
    bound of a range may be given alone.
    """
    reference_instant: Optional[datetime] = None
    timezone: Optional[str] = None
    buffer_duration: int = DEFAULT_BUFFER_DURATION
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    available_only: bool = False
    limit: Optional[int] = None


@dataclass(frozen=True)
class DateRange:
    """First and last local dates of a collection."""
    start: Optional[str] = None
    end: Optional[str] = None


@dataclass(frozen=True)
class SlotStatistics:
    """Aggregate counts derived from a filtered slot collection."""
    timezone: str
    total: int
    available: int
    unavailable: int
    availability_rate_percent: int
    days_with_slots: int
    average_slots_per_day: int
    date_range: DateRange = field(default_factory=DateRange)


@dataclass(frozen=True)
class GenerationEstimate:
    """Up-front figures for a configuration, before any slot is built."""
    total_days: int
    working_hours_per_day: float
    slots_per_day: int
    estimated_total_slots: int


@dataclass(frozen=True)
class GenerationResult:
    """Outcome of a generate-and-save run."""
    slots: List[Slot]
    estimate: GenerationEstimate
