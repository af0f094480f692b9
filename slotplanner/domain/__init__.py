"""
Domain layer - Pure business logic without external dependencies.
"""

from .availability import AvailabilityCalculator, is_bookable
from .exceptions import GenerationError, InvalidConfigError, SlotPlannerError, StorageError
from .models import (
    DateRange,
    GenerationEstimate,
    GenerationResult,
    Slot,
    SlotConfig,
    SlotFilterOptions,
    SlotStatistics,
    ValidationError,
)
from .slot_filter import SlotFilterPipeline
from .slot_generator import SlotGenerator
from .statistics import StatisticsReporter
from .timezone import TimezoneAuthority
from .validation import ConfigValidator

__all__ = [
    "AvailabilityCalculator",
    "ConfigValidator",
    "DateRange",
    "GenerationError",
    "GenerationEstimate",
    "GenerationResult",
    "InvalidConfigError",
    "Slot",
    "SlotConfig",
    "SlotFilterOptions",
    "SlotFilterPipeline",
    "SlotGenerator",
    "SlotPlannerError",
    "SlotStatistics",
    "StatisticsReporter",
    "StorageError",
    "TimezoneAuthority",
    "ValidationError",
    "is_bookable",
]
