"""
Application service for generating, storing and querying appointment slots.

The service coordinates the repository (blob store) with the domain
components: ``ConfigValidator`` before generation, ``SlotGenerator`` for the
grid, ``SlotFilterPipeline`` and ``StatisticsReporter`` when reading back.
Every read works on a full snapshot loaded from the store and every write
replaces the stored value whole.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import List, Optional

from ..domain.exceptions import InvalidConfigError
from ..domain.models import (
    GenerationResult,
    Slot,
    SlotConfig,
    SlotFilterOptions,
    SlotStatistics,
    ValidationError,
)
from ..domain.slot_filter import SlotFilterPipeline
from ..domain.slot_generator import SlotGenerator
from ..domain.statistics import StatisticsReporter
from ..domain.timezone import TimezoneAuthority
from ..domain.validation import ConfigValidator
from .slot_repository import SlotRepository

logger = logging.getLogger(__name__)


class SlotPlannerService:
    """
    Orchestrates validation, generation, persistence and filtering.

    Collaborators default to instances built on ``authority`` so tests can
    pass only what they want to replace.
    """

    def __init__(
        self,
        repository: SlotRepository,
        authority: TimezoneAuthority,
        validator: Optional[ConfigValidator] = None,
        generator: Optional[SlotGenerator] = None,
        pipeline: Optional[SlotFilterPipeline] = None,
        reporter: Optional[StatisticsReporter] = None,
    ) -> None:
        self._repository = repository
        self._authority = authority
        self._validator = validator or ConfigValidator(authority)
        self._generator = generator or SlotGenerator(authority, self._validator)
        self._pipeline = pipeline or SlotFilterPipeline(authority)
        self._reporter = reporter or StatisticsReporter(authority)

    def validate(self, config: SlotConfig) -> List[ValidationError]:
        return self._validator.validate(config)

    async def generate_and_save(self, config: SlotConfig) -> GenerationResult:
        """
        Validate, generate and persist a slot collection.

        The configuration is saved before generation so a failed run still
        leaves the user's last input behind.

        Raises:
            InvalidConfigError: With every violated rule
            GenerationError: If the config yields no slot at all
            StorageError: If the store fails
        """
        errors = self._validator.validate(config)
        if errors:
            raise InvalidConfigError(errors)

        await self._repository.save_config(config)

        slots = self._generator.generate(config)
        estimate = self._generator.estimate(config)
        await self._repository.save_slots(slots)

        logger.info(
            "Generated %d slots across %d days in %s",
            len(slots),
            estimate.total_days,
            config.time_zone,
        )
        return GenerationResult(slots=slots, estimate=estimate)

    async def load_config(self) -> Optional[SlotConfig]:
        return await self._repository.load_config()

    async def load_slots(self) -> List[Slot]:
        return await self._repository.load_slots()

    async def filter_saved(self, options: Optional[SlotFilterOptions] = None) -> List[Slot]:
        """Load the saved snapshot and run it through the filter pipeline."""
        slots = await self._repository.load_slots()
        return self._pipeline.filter(slots, options)

    async def statistics(self, options: Optional[SlotFilterOptions] = None) -> SlotStatistics:
        """Filter the saved snapshot, then summarize the result."""
        options = self.resolve_options(options)
        filtered = await self.filter_saved(options)
        return self._reporter.summarize(filtered, options.timezone)

    def resolve_options(self, options: Optional[SlotFilterOptions] = None) -> SlotFilterOptions:
        """Fill in the reference instant and zone so every stage sees the same values."""
        options = options or SlotFilterOptions()
        return replace(
            options,
            timezone=options.timezone or self._authority.local_timezone(),
            reference_instant=options.reference_instant or self._authority.now(),
        )

    async def clear(self) -> int:
        """Remove everything stored under the planner namespace."""
        removed = await self._repository.clear()
        logger.info("Cleared %d stored key(s)", removed)
        return removed
